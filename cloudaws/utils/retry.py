# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import time
from functools import wraps
import logging

from cloudaws.common.types import TransientServerError

__all__ = [
    "Retry",
]

_logger = logging.getLogger(__name__)

# Constants used by the ``retry`` class
# All the time values (delay, backoff) are in seconds
DEFAULT_DELAY = 5  # default sleep delay used in each iterator
DEFAULT_MAX_ATTEMPTS = 5  # total number of calls, the first one included
DEFAULT_BACKOFF = 1  # retry backup multiplier
RETRY_EXCEPTIONS = (
    TransientServerError,
)


class Retry(object):
    def __init__(self, retry_exceptions=RETRY_EXCEPTIONS,
                 retry_delay=DEFAULT_DELAY,
                 max_attempts=DEFAULT_MAX_ATTEMPTS,
                 backoff=DEFAULT_BACKOFF):
        """
        Wrapper around retrying that helps to handle common transient
        exceptions.

        The wrapped callable is invoked at most ``max_attempts`` times. An
        exception listed in ``retry_exceptions`` is followed by a sleep and
        another call, every other exception propagates right away. When the
        last attempt fails its exception is re-raised.

        :param retry_exceptions: types of exceptions to retry on.
        :param retry_delay: retry delay between the attempts.
        :param max_attempts: maximum number of calls.
        :param backoff: multiplier added to delay between attempts.

        :Example:

        retry_request = Retry(retry_delay=5, max_attempts=5)
        retry_request(self._attempt)()
        """
        if retry_exceptions is None:
            retry_exceptions = RETRY_EXCEPTIONS
        if retry_delay is None:
            retry_delay = DEFAULT_DELAY
        if max_attempts is None:
            max_attempts = DEFAULT_MAX_ATTEMPTS
        if backoff is None:
            backoff = DEFAULT_BACKOFF

        self.retry_exceptions = tuple(retry_exceptions)
        self.retry_delay = max(retry_delay, 0)
        self.max_attempts = max(max_attempts, 1)
        self.backoff = backoff

    def __call__(self, func):
        @wraps(func)
        def retry_loop(*args, **kwargs):
            current_delay = self.retry_delay
            attempt = 0

            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not self.should_retry(exc):
                        raise

                    if attempt >= self.max_attempts:
                        _logger.debug('Giving up after %d attempts: %s',
                                      attempt, exc)
                        raise

                    _logger.debug('Attempt %d of %d failed (%s), retrying '
                                  'in %s seconds', attempt, self.max_attempts,
                                  exc, current_delay)
                    time.sleep(current_delay)
                    current_delay *= self.backoff

        return retry_loop

    def should_retry(self, exception):
        return isinstance(exception, self.retry_exceptions)
