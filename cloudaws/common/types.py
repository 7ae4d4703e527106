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

from typing import Optional

from enum import Enum

if False:
    # Work around for MYPY for cyclic import problem
    from cloudaws.common.base import BaseDriver

__all__ = [
    "ErrorType",
    "CloudError",
    "ConfigurationError",
    "InternalError",
    "MalformedResponseError",
    "ProviderError",
    "ServiceError",
    "GenericCloudError",
    "ServiceUnavailableError",
    "TransientServerError",
    "NOT_FOUND_CODES",
    "is_not_found_code",
]


class ErrorType(str, Enum):
    """
    Broad classification of a service error, used by callers to decide
    between backing off, asking for more quota or giving up.
    """
    GENERAL = 'general'
    THROTTLING = 'throttling'
    QUOTA = 'quota'

    def __str__(self):
        return str(self.value)


# Service error codes with a more specific classification than GENERAL
ERROR_CODE_TYPE_MAP = {
    'Throttling': ErrorType.THROTTLING,
    'TooManyBuckets': ErrorType.QUOTA,
}


class CloudError(Exception):
    """The base class for other cloudaws exceptions"""

    def __init__(self, value, driver=None):
        # type: (str, BaseDriver) -> None
        super(CloudError, self).__init__(value)
        self.value = value
        self.driver = driver

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        return ("<" + self.__class__.__name__ + " in " +
                repr(self.driver) +
                " " +
                repr(self.value) + ">")


class ConfigurationError(CloudError):
    """
    Exception raised when a request cannot be built, e.g. there are no
    credentials to sign it with. Never retried.
    """


class InternalError(CloudError):
    """
    Exception for failures on our side of the wire: transport errors and
    responses we are unable to make sense of.
    """

    def __init__(self, value, cause=None, driver=None):
        # type: (str, Optional[BaseException], Optional[BaseDriver]) -> None
        super(InternalError, self).__init__(value=value, driver=driver)
        self.cause = cause


class MalformedResponseError(InternalError):
    """Exception for the cases when a provider returns a malformed
    response, e.g. you request XML and provider returns an empty body or
    '<h3>something' due to some error on their side."""

    def __init__(self, value, body=None, cause=None, driver=None):
        # type: (str, Optional[str], Optional[BaseException], Optional[BaseDriver]) -> None
        super(MalformedResponseError, self).__init__(value=value, cause=cause,
                                                     driver=driver)
        self.body = body

    def __repr__(self):
        return ("<MalformedResponseError in " +
                repr(self.driver) +
                " " +
                repr(self.value) +
                ">: " +
                repr(self.body))


class ProviderError(CloudError):
    """
    Exception used when provider gives back
    error response (HTTP 4xx, 5xx) for a request.
    """

    def __init__(self, value, http_code, driver=None):
        # type: (str, int, Optional[BaseDriver]) -> None
        super(ProviderError, self).__init__(value=value, driver=driver)
        self.http_code = http_code

    @property
    def status(self):
        return self.http_code

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        return repr(self.value)


class ServiceError(ProviderError):
    """
    The service answered with an ``<Error>`` envelope.

    :ivar code: Service assigned error code (e.g. ``InvalidParameterValue``)
    :ivar message: Human readable message from the service
    :ivar request_id: Request id reported by the service, if any
    :ivar error_type: :class:`ErrorType` derived from the code
    """

    def __init__(self, status, code, message, request_id=None, driver=None):
        # type: (int, Optional[str], str, Optional[str], Optional[BaseDriver]) -> None
        super(ServiceError, self).__init__(value=message, http_code=status,
                                           driver=driver)
        self.code = code
        self.message = message
        self.request_id = request_id
        self.error_type = ERROR_CODE_TYPE_MAP.get(code, ErrorType.GENERAL)

    @property
    def summary(self):
        return '%s/%s/%s: %s' % (self.http_code, self.request_id, self.code,
                                 self.message)

    def __repr__(self):
        return repr(self.summary)


class GenericCloudError(ProviderError):
    """
    Non successful response which does not carry a usable error envelope.
    ``body`` keeps the raw response text for diagnostics.
    """

    def __init__(self, value, http_code, body=None, driver=None):
        # type: (str, int, Optional[str], Optional[BaseDriver]) -> None
        super(GenericCloudError, self).__init__(value=value,
                                                http_code=http_code,
                                                driver=driver)
        self.body = body


class ServiceUnavailableError(ProviderError):
    """Exception used when the provider keeps failing with 500 or 503 after
    all the retry attempts have been used up."""

    def __init__(self, value='Cloud service is currently unavailable.',
                 http_code=503, driver=None):
        # type: (str, int, Optional[BaseDriver]) -> None
        super(ServiceUnavailableError, self).__init__(value,
                                                      http_code=http_code,
                                                      driver=driver)


class TransientServerError(ProviderError):
    """
    Raised for a 500 or 503 response while there are attempts left. It is
    consumed by the retry loop and never surfaces to callers.
    """


# Error codes which mean the addressed resource doesn't exist. Codes ending
# in "NotFound" (e.g. "InvalidGroup.NotFound") are matched as well.
NOT_FOUND_CODES = frozenset([
    'NoSuchHostedZone',
    'NoSuchChange',
    'NoSuchEntity',
    'LoadBalancerNotFound',
])


def is_not_found_code(code):
    # type: (Optional[str]) -> bool
    if not code:
        return False
    return code in NOT_FOUND_CODES or code.endswith('NotFound')
