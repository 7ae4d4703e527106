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

__all__ = [
    "lowercase_keys",
    "flatten_body",
]


def lowercase_keys(dictionary):
    return dict(((k.lower(), v) for k, v in dictionary.items()))


def flatten_body(body):
    """
    Collapse a (possibly multi line) response body into a single line,
    joining the lines with " / ".
    """
    if body is None:
        return ''

    if isinstance(body, bytes):
        body = body.decode('utf-8', 'replace')

    lines = [line.strip() for line in body.splitlines()]
    return ' / '.join([line for line in lines if line])

