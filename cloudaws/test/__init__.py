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

import unittest
from urllib.parse import urlparse, parse_qs, parse_qsl

import requests_mock

from cloudaws.http import CloudConnection


XML_HEADERS = {'content-type': 'text/xml'}

STATUS_REASONS = {
    200: 'OK',
    201: 'Created',
    202: 'Accepted',
    400: 'Bad Request',
    403: 'Forbidden',
    404: 'Not Found',
    409: 'Conflict',
    500: 'Internal Server Error',
    503: 'Service Unavailable',
}


class CloudTestCase(unittest.TestCase):
    def __init__(self, *args, **kwargs):
        self._visited_urls = []
        self._executed_mock_methods = []
        self._sent_requests = []
        self._responses = []
        super(CloudTestCase, self).__init__(*args, **kwargs)

    def setUp(self):
        self._visited_urls = []
        self._executed_mock_methods = []
        self._sent_requests = []
        self._responses = []

    def _add_visited_url(self, url):
        self._visited_urls.append(url)

    def _add_executed_mock_method(self, method_name):
        self._executed_mock_methods.append(method_name)

    def _add_sent_request(self, method, url, body, headers):
        self._sent_requests.append({'method': method, 'url': url,
                                    'body': body, 'headers': headers})

    def _add_response(self, response):
        self._responses.append(response)

    def assertExecutedMethodCount(self, expected):
        actual = len(self._executed_mock_methods)
        self.assertEqual(actual, expected,
                         'expected %d, but %d mock methods were executed'
                         % (expected, actual))


class MockHttp(CloudConnection):
    """
    A mock HTTP client/server suitable for testing purposes. This replaces
    :class:`CloudConnection` by implementing its API and returning a mock
    response.

    Define methods by request path, replacing slashes (/) with underscores
    (_). Each of these mock methods should return a tuple of:

        (int status, str body, dict headers, str reason)
    """
    type = None
    use_param = None  # will use this param to namespace the request function
    test = None  # TestCase instance which is using this mock

    def _get_request(self, method, url, body=None, headers=None):
        # Find a method we can use for this request
        parsed = urlparse(url)
        path, query = parsed.path, parsed.query
        qs = parse_qs(query)

        # Query APIs send their parameters in the form body
        if body and use_form_body(headers):
            qs.update(parse_qs(body))

        if path.endswith('/'):
            path = path[:-1]
        meth_name = self._get_method_name(type=self.type,
                                          use_param=self.use_param,
                                          qs=qs, path=path)
        meth = getattr(self, meth_name)

        if self.test and isinstance(self.test, CloudTestCase):
            self.test._add_visited_url(url=url)
            self.test._add_executed_mock_method(method_name=meth_name)
            self.test._add_sent_request(method, url, body, headers)
        return meth(method, url, body, headers)

    def request(self, method, url, body=None, headers=None, stream=False):
        headers = self._normalize_headers(headers=headers)
        r_status, r_body, r_headers, r_reason = self._get_request(
            method, url, body, headers)
        if r_body is None:
            r_body = ''

        with requests_mock.mock() as m:
            m.register_uri(requests_mock.ANY, requests_mock.ANY, text=r_body,
                           reason=r_reason, headers=r_headers,
                           status_code=r_status)
            response = super(MockHttp, self).request(
                method=method, url=url, body=body, headers=headers,
                stream=stream)

        if self.test and isinstance(self.test, CloudTestCase):
            self.test._add_response(response)
        return response

    def _get_method_name(self, type, use_param, qs, path):
        path = path.split('?')[0]
        meth_name = (
            path
            .replace('/', '_')
            .replace('.', '_')
            .replace('-', '_'))

        if type:
            meth_name = '%s_%s' % (meth_name, self.type)

        if use_param and use_param in qs:
            param = qs[use_param][0].replace('.', '_').replace('-', '_')
            meth_name = '%s_%s' % (meth_name, param)

        if meth_name == '':
            meth_name = 'root'

        return meth_name

    def _response(self, status, body='', headers=None):
        if headers is None:
            headers = XML_HEADERS
        return (status, body, headers, STATUS_REASONS.get(status, ''))

    def assertUrlContainsQueryParams(self, url, expected_params, strict=False):
        """
        Assert that provided url contains provided query parameters.

        :param url: URL to assert.
        :type url: ``str``

        :param expected_params: Dictionary of expected query parameters.
        :type expected_params: ``dict``

        :param strict: Assert that provided url contains only expected_params.
                       (defaults to ``False``)
        :type strict: ``bool``
        """
        question_mark_index = url.find('?')

        if question_mark_index != -1:
            url = url[question_mark_index + 1:]

        params = dict(parse_qsl(url))

        if strict:
            assert params == expected_params
        else:
            for key, value in expected_params.items():
                assert key in params
                assert params[key] == value


def use_form_body(headers):
    content_type = (headers or {}).get('Content-Type', '')
    return content_type.startswith('application/x-www-form-urlencoded')


if __name__ == "__main__":
    import doctest
    doctest.testmod()
