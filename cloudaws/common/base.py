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

from typing import Dict, Optional, Tuple

from xml.etree import ElementTree as ET
from urllib.parse import urlencode, urlparse

import cloudaws

from cloudaws.http import CloudConnection
from cloudaws.utils.misc import lowercase_keys
from cloudaws.common.types import ConfigurationError, MalformedResponseError

__all__ = [
    'Response',
    'XmlResponse',
    'Connection',
    'ConnectionKey',
    'ConnectionUserAndKey',
    'BaseDriver',
]

# Status codes which carry a usable response document
SUCCESS_STATUSES = (200, 201, 202)


class Response(object):
    """
    A Base Response class to derive from.

    Wraps a :class:`requests.Response` whose body has already been read.
    Unlike the raw response it never raises, the caller inspects
    ``success()`` and decides what to do.
    """

    body = None
    status = 200
    headers = {}  # type: Dict[str, str]
    error = None
    connection = None
    parse_zero_length_body = False

    def __init__(self, response, connection):
        self.body = response.text.strip() if response.text else ''
        self.status = response.status_code

        self.headers = lowercase_keys(dict(response.headers))
        self.error = response.reason
        self.connection = connection

    def parse_body(self):
        """
        Parse response body.

        Override in a provider's subclass.

        :return: Parsed body.
        """
        return self.body

    def parse_error(self):
        """
        Parse the error messages.

        Override in a provider's subclass.

        :return: Parsed error.
        """
        return self.body

    def success(self):
        """
        Determine if our request was successful.

        :rtype: ``bool``
        """
        return self.status in SUCCESS_STATUSES

    @property
    def driver(self):
        return getattr(self.connection, 'driver', None)


class XmlResponse(Response):
    """
    A Base XML Response class to derive from.
    """
    def parse_body(self):
        if len(self.body) == 0 and not self.parse_zero_length_body:
            raise MalformedResponseError('Empty response body',
                                         body=self.body,
                                         driver=self.driver)

        try:
            body = ET.XML(self.body)
        except ET.ParseError as e:
            raise MalformedResponseError('Failed to parse XML',
                                         body=self.body,
                                         cause=e,
                                         driver=self.driver)
        return body


class Connection(object):
    """
    A Base Connection class to derive from.

    Holds the endpoint settings and one pooled :class:`CloudConnection` per
    (host, port, scheme) that requests were made to.
    """
    conn_class = CloudConnection

    responseCls = Response
    connection = None
    host = '127.0.0.1'
    port = 443
    timeout = None  # type: Optional[float]
    secure = 1
    driver = None
    proxy_url = None

    retry_delay = None  # type: Optional[float]
    max_attempts = None  # type: Optional[int]

    def __init__(self, secure=True, host=None, port=None, url=None,
                 timeout=None, proxy_url=None, retry_delay=None,
                 max_attempts=None):
        self.secure = secure and 1 or 0
        self.ua = []
        self._connections = {}  # type: Dict[Tuple[str, int, int], CloudConnection]

        self.request_path = ''

        if host:
            self.host = host

        if port is not None:
            self.port = port
        else:
            if self.secure == 1:
                self.port = 443
            else:
                self.port = 80

        if url:
            (self.host, self.port, self.secure,
             self.request_path) = self._tuple_from_url(url)

        self.timeout = timeout or self.timeout
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.proxy_url = proxy_url

    def _tuple_from_url(self, url):
        secure = 1
        port = None
        (scheme, netloc, request_path, param,
         query, fragment) = urlparse(url)

        if scheme not in ['http', 'https']:
            raise ConfigurationError('Invalid scheme: %s in url %s' %
                                     (scheme, url), driver=self.driver)

        if not netloc:
            raise ConfigurationError('Missing host in url %s' % (url),
                                     driver=self.driver)

        if '@' in netloc:
            raise ConfigurationError('Credentials must not be embedded in '
                                     'url %s' % (scheme + '://...'),
                                     driver=self.driver)

        if scheme == "http":
            secure = 0

        if ":" in netloc:
            netloc, port = netloc.rsplit(":", 1)
            port = int(port)

        if not port:
            if scheme == "http":
                port = 80
            else:
                port = 443

        host = netloc

        return (host, port, secure, request_path)

    def connect(self, host=None, port=None, base_url=None):
        """
        Establish a connection with the API server.

        Connections are cached so the underlying pool is reused by every
        request to the same endpoint.

        :type host: ``str``
        :param host: Optional host to override our default

        :type port: ``int``
        :param port: Optional port to override our default

        :type base_url: ``str``
        :param base_url: Optional absolute URL to take host, port and
                         scheme from

        :returns: A connection
        :rtype: :class:`cloudaws.http.CloudConnection`
        """
        secure = self.secure

        if base_url is not None:
            (host, port, secure, _) = self._tuple_from_url(base_url)
        else:
            host = host or self.host
            port = port or self.port

        key = (host, int(port), secure)
        connection = self._connections.get(key)

        if connection is None:
            kwargs = {'host': host, 'port': int(port), 'secure': secure}

            if self.timeout:
                kwargs.update({'timeout': self.timeout})

            if self.proxy_url:
                kwargs.update({'proxy_url': self.proxy_url})

            connection = self.conn_class(**kwargs)
            self._connections[key] = connection

        self.connection = connection
        return connection

    def _user_agent(self):
        driver_name = self.driver.name if self.driver is not None else 'AWS'
        return 'cloudaws/%s (%s)%s' % (
            cloudaws.__version__,
            driver_name,
            "".join([" (%s)" % x for x in self.ua]))

    def user_agent_append(self, token):
        """
        Append a token to a user agent string.

        Users of the library should call this to uniquely identify their
        requests to a provider.

        :type token: ``str``
        :param token: Token to add to the user agent.
        """
        self.ua.append(token)

    def request(self, action, params=None, data=None, headers=None,
                method='GET'):
        """
        Send a request and return the raw :class:`requests.Response`.

        The caller owns the returned response and must ``close()`` it.

        :param action: Absolute URL or a path relative to the default host
        :type action: ``str``

        :param params: Optional query string parameters
        :type params: ``dict``

        :param data: Optional request body
        :type data: ``str``

        :param headers: Extra request headers
        :type headers: ``dict``

        :param method: HTTP verb
        :type method: ``str``
        """
        headers = dict(headers or {})
        headers = self.add_default_headers(headers)

        if action.startswith('http://') or action.startswith('https://'):
            connection = self.connect(base_url=action)
            parsed = urlparse(action)
            action = parsed.path or '/'

            if parsed.query:
                action = '%s?%s' % (action, parsed.query)
        else:
            connection = self.connect()
            action = self.morph_action_hook(action)

        if params:
            separator = '&' if '?' in action else '?'
            action = '%s%s%s' % (action, separator, urlencode(params))

        return connection.request(method=method, url=action, body=data,
                                  headers=headers)

    def morph_action_hook(self, action):
        if not action.startswith('/'):
            action = '/' + action
        return self.request_path.rstrip('/') + action

    def add_default_headers(self, headers):
        """
        Adds default headers (such as Authorization, X-Foo-Bar)
        to the passed `headers`

        Should return a dictionary.
        """
        headers.setdefault('User-Agent', self._user_agent())
        return headers

    def close(self):
        for connection in self._connections.values():
            connection.close()


class ConnectionKey(Connection):
    """
    Base connection which accepts a single ``key`` argument.
    """
    def __init__(self, key, secure=True, host=None, port=None, url=None,
                 **kwargs):
        """
        Initialize `key`; set `secure` to an ``int`` based on
        passed value.
        """
        super(ConnectionKey, self).__init__(secure=secure, host=host,
                                            port=port, url=url, **kwargs)
        self.key = key


class ConnectionUserAndKey(ConnectionKey):
    """
    Base connection which accepts a user_id and key
    """

    user_id = None

    def __init__(self, user_id, key, secure=True, host=None, port=None,
                 url=None, **kwargs):
        super(ConnectionUserAndKey, self).__init__(key, secure=secure,
                                                   host=host, port=port,
                                                   url=url, **kwargs)
        self.user_id = user_id


class BaseDriver(object):
    """
    Base driver class from which other classes can inherit from.
    """

    name = None  # type: str
    website = None  # type: str

    connectionCls = ConnectionUserAndKey

    def __init__(self, key, secret=None, secure=True, host=None, port=None,
                 region=None, **kwargs):
        """
        :param    key:    API key or username to be used (required)
        :type     key:    ``str``

        :param    secret: Secret password to be used (required)
        :type     secret: ``str``

        :param    secure: Whether to use HTTPS or HTTP. Note: Some providers
                          only support HTTPS, and it is on by default.
        :type     secure: ``bool``

        :param    host: Override hostname used for connections.
        :type     host: ``str``

        :param    port: Override port used for connections.
        :type     port: ``int``

        :param    region: Optional driver region. Only used by drivers
                          which support multiple regions.
        :type     region: ``str``

        :keyword  timeout: Request timeout in seconds.
        :keyword  proxy_url: HTTP(S) proxy to send the requests through.
        :keyword  retry_delay: Seconds to sleep between attempts on a
                               transient server error.
        :keyword  max_attempts: Number of attempts before giving up.
        """
        self.key = key
        self.secret = secret
        self.secure = secure
        self.region = region

        conn_kwargs = self._ex_connection_class_kwargs()
        conn_kwargs.update(kwargs)

        self.connection = self.connectionCls(key, secret, secure=secure,
                                             host=host, port=port,
                                             **conn_kwargs)
        self.connection.driver = self

    def _ex_connection_class_kwargs(self):
        """
        Return extra connection keyword arguments which are passed to the
        Connection class constructor.
        """
        return {}

    def __repr__(self):
        return '<%s region=%s>' % (self.__class__.__name__, self.region)
