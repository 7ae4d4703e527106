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

"""
Signed request executors.

An executor ("method") runs exactly one logical AWS API call: it signs the
request when it is constructed, sends it, retries 500 and 503 responses and
turns everything else into either the parsed XML document or a typed
exception from :mod:`cloudaws.common.types`.

Two flavours are provided:

* :class:`Route53Method` for the REST-XML Route53 API (AWS3-HTTPS date
  signature, verb looked up from the operation name)
* :class:`EC2Method`, :class:`ELBMethod` and :class:`IAMMethod` for the
  query APIs (Signature Version 2, always a POSTed form)
"""

import logging
from collections import namedtuple
from types import MappingProxyType
from urllib.parse import urlencode, urlparse

import requests

from cloudaws.common.actions import resolve_verb
from cloudaws.common.aws import AWSBaseResponse
from cloudaws.common.aws import AWSRequestSignerAWS3HTTPS
from cloudaws.common.aws import AWSRequestSignerAlgorithmV2
from cloudaws.common.aws import canonical_query_string
from cloudaws.common.aws import format_rfc1123_timestamp
from cloudaws.common.aws import format_iso8601_timestamp
from cloudaws.common.aws import DEFAULT_REGION
from cloudaws.common.aws import EC2_API_VERSION, ELB_API_VERSION
from cloudaws.common.aws import IAM_API_VERSION
from cloudaws.common.types import ConfigurationError
from cloudaws.common.types import GenericCloudError
from cloudaws.common.types import InternalError
from cloudaws.common.types import MalformedResponseError
from cloudaws.common.types import ServiceError
from cloudaws.common.types import ServiceUnavailableError
from cloudaws.common.types import TransientServerError
from cloudaws.common.types import is_not_found_code
from cloudaws.utils.misc import flatten_body
from cloudaws.utils.retry import Retry, DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS

__all__ = [
    'SignedRequest',
    'InvocationResult',
    'AWSMethod',
    'Route53Method',
    'QueryMethod',
    'EC2Method',
    'ELBMethod',
    'IAMMethod',
]

_logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = (500, 503)

SERVICE_UNAVAILABLE_MESSAGE = 'Cloud service is currently unavailable.'
SERVER_ERROR_MESSAGE = ('The cloud service encountered a server error while '
                        'processing your request. Response from server '
                        'was:\n')

XML_CONTENT_TYPE = 'text/xml'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded; charset=utf-8'

ELB_URL_TEMPLATE = 'https://elasticloadbalancing.%s.amazonaws.com'
IAM_URL = 'https://iam.amazonaws.com'


class SignedRequest(namedtuple('SignedRequest', [
        'operation', 'verb', 'base_url', 'params', 'url', 'headers',
        'payload', 'body', 'timestamp', 'signature', 'signer'])):
    """
    Immutable description of one signed HTTP request.

    :ivar base_url: URL the caller asked for
    :ivar url: URL which is sent, query string included
    :ivar payload: Body given by the caller (REST flavour only)
    :ivar body: Body which is sent on the wire
    :ivar signer: Callable which builds a new :class:`SignedRequest` from
                  the same inputs
    """
    __slots__ = ()

    def with_body(self, body):
        return self.signer(operation=self.operation, verb=self.verb,
                           url=self.base_url, params=self.params,
                           body=body, timestamp=self.timestamp)

    def renew(self, now=None):
        """
        Return a new request for the same operation, URL, parameters and
        payload, carrying a fresh timestamp and signature.
        """
        return self.signer(operation=self.operation, verb=self.verb,
                           url=self.base_url, params=self.params,
                           body=self.payload, now=now)


class InvocationResult(object):
    """
    Outcome of :meth:`AWSMethod.try_invoke`.

    Exactly one of ``document`` (for ``ok``) and ``error`` (for
    ``not_found`` and ``failure``) is set.
    """

    OK = 'ok'
    NOT_FOUND = 'not_found'
    FAILURE = 'failure'

    __slots__ = ('kind', 'document', 'error')

    def __init__(self, kind, document=None, error=None):
        self.kind = kind
        self.document = document
        self.error = error

    @classmethod
    def ok(cls, document):
        return cls(cls.OK, document=document)

    @classmethod
    def not_found(cls, error):
        return cls(cls.NOT_FOUND, error=error)

    @classmethod
    def failure(cls, error):
        return cls(cls.FAILURE, error=error)

    @property
    def is_ok(self):
        return self.kind == self.OK

    @property
    def is_not_found(self):
        return self.kind == self.NOT_FOUND

    @property
    def is_failure(self):
        return self.kind == self.FAILURE

    def unwrap(self):
        """
        Return the document or raise the stored error.
        """
        if self.is_ok:
            return self.document
        raise self.error

    def __repr__(self):
        if self.is_ok:
            return '<InvocationResult ok>'
        return '<InvocationResult %s: %r>' % (self.kind, self.error)


class AWSMethod(object):
    """
    Base signed request executor.

    Subclasses implement :meth:`resolve_verb` and :meth:`sign`.

    :ivar attempts: Number of HTTP round trips made so far
    :ivar request: The :class:`SignedRequest` which will be (or was last)
                   sent
    """

    responseCls = AWSBaseResponse

    def __init__(self, connection, operation, url, params=None):
        """
        :param connection: Connection carrying the credentials and region.
        :type connection: :class:`cloudaws.common.aws.AWSConnection`

        :param operation: API operation, e.g. ``ListHostedZones``.
        :type operation: ``str``

        :param url: Absolute http(s) URL without embedded credentials.
        :type url: ``str``

        :param params: Query or form parameters.
        :type params: ``dict``
        """
        if connection is None:
            raise ConfigurationError('No connection with credentials was '
                                     'provided')

        connection.check_credentials()

        if not operation:
            raise ConfigurationError('Operation name must not be empty',
                                     driver=connection.driver)

        self._check_url(url, connection)

        self.connection = connection
        self.operation = operation
        self.url = url
        self.params = MappingProxyType(dict(params or {}))
        self.verb = self.resolve_verb(operation)

        retry_delay = getattr(connection, 'retry_delay', None)
        max_attempts = getattr(connection, 'max_attempts', None)
        self.retry_delay = DEFAULT_DELAY if retry_delay is None \
            else retry_delay
        self.max_attempts = DEFAULT_MAX_ATTEMPTS if max_attempts is None \
            else max_attempts

        self.attempts = 0
        self.request = self.sign(operation=self.operation, verb=self.verb,
                                 url=self.url, params=self.params)

    def _check_url(self, url, connection):
        parsed = urlparse(url or '')

        if parsed.scheme not in ('http', 'https') or not parsed.hostname:
            raise ConfigurationError('Invalid url: %s' % (url),
                                     driver=connection.driver)

        if parsed.username is not None or parsed.password is not None:
            raise ConfigurationError('Credentials must not be embedded in '
                                     'the url', driver=connection.driver)

    def resolve_verb(self, operation):
        raise NotImplementedError(
            'resolve_verb not implemented for this executor')

    def sign(self, operation, verb, url, params, body=None, now=None,
             timestamp=None):
        """
        Build a :class:`SignedRequest`.

        :param now: Seconds since the epoch to sign with (defaults to the
                    current time)
        :param timestamp: Reuse an already formatted timestamp instead
        """
        raise NotImplementedError(
            'sign not implemented for this executor')

    @property
    def driver(self):
        return self.connection.driver

    def invoke(self, body=None):
        """
        Execute the call and return the root of the response document.

        :param body: Request body, only sent with POST.
        :type body: ``str``

        :rtype: :class:`xml.etree.ElementTree.Element`

        :raises ConfigurationError: if the request can't be built
        :raises InternalError: on transport failures and malformed
                               success responses
        :raises ServiceError: if the service returned an error envelope
        :raises GenericCloudError: if the error response can't be read
        :raises ServiceUnavailableError: after ``max_attempts`` 500 or 503
                                         responses
        """
        if body is not None:
            self.request = self.request.with_body(body)

        if self.attempts:
            # A previous invoke() used up this signature
            self.request = self.request.renew()
            self.attempts = 0

        retry_request = Retry(retry_exceptions=(TransientServerError,),
                              retry_delay=self.retry_delay,
                              max_attempts=self.max_attempts)
        return retry_request(self._attempt)()

    def try_invoke(self, body=None):
        """
        Like :meth:`invoke`, but service level errors are returned as an
        :class:`InvocationResult` instead of being raised.

        Configuration, transport and service unavailable errors still
        raise.

        :rtype: :class:`InvocationResult`
        """
        try:
            document = self.invoke(body=body)
        except ServiceError as e:
            if is_not_found_code(e.code):
                return InvocationResult.not_found(e)
            return InvocationResult.failure(e)
        except GenericCloudError as e:
            return InvocationResult.failure(e)

        return InvocationResult.ok(document)

    def _attempt(self):
        if self.attempts > 0:
            # Never resend a stale signature
            self.request = self.request.renew()

        self.attempts += 1
        request = self.request

        _logger.debug('%s %s (%s, attempt %d of %d)', request.verb,
                      request.url, self.operation, self.attempts,
                      self.max_attempts)

        try:
            raw = self.connection.request(request.url, data=request.body,
                                          headers=dict(request.headers),
                                          method=request.verb)
        except requests.RequestException as e:
            raise InternalError('Communication error calling %s: %s' %
                                (self.operation, e), cause=e,
                                driver=self.driver)

        try:
            try:
                response = self.responseCls(raw, self.connection)
            except requests.RequestException as e:
                raise InternalError('Error reading %s response: %s' %
                                    (self.operation, e), cause=e,
                                    driver=self.driver)

            return self._handle_response(response)
        finally:
            # hand the connection back to the pool
            raw.close()

    def _handle_response(self, response):
        status = response.status

        if response.success():
            return response.parse_body()

        if status in TRANSIENT_STATUSES:
            if self.attempts >= self.max_attempts:
                _logger.error('%s failed with HTTP %d after %d attempts',
                              self.operation, status, self.attempts)

                if status == 503:
                    raise ServiceUnavailableError(SERVICE_UNAVAILABLE_MESSAGE,
                                                  http_code=status,
                                                  driver=self.driver)

                raise ServiceUnavailableError(SERVER_ERROR_MESSAGE +
                                              response.body,
                                              http_code=status,
                                              driver=self.driver)

            _logger.warning('%s returned HTTP %d, retrying in %s seconds',
                            self.operation, status, self.retry_delay)
            raise TransientServerError('HTTP %d from %s' %
                                       (status, self.operation),
                                       http_code=status, driver=self.driver)

        raise self._parse_error(response)

    def _parse_error(self, response):
        status = response.status

        try:
            code, message, request_id = response.parse_error()
        except MalformedResponseError:
            if status == 403:
                return GenericCloudError('API Access Denied (403): %s' %
                                         (flatten_body(response.body)),
                                         http_code=status,
                                         body=response.body,
                                         driver=self.driver)

            return GenericCloudError('Unable to parse error.',
                                     http_code=status, body=response.body,
                                     driver=self.driver)

        if code is None and message is None:
            return GenericCloudError('Unable to identify error condition: '
                                     '%s/%s/%s' % (status, request_id, code),
                                     http_code=status, body=response.body,
                                     driver=self.driver)

        if message is None:
            message = code

        error = ServiceError(status, code, message, request_id=request_id,
                             driver=self.driver)
        _logger.debug('%s failed: %s', self.operation, error.summary)
        return error


class Route53Method(AWSMethod):
    """
    Executor for the Route53 REST-XML API.

    The verb comes from :func:`cloudaws.common.actions.resolve_verb`,
    parameters are sent in the query string and the body (POST only) is the
    XML document given to :meth:`invoke`.
    """

    def resolve_verb(self, operation):
        return resolve_verb(operation)

    def sign(self, operation, verb, url, params, body=None, now=None,
             timestamp=None):
        if timestamp is None:
            timestamp = format_rfc1123_timestamp(now)

        signer = AWSRequestSignerAWS3HTTPS(
            access_key=self.connection.access_key,
            access_secret=self.connection.secret_key)

        headers = {'Content-Type': XML_CONTENT_TYPE}
        headers, signature = signer.get_request_headers(headers, timestamp)

        target = url
        if params:
            separator = '&' if '?' in url else '?'
            target = '%s%s%s' % (url, separator,
                                 urlencode(sorted(params.items())))

        return SignedRequest(operation=operation, verb=verb, base_url=url,
                             params=params, url=target,
                             headers=MappingProxyType(headers),
                             payload=body,
                             body=body if verb == 'POST' else None,
                             timestamp=timestamp, signature=signature,
                             signer=self.sign)


class QueryMethod(AWSMethod):
    """
    Executor for the AWS query APIs.

    The operation is the ``Action`` parameter. Requests are always a POSTed,
    form encoded and Signature Version 2 signed set of parameters, so
    :meth:`invoke` doesn't accept a body.
    """

    version = None  # type: str

    def __init__(self, connection, url, params=None):
        params = dict(params or {})
        super(QueryMethod, self).__init__(connection,
                                          params.get('Action'), url,
                                          params=params)

    def resolve_verb(self, operation):
        return 'POST'

    def invoke(self, body=None):
        if body is not None:
            raise ConfigurationError('%s requests are built from their '
                                     'parameters and take no body' %
                                     (self.operation), driver=self.driver)
        return super(QueryMethod, self).invoke()

    def sign(self, operation, verb, url, params, body=None, now=None,
             timestamp=None):
        if timestamp is None:
            timestamp = format_iso8601_timestamp(now)

        parsed = urlparse(url)

        signer = AWSRequestSignerAlgorithmV2(
            access_key=self.connection.access_key,
            access_secret=self.connection.secret_key,
            version=params.get('Version') or self.version)

        signed_params = signer.get_request_params(
            params=dict(params), timestamp=timestamp, host=parsed.netloc,
            method=verb, path=parsed.path or '/')

        headers = {'Content-Type': FORM_CONTENT_TYPE}

        return SignedRequest(operation=operation, verb=verb, base_url=url,
                             params=params, url=url,
                             headers=MappingProxyType(headers),
                             payload=None,
                             body=canonical_query_string(signed_params),
                             timestamp=timestamp,
                             signature=signed_params['Signature'],
                             signer=self.sign)


class EC2Method(QueryMethod):
    """
    EC2 query API executor, ``url`` is the regional EC2 endpoint.
    """
    version = EC2_API_VERSION


class ELBMethod(QueryMethod):
    """
    Elastic Load Balancing executor for the connection's region.
    """
    version = ELB_API_VERSION

    def __init__(self, connection, params=None):
        region = getattr(connection, 'region', None) or DEFAULT_REGION
        super(ELBMethod, self).__init__(connection, ELB_URL_TEMPLATE % region,
                                        params=params)


class IAMMethod(QueryMethod):
    """
    IAM executor, IAM has a single global endpoint.
    """
    version = IAM_API_VERSION

    def __init__(self, connection, params=None):
        super(IAMMethod, self).__init__(connection, IAM_URL, params=params)
