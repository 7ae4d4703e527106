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

import base64
import hmac
import time
from hashlib import sha256
from urllib.parse import quote as urlquote

from xml.etree import ElementTree as ET

from cloudaws.common.base import ConnectionUserAndKey, XmlResponse, BaseDriver
from cloudaws.common.types import ConfigurationError, MalformedResponseError
from cloudaws.utils.xml import get_elements_by_tag_name

__all__ = [
    'AWSBaseResponse',

    'AWSConnection',

    'AWSRequestSigner',
    'AWSRequestSignerAWS3HTTPS',
    'AWSRequestSignerAlgorithmV2',

    'AWSDriver',

    'format_rfc1123_timestamp',
    'format_iso8601_timestamp',
    'canonical_query_string',
]

DEFAULT_REGION = 'us-east-1'

EC2_API_VERSION = '2012-07-20'
ELB_API_VERSION = '2011-04-01'
IAM_API_VERSION = '2010-05-08'

RFC1123_FORMAT = '%a, %d %b %Y %H:%M:%S UTC'
ISO8601_FORMAT = '%Y-%m-%dT%H:%M:%S'

SIGNATURE_METHOD = 'HmacSHA256'


def format_rfc1123_timestamp(now=None):
    """
    Format ``now`` (seconds since the epoch, defaults to the current time)
    as ``Fri, 09 Nov 2012 15:04:05 UTC``.
    """
    if now is None:
        now = time.time()
    return time.strftime(RFC1123_FORMAT, time.gmtime(now))


def format_iso8601_timestamp(now=None):
    """
    Format ``now`` as ``2012-11-09T15:04:05.123Z`` (UTC, milliseconds).
    """
    if now is None:
        now = time.time()
    millis = int((now % 1) * 1000)
    return '%s.%03dZ' % (time.strftime(ISO8601_FORMAT, time.gmtime(now)),
                         millis)


def _sign(secret, msg):
    b64_hmac = base64.b64encode(
        hmac.new(secret.encode('utf-8'), msg.encode('utf-8'),
                 digestmod=sha256).digest()
    )
    return b64_hmac.decode('utf-8')


class AWSBaseResponse(XmlResponse):
    """
    Response which knows how to read the AWS ``<Error>`` envelope.

    Error documents look like::

        <ErrorResponse>
          <Error><Code>...</Code><Message>...</Message></Error>
          <RequestID>...</RequestID>
        </ErrorResponse>

    Route53 and EC2 spell the request id element differently and only some
    services put the envelope in a namespace, so every lookup is done by
    local name.
    """

    def _parse_error_details(self, element):
        """
        Parse code and message from the provided error element.

        :return: ``tuple`` with two elements: (code, message)
        :rtype: ``tuple``
        """
        code = self._first_text(element, 'Code')
        message = self._first_text(element, 'Message')

        return code, message

    def _first_text(self, element, tag):
        nodes = get_elements_by_tag_name(element, tag)
        if not nodes:
            return None
        return (nodes[0].text or '').strip() or None

    def parse_error(self):
        """
        Parse the error envelope.

        :return: ``tuple`` (code, message, request_id). Code and message are
                 ``None`` when the document has no ``Error`` element.
        :rtype: ``tuple``

        :raises MalformedResponseError: if the body isn't XML
        """
        try:
            body = ET.XML(self.body)
        except ET.ParseError as e:
            raise MalformedResponseError('Failed to parse XML',
                                         body=self.body,
                                         cause=e,
                                         driver=self.driver)

        code, message = None, None
        errors = get_elements_by_tag_name(body, 'Error')

        if errors:
            code, message = self._parse_error_details(element=errors[0])

        request_id = (self._first_text(body, 'RequestID') or
                      self._first_text(body, 'RequestId'))

        return code, message, request_id


class AWSRequestSigner(object):
    """
    Class which handles signing the outgoing AWS requests.
    """

    def __init__(self, access_key, access_secret, version=None):
        """
        :param access_key: Access key.
        :type access_key: ``str``

        :param access_secret: Access secret.
        :type access_secret: ``str``

        :param version: API version.
        :type version: ``str``
        """
        self.access_key = access_key
        self.access_secret = access_secret
        self.version = version


class AWSRequestSignerAWS3HTTPS(AWSRequestSigner):
    """
    AWS3-HTTPS signing used by Route53: the signature only covers the
    request date.
    """

    def get_signature(self, timestamp):
        return _sign(self.access_secret, timestamp)

    def get_authorization_header(self, signature):
        return ('AWS3-HTTPS AWSAccessKeyId=%s,Algorithm=%s,Signature=%s' %
                (self.access_key, SIGNATURE_METHOD, signature))

    def get_request_headers(self, headers, timestamp):
        signature = self.get_signature(timestamp)
        headers['x-amz-date'] = timestamp
        headers['Date'] = timestamp
        headers['X-Amzn-Authorization'] = \
            self.get_authorization_header(signature)
        return headers, signature


class AWSRequestSignerAlgorithmV2(AWSRequestSigner):
    """
    Query string Signature Version 2 used by EC2, ELB and IAM.
    """

    def get_request_params(self, params, timestamp, host, method='POST',
                           path='/'):
        params['AWSAccessKeyId'] = self.access_key
        params['SignatureVersion'] = '2'
        params['SignatureMethod'] = SIGNATURE_METHOD
        params['Timestamp'] = timestamp
        params['Version'] = self.version
        params['Signature'] = self._get_aws_auth_param(
            params=params, secret_key=self.access_secret, host=host,
            method=method, path=path)
        return params

    def _get_aws_auth_param(self, params, secret_key, host, method='POST',
                            path='/'):
        """
        Creates the signature required for AWS, per
        http://bit.ly/aR7GaQ [docs.amazonwebservices.com]:

        StringToSign = HTTPVerb + "\n" +
                       ValueOfHostHeaderInLowercase + "\n" +
                       HTTPRequestURI + "\n" +
                       CanonicalizedQueryString <from the preceding step>
        """
        qs = canonical_query_string(params)
        string_to_sign = '\n'.join((method, host.lower(), path or '/', qs))
        return _sign(secret_key, string_to_sign)


def canonical_query_string(params):
    """
    Sorted, RFC 3986 encoded ``key=value`` pairs joined with ``&``.
    """
    pairs = []
    for key in sorted(params.keys()):
        value = str(params[key])
        pairs.append(urlquote(key, safe='') + '=' +
                     urlquote(value, safe='-_~'))

    return '&'.join(pairs)


class AWSConnection(ConnectionUserAndKey):
    """
    Connection which carries the AWS credentials (``user_id`` is the access
    key id, ``key`` the secret access key) and the region.
    """

    def __init__(self, user_id, key, secure=True, host=None, port=None,
                 url=None, region=None, **kwargs):
        super(AWSConnection, self).__init__(user_id, key, secure=secure,
                                            host=host, port=port, url=url,
                                            **kwargs)
        self.region = region or DEFAULT_REGION

    @property
    def access_key(self):
        return self.user_id

    @property
    def secret_key(self):
        return self.key

    def check_credentials(self):
        """
        :raises ConfigurationError: if the access key or secret is missing
        """
        if not self.user_id or not self.key:
            raise ConfigurationError('No AWS credentials were provided',
                                     driver=self.driver)


class AWSDriver(BaseDriver):
    connectionCls = AWSConnection

    def __init__(self, key, secret=None, secure=True, host=None, port=None,
                 region=None, **kwargs):
        super(AWSDriver, self).__init__(key, secret=secret, secure=secure,
                                        host=host, port=port, region=region,
                                        **kwargs)
        self.region = self.connection.region

    def _ex_connection_class_kwargs(self):
        kwargs = super(AWSDriver, self)._ex_connection_class_kwargs()
        kwargs['region'] = self.region
        return kwargs
