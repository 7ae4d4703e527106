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
    'Route53DNSDriver'
]

import uuid

from xml.etree import ElementTree as ET

from cloudaws.common import actions
from cloudaws.common.aws import AWSConnection
from cloudaws.common.method import Route53Method
from cloudaws.dns.types import RecordType
from cloudaws.dns.types import ZoneDoesNotExistError, RecordDoesNotExistError
from cloudaws.dns.types import InvalidChangeBatch
from cloudaws.dns.base import DNSDriver, Zone, Record
from cloudaws.utils.xml import get_elements_by_tag_name


API_VERSION = '2012-12-12'
API_HOST = 'route53.amazonaws.com'
API_ROOT = '/%s/' % (API_VERSION)

NAMESPACE = 'https://%s/doc%s' % (API_HOST, API_ROOT)

DEFAULT_TTL = 300

# GetHostedZone answers with one of these for zones which belong to another
# account, those are looked up in the zone listing instead
ZONE_LOOKUP_FALLBACK_CODES = ('AccessDenied', 'InvalidInput')


def _text(element, tag):
    nodes = get_elements_by_tag_name(element, tag)
    if not nodes or nodes[0].text is None:
        return None
    return nodes[0].text.strip()


class Route53Connection(AWSConnection):
    host = API_HOST


class Route53DNSDriver(DNSDriver):
    name = 'Route53 DNS'
    website = 'http://aws.amazon.com/route53/'
    connectionCls = Route53Connection

    RECORD_TYPE_MAP = {
        RecordType.A: 'A',
        RecordType.AAAA: 'AAAA',
        RecordType.CAA: 'CAA',
        RecordType.CNAME: 'CNAME',
        RecordType.MX: 'MX',
        RecordType.NAPTR: 'NAPTR',
        RecordType.NS: 'NS',
        RecordType.PTR: 'PTR',
        RecordType.SOA: 'SOA',
        RecordType.SPF: 'SPF',
        RecordType.SRV: 'SRV',
        RecordType.TXT: 'TXT',
    }

    def list_zones(self):
        zones = []
        params = {}

        while True:
            data = self._method(actions.LIST_HOSTED_ZONES, 'hostedzone',
                                params=params).invoke()
            zones.extend(self._to_zones(data=data))

            if _text(data, 'IsTruncated') != 'true':
                break
            params = {'marker': _text(data, 'NextMarker')}

        return zones

    def get_zone(self, zone_id):
        result = self._method(actions.GET_HOSTED_ZONE,
                              'hostedzone/%s' % (zone_id)).try_invoke()

        if result.is_not_found:
            return None

        if result.is_failure and \
                getattr(result.error, 'code', None) in \
                ZONE_LOOKUP_FALLBACK_CODES:
            for zone in self.list_zones():
                if zone.id == zone_id:
                    return zone
            return None

        data = result.unwrap()
        zone = self._to_zone(get_elements_by_tag_name(data, 'HostedZone')[0])
        zone.extra['NameServers'] = self._to_name_servers(data)
        return zone

    def create_zone(self, domain, type='master', ttl=None, extra=None):
        """
        Create a hosted zone.

        ``extra`` may carry a ``Comment`` for the zone config.

        :rtype: :class:`Zone`
        """
        zone = ET.Element('CreateHostedZoneRequest', {'xmlns': NAMESPACE})
        ET.SubElement(zone, 'Name').text = domain
        ET.SubElement(zone, 'CallerReference').text = str(uuid.uuid4())

        if extra and 'Comment' in extra:
            hzg = ET.SubElement(zone, 'HostedZoneConfig')
            ET.SubElement(hzg, 'Comment').text = extra['Comment']

        body = ET.tostring(zone, encoding='unicode')
        data = self._method(actions.CREATE_HOSTED_ZONE,
                            'hostedzone').invoke(body=body)

        elem = get_elements_by_tag_name(data, 'HostedZone')[0]
        zone = self._to_zone(elem=elem)
        zone.extra['NameServers'] = self._to_name_servers(data)
        zone.extra['Change'] = self._to_change(data)
        return zone

    def delete_zone(self, zone):
        result = self._method(actions.DELETE_HOSTED_ZONE,
                              'hostedzone/%s' % (zone.id)).try_invoke()

        if result.is_not_found:
            raise ZoneDoesNotExistError(value=result.error.message,
                                        driver=self, zone_id=zone.id)

        result.unwrap()
        return True

    def list_records(self, zone):
        records = []
        params = {}
        path = 'hostedzone/%s/rrset' % (zone.id)

        while True:
            result = self._method(actions.LIST_RESOURCE_RECORD_SETS, path,
                                  params=params).try_invoke()

            if result.is_not_found:
                raise ZoneDoesNotExistError(value=result.error.message,
                                            driver=self, zone_id=zone.id)

            data = result.unwrap()
            records.extend(self._to_records(data=data, zone=zone))

            if _text(data, 'IsTruncated') != 'true':
                break

            params = {'name': _text(data, 'NextRecordName'),
                      'type': _text(data, 'NextRecordType')}

        return records

    def create_record(self, name, zone, type, data, extra=None):
        extra = dict(extra or {})
        batch = [('CREATE', name, type, data, extra)]
        change = self._post_changeset(zone, batch)

        extra['Change'] = change
        id = ':'.join((self.RECORD_TYPE_MAP[type], name))
        return Record(id=id, name=name, type=type, data=data, zone=zone,
                      driver=self, ttl=extra.get('ttl', DEFAULT_TTL),
                      extra=extra)

    def delete_record(self, record):
        r = record
        extra = dict(r.extra)
        extra.setdefault('ttl', r.ttl)
        batch = [('DELETE', r.name, r.type, r.data, extra)]

        try:
            self._post_changeset(record.zone, batch)
        except InvalidChangeBatch:
            raise RecordDoesNotExistError(value='', driver=self,
                                          record_id=r.id)
        return True

    def get_change(self, change_id):
        """
        Return the status of a change batch.

        :param change_id: Change id, with or without the ``/change/`` prefix
        :type  change_id: ``str``

        :return: ``dict`` with ``id``, ``status`` (``PENDING`` or
                 ``INSYNC``) and ``submitted_at``, ``None`` if Route53
                 doesn't know the change
        """
        change_id = change_id.replace('/change/', '')
        result = self._method(actions.GET_CHANGE,
                              'change/%s' % (change_id)).try_invoke()

        if result.is_not_found:
            return None

        return self._to_change(result.unwrap())

    def _method(self, operation, path, params=None):
        return Route53Method(self.connection, operation, self._url(path),
                             params=params)

    def _url(self, path):
        conn = self.connection
        scheme = 'https' if conn.secure else 'http'
        netloc = conn.host

        if (conn.secure and int(conn.port) != 443) or \
           (not conn.secure and int(conn.port) != 80):
            netloc = '%s:%s' % (netloc, conn.port)

        return '%s://%s%s%s' % (scheme, netloc, API_ROOT, path)

    def _post_changeset(self, zone, changes_list):
        attrs = {'xmlns': NAMESPACE}
        changeset = ET.Element('ChangeResourceRecordSetsRequest', attrs)
        batch = ET.SubElement(changeset, 'ChangeBatch')
        changes = ET.SubElement(batch, 'Changes')

        for action, name, type_, data, extra in changes_list:
            change = ET.SubElement(changes, 'Change')
            ET.SubElement(change, 'Action').text = action

            rrs = ET.SubElement(change, 'ResourceRecordSet')
            ET.SubElement(rrs, 'Name').text = zone.fqdn(name)
            ET.SubElement(rrs, 'Type').text = self.RECORD_TYPE_MAP[type_]

            if extra.get('alias'):
                self._add_alias_target(rrs, data, extra)
                continue

            ttl = extra.get('ttl')
            ET.SubElement(rrs, 'TTL').text = str(
                DEFAULT_TTL if ttl is None else ttl)

            # Route53 only deletes a set when every value matches
            rrecs = ET.SubElement(rrs, 'ResourceRecords')
            for value in extra.get('values') or [data]:
                rrec = ET.SubElement(rrecs, 'ResourceRecord')
                ET.SubElement(rrec, 'Value').text = value

        body = ET.tostring(changeset, encoding='unicode')
        result = self._method(actions.CHANGE_RESOURCE_RECORD_SETS,
                              'hostedzone/%s/rrset' % (zone.id)) \
            .try_invoke(body=body)

        if result.is_not_found:
            raise ZoneDoesNotExistError(value=result.error.message,
                                        driver=self, zone_id=zone.id)

        if result.is_failure and \
                getattr(result.error, 'code', None) == 'InvalidChangeBatch':
            raise InvalidChangeBatch(value=result.error.message, driver=self)

        return self._to_change(result.unwrap())

    def _add_alias_target(self, rrs, data, extra):
        alias = ET.SubElement(rrs, 'AliasTarget')
        ET.SubElement(alias, 'HostedZoneId').text = \
            extra.get('alias_hosted_zone_id')
        ET.SubElement(alias, 'DNSName').text = data
        ET.SubElement(alias, 'EvaluateTargetHealth').text = \
            'true' if extra.get('evaluate_target_health') else 'false'

    def _to_zones(self, data):
        zones = []
        for element in get_elements_by_tag_name(data, 'HostedZone'):
            zones.append(self._to_zone(element))

        return zones

    def _to_zone(self, elem):
        name = _text(elem, 'Name')
        id = _text(elem, 'Id').replace('/hostedzone/', '')
        comment = _text(elem, 'Comment')
        count = _text(elem, 'ResourceRecordSetCount')

        extra = {'Comment': comment,
                 'ResourceRecordSetCount': int(count) if count else 0,
                 'CallerReference': _text(elem, 'CallerReference')}

        zone = Zone(id=id, domain=name, type='master', ttl=0, driver=self,
                    extra=extra)
        return zone

    def _to_name_servers(self, data):
        return [_text(ns, 'NameServer')
                for ns in get_elements_by_tag_name(data, 'NameServer')]

    def _to_change(self, data):
        info = get_elements_by_tag_name(data, 'ChangeInfo')
        if not info:
            return None

        info = info[0]
        return {'id': (_text(info, 'Id') or '').replace('/change/', ''),
                'status': _text(info, 'Status'),
                'submitted_at': _text(info, 'SubmittedAt')}

    def _to_records(self, data, zone):
        records = []
        for elem in get_elements_by_tag_name(data, 'ResourceRecordSet'):
            records.append(self._to_record(elem, zone))

        return records

    def _to_record(self, elem, zone):
        name = zone.relative_name(_text(elem, 'Name'))

        type = self._string_to_record_type(_text(elem, 'Type'))
        ttl = _text(elem, 'TTL')

        values = [_text(value, 'Value')
                  for value in get_elements_by_tag_name(elem, 'Value')]
        extra = {'ttl': int(ttl) if ttl else None, 'values': values}

        if values:
            data = values[0]
        else:
            # Alias records point at another AWS resource
            data = _text(elem, 'DNSName')
            extra['alias'] = True
            extra['alias_hosted_zone_id'] = _text(elem, 'HostedZoneId')
            extra['evaluate_target_health'] = \
                _text(elem, 'EvaluateTargetHealth') == 'true'

        id = ':'.join((self.RECORD_TYPE_MAP.get(type, type), name))
        record = Record(id=id, name=name, type=type, data=data, zone=zone,
                        driver=self, ttl=extra['ttl'], extra=extra)
        return record
