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

from typing import Dict
from typing import List
from typing import Optional

from cloudaws.common.base import BaseDriver
from cloudaws.dns.types import RecordType

__all__ = [
    'Zone',
    'Record',
    'DNSDriver'
]


class Zone(object):
    """
    Hosted DNS zone.

    :ivar id: Provider assigned zone id (e.g. ``Z2111QEXAMPLE``)
    :ivar domain: Zone apex as the provider reports it, usually with the
                  trailing dot
    :ivar type: ``master`` or ``slave``
    :ivar ttl: Default TTL for new records, ``None`` if the provider has none
    :ivar extra: Provider specific attributes
    """

    def __init__(self, id, domain, type, ttl, driver, extra=None):
        # type: (str, str, str, Optional[int], DNSDriver, Optional[dict]) -> None
        self.id = str(id) if id else None
        self.domain = domain
        self.type = type
        self.ttl = ttl or None
        self.driver = driver
        self.extra = extra or {}

    def fqdn(self, name=''):
        # type: (str) -> str
        """
        Absolute, dot terminated name of ``name`` inside this zone. An empty
        name stands for the apex.
        """
        domain = self.domain
        if not domain.endswith('.'):
            domain += '.'
        return '%s.%s' % (name, domain) if name else domain

    def relative_name(self, fqdn):
        # type: (str) -> str
        """
        Inverse of :meth:`fqdn`. Names outside the zone are returned as
        they are.
        """
        domain = self.fqdn()
        if fqdn == domain:
            return ''
        if fqdn.endswith('.' + domain):
            return fqdn[:-len(domain) - 1]
        return fqdn

    def list_records(self):
        # type: () -> List[Record]
        return self.driver.list_records(zone=self)

    def create_record(self, name, type, data, extra=None):
        # type: (str, RecordType, str, Optional[dict]) -> Record
        return self.driver.create_record(name=name, zone=self, type=type,
                                         data=data, extra=extra)

    def delete(self):
        # type: () -> bool
        return self.driver.delete_zone(zone=self)

    def __repr__(self):
        # type: () -> str
        return ('<Zone: domain=%s, ttl=%s, provider=%s ...>' %
                (self.domain, self.ttl, self.driver.name))


class Record(object):
    """
    Resource record set inside a :class:`Zone`.

    ``name`` is relative to the zone and empty for the apex. ``data`` holds
    the first value, every value is kept in ``extra['values']`` by drivers
    which support multi value sets.
    """

    def __init__(self, id, name, type, data, zone, driver, ttl=None,
                 extra=None):
        # type: (str, str, RecordType, str, Zone, DNSDriver, Optional[int], Optional[dict]) -> None
        self.id = str(id) if id else None
        self.name = name
        self.type = type
        self.data = data
        self.zone = zone
        self.driver = driver
        self.ttl = ttl
        self.extra = extra or {}

    @property
    def fqdn(self):
        # type: () -> str
        return self.zone.fqdn(self.name)

    def delete(self):
        # type: () -> bool
        return self.driver.delete_record(record=self)

    def __repr__(self):
        # type: () -> str
        zone = self.zone.domain if self.zone.domain else self.zone.id
        return ('<Record: zone=%s, name=%s, type=%s, data=%s, provider=%s, '
                'ttl=%s ...>' %
                (zone, self.name, self.type, self.data,
                 self.driver.name, self.ttl))


class DNSDriver(BaseDriver):
    """
    A base DNSDriver class to derive from.
    """
    name = None  # type: str
    website = None  # type: str

    # Map RecordType constants to provider record type name
    RECORD_TYPE_MAP = {}  # type: Dict[str, str]

    def list_record_types(self):
        # type: () -> List[str]
        return list(self.RECORD_TYPE_MAP.keys())

    def list_zones(self):
        # type: () -> List[Zone]
        raise NotImplementedError(
            'list_zones not implemented for this driver')

    def list_records(self, zone):
        # type: (Zone) -> List[Record]
        raise NotImplementedError(
            'list_records not implemented for this driver')

    def get_zone(self, zone_id):
        # type: (str) -> Optional[Zone]
        """
        :return: The zone or ``None`` when no zone with ``zone_id`` exists.
        """
        raise NotImplementedError(
            'get_zone not implemented for this driver')

    def create_zone(self, domain, type='master', ttl=None, extra=None):
        # type: (str, str, Optional[int], Optional[dict]) -> Zone
        raise NotImplementedError(
            'create_zone not implemented for this driver')

    def create_record(self, name, zone, type, data, extra=None):
        # type: (str, Zone, str, str, Optional[dict]) -> Record
        """
        :param name: Name relative to ``zone``, ``''`` for the apex.
        :param extra: Driver specific settings, e.g. ``ttl``.
        """
        raise NotImplementedError(
            'create_record not implemented for this driver')

    def delete_zone(self, zone):
        # type: (Zone) -> bool
        """
        Delete a zone. Providers may refuse while the zone still holds
        records of its own.
        """
        raise NotImplementedError(
            'delete_zone not implemented for this driver')

    def delete_record(self, record):
        # type: (Record) -> bool
        raise NotImplementedError(
            'delete_record not implemented for this driver')

    def _string_to_record_type(self, string):
        # type: (str) -> str
        """
        Map a provider record type name to its RecordType constant. Unknown
        types are returned as they are.
        """
        string = string.upper()
        return getattr(RecordType, string, string)
