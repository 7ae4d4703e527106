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
    'ElasticLBDriver'
]


from cloudaws.common import actions
from cloudaws.common.aws import AWSConnection, DEFAULT_REGION
from cloudaws.common.method import ELBMethod
from cloudaws.loadbalancer.types import State, MemberCondition
from cloudaws.loadbalancer.types import LoadBalancerDoesNotExistError
from cloudaws.loadbalancer.base import Driver, LoadBalancer, Member
from cloudaws.utils.xml import findall, findtext
from cloudaws.utils.xml import get_elements_by_tag_name, local_name


HOST = 'elasticloadbalancing.%s.amazonaws.com'
NS = 'http://elasticloadbalancing.amazonaws.com/doc/2011-04-01/'

MEMBER_CONDITION_MAP = {
    'InService': MemberCondition.ENABLED,
    'OutOfService': MemberCondition.DISABLED,
}


def _text(element, tag):
    nodes = get_elements_by_tag_name(element, tag)
    if not nodes or nodes[0].text is None:
        return None
    return nodes[0].text.strip()


def _children(element, tag):
    """
    ``member`` elements directly below the first ``tag`` element.
    """
    containers = get_elements_by_tag_name(element, tag)
    if not containers:
        return []
    return [child for child in containers[0]
            if local_name(child.tag) == 'member']


class ELBConnection(AWSConnection):
    def __init__(self, *args, **kwargs):
        super(ELBConnection, self).__init__(*args, **kwargs)
        self.host = HOST % (self.region)


class ElasticLBDriver(Driver):
    name = 'Amazon Elastic Load Balancing'
    website = 'http://aws.amazon.com/elasticloadbalancing/'
    connectionCls = ELBConnection

    def __init__(self, access_id, secret, region=DEFAULT_REGION, **kwargs):
        super(ElasticLBDriver, self).__init__(access_id, secret,
                                              region=region, **kwargs)

    def _ex_connection_class_kwargs(self):
        kwargs = super(ElasticLBDriver, self)._ex_connection_class_kwargs()
        kwargs['region'] = self.region
        return kwargs

    def list_protocols(self):
        return ['tcp', 'ssl', 'http', 'https']

    def list_balancers(self):
        params = {'Action': actions.DESCRIBE_LOAD_BALANCERS}
        balancers = []

        while True:
            data = ELBMethod(self.connection, params).invoke()
            balancers.extend(self._to_balancers(data))

            marker = findtext(element=data,
                              xpath='DescribeLoadBalancersResult/NextMarker',
                              namespace=NS)
            if not marker:
                break
            params = {'Action': actions.DESCRIBE_LOAD_BALANCERS,
                      'Marker': marker}

        return balancers

    def get_balancer(self, balancer_id):
        params = {
            'Action': actions.DESCRIBE_LOAD_BALANCERS,
            'LoadBalancerNames.member.1': balancer_id
        }
        result = ELBMethod(self.connection, params).try_invoke()

        if result.is_not_found:
            return None

        balancers = self._to_balancers(result.unwrap())
        return balancers[0] if balancers else None

    def create_balancer(self, name, port, protocol, members=None,
                        ex_members_availability_zones=None):
        """
        Create a balancer with a single listener forwarding ``port`` to the
        same port on the instances.

        :param ex_members_availability_zones: Zone suffixes (e.g. ``a``)
                                              in the driver region,
                                              defaults to ``['a']``
        :type  ex_members_availability_zones: ``list`` of ``str``

        :rtype: :class:`LoadBalancer`
        """
        if ex_members_availability_zones is None:
            ex_members_availability_zones = ['a']

        params = {
            'Action': actions.CREATE_LOAD_BALANCER,
            'LoadBalancerName': name,
            'Listeners.member.1.InstancePort': str(port),
            'Listeners.member.1.InstanceProtocol': protocol.upper(),
            'Listeners.member.1.LoadBalancerPort': str(port),
            'Listeners.member.1.Protocol': protocol.upper(),
        }

        for i, z in enumerate(ex_members_availability_zones):
            zone = ''.join((self.region, z))
            params['AvailabilityZones.member.%d' % (i + 1)] = zone

        data = ELBMethod(self.connection, params).invoke()

        balancer = LoadBalancer(
            id=name,
            name=name,
            state=State.PENDING,
            ip=_text(data, 'DNSName'),
            port=port,
            driver=self
        )

        if members:
            self.balancer_attach_instances(balancer,
                                           [m.id for m in members])
        return balancer

    def destroy_balancer(self, balancer):
        params = {
            'Action': actions.DELETE_LOAD_BALANCER,
            'LoadBalancerName': balancer.id
        }
        ELBMethod(self.connection, params).invoke()
        return True

    def balancer_attach_member(self, balancer, member):
        self.balancer_attach_instances(balancer, [member.id])
        return Member(member.id, None, None, balancer=balancer)

    def balancer_detach_member(self, balancer, member):
        return self.balancer_detach_instances(balancer, [member.id])

    def balancer_list_members(self, balancer):
        return balancer._members

    def balancer_attach_instances(self, balancer, instance_ids):
        """
        Register EC2 instances with a balancer.

        :return: Members registered with the balancer after the call
        :rtype: ``list`` of :class:`Member`
        """
        params = {
            'Action': actions.REGISTER_INSTANCES,
            'LoadBalancerName': balancer.id
        }
        params.update(self._member_params('Instances', 'InstanceId',
                                          instance_ids))

        data = self._invoke_for(balancer, params)
        balancer._members = self._to_members(data, balancer)
        return balancer._members

    def balancer_detach_instances(self, balancer, instance_ids):
        params = {
            'Action': actions.DEREGISTER_INSTANCES,
            'LoadBalancerName': balancer.id
        }
        params.update(self._member_params('Instances', 'InstanceId',
                                          instance_ids))

        data = self._invoke_for(balancer, params)
        balancer._members = self._to_members(data, balancer)
        return True

    def describe_instance_health(self, balancer, instance_ids=None):
        """
        Return the members of a balancer with their health ``condition``.

        :param instance_ids: Limit the report to these instances. (optional)
        :type  instance_ids: ``list`` of ``str``

        :rtype: ``list`` of :class:`Member`
        """
        params = {
            'Action': actions.DESCRIBE_INSTANCE_HEALTH,
            'LoadBalancerName': balancer.id
        }
        params.update(self._member_params('Instances', 'InstanceId',
                                          instance_ids or []))

        data = self._invoke_for(balancer, params)

        members = []
        for el in _children(data, 'InstanceStates'):
            state = _text(el, 'State')
            members.append(Member(
                _text(el, 'InstanceId'), None, None, balancer=balancer,
                condition=MEMBER_CONDITION_MAP.get(state,
                                                   MemberCondition.UNKNOWN),
                extra={'state': state,
                       'reason_code': _text(el, 'ReasonCode'),
                       'description': _text(el, 'Description')}))
        return members

    def enable_zones(self, balancer, zones):
        """
        Add availability zones to a balancer.

        :return: All the zones the balancer is in afterwards
        :rtype: ``list`` of ``str``
        """
        return self._change_zones(actions.ENABLE_AVAILABILITY_ZONES,
                                  balancer, zones)

    def disable_zones(self, balancer, zones):
        return self._change_zones(actions.DISABLE_AVAILABILITY_ZONES,
                                  balancer, zones)

    def _change_zones(self, action, balancer, zones):
        params = {
            'Action': action,
            'LoadBalancerName': balancer.id
        }
        params.update(self._member_params('AvailabilityZones', None, zones))

        data = self._invoke_for(balancer, params)
        result = [el.text.strip() for el in
                  _children(data, 'AvailabilityZones') if el.text]
        balancer.extra['availability_zones'] = result
        return result

    def _invoke_for(self, balancer, params):
        result = ELBMethod(self.connection, params).try_invoke()

        if result.is_not_found:
            raise LoadBalancerDoesNotExistError(value=result.error.message,
                                                driver=self,
                                                balancer_id=balancer.id)
        return result.unwrap()

    def _member_params(self, prefix, field, values):
        params = {}
        for i, value in enumerate(values):
            key = '%s.member.%d' % (prefix, i + 1)
            if field:
                key = '%s.%s' % (key, field)
            params[key] = value
        return params

    def _to_balancers(self, data):
        xpath = 'DescribeLoadBalancersResult/LoadBalancerDescriptions/member'
        return [self._to_balancer(el)
                for el in findall(element=data, xpath=xpath, namespace=NS)]

    def _to_balancer(self, el):
        name = _text(el, 'LoadBalancerName')
        dns_name = _text(el, 'DNSName')
        port = _text(el, 'LoadBalancerPort')

        zones = [z.text.strip() for z in _children(el, 'AvailabilityZones')
                 if z.text]

        balancer = LoadBalancer(
            id=name,
            name=name,
            state=State.UNKNOWN,
            ip=dns_name,
            port=int(port) if port else None,
            driver=self,
            extra={'availability_zones': zones,
                   'created_time': _text(el, 'CreatedTime')}
        )
        balancer._members = self._to_members(el, balancer)
        return balancer

    def _to_members(self, data, balancer):
        return [Member(_text(m, 'InstanceId'), None, None, balancer=balancer)
                for m in _children(data, 'Instances')]
