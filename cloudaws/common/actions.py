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
Static lookup tables for the AWS operations used by the drivers.

Every table is a read-only mapping built once at import time.
"""

from types import MappingProxyType

__all__ = [
    'ROUTE53_PREFIX',
    'ELB_PREFIX',
    'IAM_PREFIX',
    'EC2_PREFIX',
    'ROUTE53_VERBS',
    'SERVICE_ACTIONS',
    'resolve_verb',
    'as_service_actions',
    'qualified_action',
]

ROUTE53_PREFIX = 'route53'
ELB_PREFIX = 'elasticloadbalancing:'
IAM_PREFIX = 'iam:'
EC2_PREFIX = 'ec2:'

DEFAULT_VERB = 'POST'

# Route53
CREATE_HOSTED_ZONE = 'CreateHostedZone'
DELETE_HOSTED_ZONE = 'DeleteHostedZone'
GET_HOSTED_ZONE = 'GetHostedZone'
LIST_HOSTED_ZONES = 'ListHostedZones'
CHANGE_RESOURCE_RECORD_SETS = 'ChangeResourceRecordSets'
GET_CHANGE = 'GetChange'
LIST_RESOURCE_RECORD_SETS = 'ListResourceRecordSets'

# Elastic Load Balancing
CREATE_LOAD_BALANCER = 'CreateLoadBalancer'
DELETE_LOAD_BALANCER = 'DeleteLoadBalancer'
DEREGISTER_INSTANCES = 'DeregisterInstancesFromLoadBalancer'
DESCRIBE_LOAD_BALANCERS = 'DescribeLoadBalancers'
DESCRIBE_INSTANCE_HEALTH = 'DescribeInstanceHealth'
DISABLE_AVAILABILITY_ZONES = 'DisableAvailabilityZonesForLoadBalancer'
ENABLE_AVAILABILITY_ZONES = 'EnableAvailabilityZonesForLoadBalancer'
REGISTER_INSTANCES = 'RegisterInstancesWithLoadBalancer'

# IAM
ADD_USER_TO_GROUP = 'AddUserToGroup'
CREATE_ACCESS_KEY = 'CreateAccessKey'
CREATE_GROUP = 'CreateGroup'
CREATE_LOGIN_PROFILE = 'CreateLoginProfile'
CREATE_USER = 'CreateUser'
DELETE_ACCESS_KEY = 'DeleteAccessKey'
DELETE_GROUP = 'DeleteGroup'
DELETE_GROUP_POLICY = 'DeleteGroupPolicy'
DELETE_LOGIN_PROFILE = 'DeleteLoginProfile'
DELETE_USER = 'DeleteUser'
DELETE_USER_POLICY = 'DeleteUserPolicy'
GET_ACCESS_KEY = 'GetAccessKey'
GET_GROUP = 'GetGroup'
GET_GROUP_POLICY = 'GetGroupPolicy'
GET_USER = 'GetUser'
GET_USER_POLICY = 'GetUserPolicy'
LIST_ACCESS_KEYS = 'ListAccessKeys'
LIST_GROUP_POLICIES = 'ListGroupPolicies'
LIST_GROUPS = 'ListGroups'
LIST_GROUPS_FOR_USER = 'ListGroupsForUser'
LIST_USER_POLICIES = 'ListUserPolicies'
LIST_USERS = 'ListUsers'
PUT_GROUP_POLICY = 'PutGroupPolicy'
PUT_USER_POLICY = 'PutUserPolicy'
REMOVE_USER_FROM_GROUP = 'RemoveUserFromGroup'
UPDATE_GROUP = 'UpdateGroup'
UPDATE_USER = 'UpdateUser'

# EC2 elastic IP addresses
ALLOCATE_ADDRESS = 'AllocateAddress'
ASSOCIATE_ADDRESS = 'AssociateAddress'
DESCRIBE_ADDRESSES = 'DescribeAddresses'
DISASSOCIATE_ADDRESS = 'DisassociateAddress'
RELEASE_ADDRESS = 'ReleaseAddress'

# EC2 reserved instances
DESCRIBE_RESERVED_INSTANCES = 'DescribeReservedInstances'
DESCRIBE_RESERVED_INSTANCES_OFFERINGS = 'DescribeReservedInstancesOfferings'
PURCHASE_RESERVED_INSTANCES_OFFERING = 'PurchaseReservedInstancesOffering'

# EC2 security groups
AUTHORIZE_SECURITY_GROUP_INGRESS = 'AuthorizeSecurityGroupIngress'
AUTHORIZE_SECURITY_GROUP_EGRESS = 'AuthorizeSecurityGroupEgress'
CREATE_SECURITY_GROUP = 'CreateSecurityGroup'
DELETE_SECURITY_GROUP = 'DeleteSecurityGroup'
DESCRIBE_SECURITY_GROUPS = 'DescribeSecurityGroups'
REVOKE_SECURITY_GROUP_EGRESS = 'RevokeSecurityGroupEgress'
REVOKE_SECURITY_GROUP_INGRESS = 'RevokeSecurityGroupIngress'

# EC2 network ACLs
CREATE_NETWORK_ACL = 'CreateNetworkAcl'
DESCRIBE_NETWORK_ACLS = 'DescribeNetworkAcls'
DELETE_NETWORK_ACL = 'DeleteNetworkAcl'
CREATE_NETWORK_ACL_ENTRY = 'CreateNetworkAclEntry'
DELETE_NETWORK_ACL_ENTRY = 'DeleteNetworkAclEntry'
REPLACE_NETWORK_ACL_ENTRY = 'ReplaceNetworkAclEntry'
REPLACE_NETWORK_ACL_ASSOC = 'ReplaceNetworkAclAssociation'

# EC2 VPC
ASSOCIATE_DHCP_OPTIONS = 'AssociateDhcpOptions'
ASSOCIATE_ROUTE_TABLE = 'AssociateRouteTable'
ATTACH_INTERNET_GATEWAY = 'AttachInternetGateway'
CREATE_DHCP_OPTIONS = 'CreateDhcpOptions'
CREATE_INTERNET_GATEWAY = 'CreateInternetGateway'
CREATE_ROUTE = 'CreateRoute'
CREATE_ROUTE_TABLE = 'CreateRouteTable'
CREATE_SUBNET = 'CreateSubnet'
CREATE_VPC = 'CreateVpc'
DELETE_INTERNET_GATEWAY = 'DeleteInternetGateway'
DELETE_ROUTE = 'DeleteRoute'
DELETE_ROUTE_TABLE = 'DeleteRouteTable'
DELETE_SUBNET = 'DeleteSubnet'
DELETE_VPC = 'DeleteVpc'
DESCRIBE_DHCP_OPTIONS = 'DescribeDhcpOptions'
DESCRIBE_ROUTE_TABLES = 'DescribeRouteTables'
DESCRIBE_SUBNETS = 'DescribeSubnets'
DESCRIBE_VPCS = 'DescribeVpcs'
DETACH_INTERNET_GATEWAY = 'DetachInternetGateway'

# EC2 network interfaces
ATTACH_NIC = 'AttachNetworkInterface'
CREATE_NIC = 'CreateNetworkInterface'
DELETE_NIC = 'DeleteNetworkInterface'
DETACH_NIC = 'DetachNetworkInterface'
DESCRIBE_NICS = 'DescribeNetworkInterfaces'

# EC2 VPN
ATTACH_VPN_GATEWAY = 'AttachVpnGateway'
CREATE_CUSTOMER_GATEWAY = 'CreateCustomerGateway'
CREATE_VPN_CONNECTION = 'CreateVpnConnection'
CREATE_VPN_GATEWAY = 'CreateVpnGateway'
DELETE_CUSTOMER_GATEWAY = 'DeleteCustomerGateway'
DELETE_VPN_CONNECTION = 'DeleteVpnConnection'
DELETE_VPN_GATEWAY = 'DeleteVpnGateway'
DESCRIBE_CUSTOMER_GATEWAYS = 'DescribeCustomerGateways'
DESCRIBE_VPN_CONNECTIONS = 'DescribeVpnConnections'
DESCRIBE_VPN_GATEWAYS = 'DescribeVpnGateways'
DETACH_VPN_GATEWAY = 'DetachVpnGateway'

# Keys are lower case, lookups are case-insensitive
ROUTE53_VERBS = MappingProxyType({
    CREATE_HOSTED_ZONE.lower(): 'POST',
    GET_HOSTED_ZONE.lower(): 'GET',
    LIST_HOSTED_ZONES.lower(): 'GET',
    DELETE_HOSTED_ZONE.lower(): 'DELETE',
    CHANGE_RESOURCE_RECORD_SETS.lower(): 'POST',
    LIST_RESOURCE_RECORD_SETS.lower(): 'GET',
    GET_CHANGE.lower(): 'GET',
})

ROUTE53_SERVICE_ACTIONS = {
    CREATE_HOSTED_ZONE: ('dns:CREATE_ZONE',),
    DELETE_HOSTED_ZONE: ('dns:REMOVE_ZONE',),
    GET_HOSTED_ZONE: ('dns:GET_ZONE',),
    LIST_HOSTED_ZONES: ('dns:LIST_ZONE',),
    CHANGE_RESOURCE_RECORD_SETS: ('dns:ADD_RECORD', 'dns:REMOVE_RECORD'),
    GET_CHANGE: (),
    LIST_RESOURCE_RECORD_SETS: ('dns:LIST_RECORD',),
}

ELB_SERVICE_ACTIONS = {
    CREATE_LOAD_BALANCER: ('lb:CREATE_LOAD_BALANCER',),
    DELETE_LOAD_BALANCER: ('lb:REMOVE_LOAD_BALANCER',),
    DEREGISTER_INSTANCES: ('lb:REMOVE_VMS',),
    DESCRIBE_LOAD_BALANCERS: ('lb:GET_LOAD_BALANCER',
                              'lb:LIST_LOAD_BALANCER'),
    DESCRIBE_INSTANCE_HEALTH: ('lb:GET_LOAD_BALANCER_SERVER_HEALTH',),
    DISABLE_AVAILABILITY_ZONES: ('lb:REMOVE_DATA_CENTERS',),
    ENABLE_AVAILABILITY_ZONES: ('lb:ADD_DATA_CENTERS',),
    REGISTER_INSTANCES: ('lb:ADD_VMS',),
}

IAM_SERVICE_ACTIONS = {
    ADD_USER_TO_GROUP: ('identity:JOIN_GROUP',),
    CREATE_ACCESS_KEY: ('identity:ENABLE_API',),
    CREATE_GROUP: ('identity:CREATE_GROUP',),
    CREATE_LOGIN_PROFILE: ('identity:ENABLE_CONSOLE',),
    CREATE_USER: ('identity:CREATE_USER',),
    DELETE_ACCESS_KEY: ('identity:DISABLE_API',),
    DELETE_GROUP: ('identity:REMOVE_GROUP',),
    DELETE_GROUP_POLICY: ('identity:REMOVE_GROUP_ACCESS',),
    DELETE_LOGIN_PROFILE: ('identity:DISABLE_CONSOLE',),
    DELETE_USER: ('identity:REMOVE_USER',),
    DELETE_USER_POLICY: ('identity:REMOVE_USER_ACCESS',),
    GET_ACCESS_KEY: ('identity:GET_ACCESS_KEY',),
    GET_GROUP: ('identity:GET_GROUP',),
    GET_GROUP_POLICY: ('identity:GET_GROUP_POLICY',),
    GET_USER: ('identity:GET_USER',),
    GET_USER_POLICY: ('identity:GET_USER_POLICY',),
    LIST_ACCESS_KEYS: ('identity:LIST_ACCESS_KEY',),
    LIST_GROUP_POLICIES: ('identity:GET_GROUP_POLICY',),
    LIST_GROUPS: ('identity:LIST_GROUP',),
    LIST_GROUPS_FOR_USER: ('identity:GET_USER',),
    LIST_USER_POLICIES: ('identity:GET_USER_POLICY',),
    LIST_USERS: ('identity:LIST_USER',),
    PUT_GROUP_POLICY: ('identity:ADD_GROUP_ACCESS',),
    PUT_USER_POLICY: ('identity:ADD_USER_ACCESS',),
    REMOVE_USER_FROM_GROUP: ('identity:DROP_FROM_GROUP',),
    UPDATE_GROUP: ('identity:UPDATE_GROUP',),
    UPDATE_USER: ('identity:UPDATE_USER',),
}

EC2_SERVICE_ACTIONS = {
    ALLOCATE_ADDRESS: ('ip:CREATE_IP_ADDRESS',),
    ASSOCIATE_ADDRESS: ('ip:ASSIGN',),
    DESCRIBE_ADDRESSES: ('ip:GET_IP_ADDRESS', 'ip:LIST_IP_ADDRESS'),
    DISASSOCIATE_ADDRESS: ('ip:RELEASE',),
    RELEASE_ADDRESS: ('ip:REMOVE_IP_ADDRESS',),

    DESCRIBE_RESERVED_INSTANCES: ('prepay:GET_PREPAYMENT',
                                  'prepay:LIST_PREPAYMENT'),
    DESCRIBE_RESERVED_INSTANCES_OFFERINGS: ('prepay:GET_OFFERING',
                                            'prepay:LIST_OFFERING'),
    PURCHASE_RESERVED_INSTANCES_OFFERING: ('prepay:PREPAY',),

    AUTHORIZE_SECURITY_GROUP_INGRESS: ('firewall:AUTHORIZE',),
    AUTHORIZE_SECURITY_GROUP_EGRESS: ('firewall:AUTHORIZE',),
    CREATE_SECURITY_GROUP: ('firewall:CREATE_FIREWALL',),
    DELETE_SECURITY_GROUP: ('firewall:REMOVE_FIREWALL',),
    DESCRIBE_SECURITY_GROUPS: ('firewall:GET_FIREWALL',
                               'firewall:LIST_FIREWALL'),
    REVOKE_SECURITY_GROUP_INGRESS: ('firewall:REVOKE',),
    REVOKE_SECURITY_GROUP_EGRESS: ('firewall:REVOKE',),

    CREATE_NETWORK_ACL_ENTRY: ('network-firewall:AUTHORIZE',),
    REPLACE_NETWORK_ACL_ENTRY: ('network-firewall:AUTHORIZE',),
    REPLACE_NETWORK_ACL_ASSOC: ('network-firewall:ASSOCIATE',),
    CREATE_NETWORK_ACL: ('network-firewall:CREATE_FIREWALL',),
    DELETE_NETWORK_ACL: ('network-firewall:REMOVE_FIREWALL',),
    DESCRIBE_NETWORK_ACLS: ('network-firewall:GET_FIREWALL',
                            'network-firewall:LIST_FIREWALL'),
    DELETE_NETWORK_ACL_ENTRY: ('network-firewall:REVOKE',),

    ASSOCIATE_DHCP_OPTIONS: (),
    ASSOCIATE_ROUTE_TABLE: ('vlan:ASSIGN_ROUTE_TO_SUBNET',),
    CREATE_DHCP_OPTIONS: (),
    CREATE_ROUTE_TABLE: ('vlan:CREATE_ROUTING_TABLE',),
    CREATE_ROUTE: ('vlan:ADD_ROUTE',),
    CREATE_SUBNET: ('vlan:CREATE_SUBNET',),
    CREATE_VPC: ('vlan:CREATE_VLAN',),
    DELETE_INTERNET_GATEWAY: ('vlan:REMOVE_INTERNET_GATEWAY',),
    DELETE_ROUTE: ('vlan:REMOVE_ROUTE',),
    DELETE_ROUTE_TABLE: ('vlan:REMOVE_ROUTING_TABLE',),
    DELETE_SUBNET: ('vlan:REMOVE_SUBNET',),
    DELETE_VPC: ('vlan:REMOVE_VLAN',),
    DESCRIBE_DHCP_OPTIONS: (),
    DESCRIBE_ROUTE_TABLES: ('vlan:GET_ROUTING_TABLE',
                            'vlan:LIST_ROUTING_TABLE'),
    DESCRIBE_SUBNETS: ('vlan:GET_SUBNET', 'vlan:LIST_SUBNET'),
    DESCRIBE_VPCS: ('vlan:GET_VLAN', 'vlan:LIST_VLAN'),
    CREATE_INTERNET_GATEWAY: ('vlan:CREATE_VLAN',),
    ATTACH_INTERNET_GATEWAY: ('vlan:CREATE_VLAN',),

    CREATE_NIC: ('vlan:CREATE_NIC',),
    ATTACH_NIC: ('vlan:ATTACH_NIC',),
    DETACH_NIC: ('vlan:DETACH_NIC',),
    DELETE_NIC: ('vlan:REMOVE_NIC',),
    DESCRIBE_NICS: ('vlan:GET_NIC', 'vlan:LIST_NIC'),

    CREATE_CUSTOMER_GATEWAY: ('vpn:CREATE_GATEWAY',),
    ATTACH_VPN_GATEWAY: ('vpn:ATTACH',),
    CREATE_VPN_GATEWAY: ('vpn:CREATE_VPN',),
    DELETE_CUSTOMER_GATEWAY: ('vpn:REMOVE_GATEWAY',),
    DELETE_VPN_GATEWAY: ('vpn:REMOVE_VPN',),
    DESCRIBE_CUSTOMER_GATEWAYS: ('vpn:LIST_GATEWAY', 'vpn:GET_GATEWAY'),
    DESCRIBE_VPN_CONNECTIONS: ('vpn:LIST_GATEWAY', 'vpn:GET_GATEWAY',
                               'vpn:LIST_VPN', 'vpn:GET_VPN'),
    DESCRIBE_VPN_GATEWAYS: ('vpn:LIST_VPN', 'vpn:GET_VPN'),
    CREATE_VPN_CONNECTION: ('vpn:CONNECT_GATEWAY',),
    DELETE_VPN_CONNECTION: ('vpn:DISCONNECT_GATEWAY',),
    DETACH_INTERNET_GATEWAY: ('vpn:REMOVE_GATEWAY',),
    DETACH_VPN_GATEWAY: ('vpn:DETACH',),
}

SERVICE_ACTIONS = MappingProxyType(dict(
    list(EC2_SERVICE_ACTIONS.items()) +
    list(IAM_SERVICE_ACTIONS.items()) +
    list(ELB_SERVICE_ACTIONS.items()) +
    list(ROUTE53_SERVICE_ACTIONS.items())
))

# Don't leave the mutable building blocks around
del ROUTE53_SERVICE_ACTIONS, ELB_SERVICE_ACTIONS
del IAM_SERVICE_ACTIONS, EC2_SERVICE_ACTIONS


def resolve_verb(operation):
    """
    Return the HTTP verb Route53 expects for ``operation``.

    The lookup ignores case. Operations missing from the table are sent
    with POST.

    :param operation: Route53 operation name, e.g. ``ListHostedZones``
    :type operation: ``str``

    :rtype: ``str``
    """
    return ROUTE53_VERBS.get((operation or '').lower(), DEFAULT_VERB)


def as_service_actions(operation):
    """
    Return the abstract service actions an operation performs.

    :rtype: ``tuple`` of ``str`` (empty for unknown operations)
    """
    return SERVICE_ACTIONS.get(operation, ())


def qualified_action(prefix, operation):
    """
    Build an IAM style action name, e.g. ``route53:ListHostedZones``.
    """
    if not prefix.endswith(':'):
        prefix = prefix + ':'
    return prefix + operation
