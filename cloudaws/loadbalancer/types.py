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
    "State",
    "MemberCondition",
    "LoadBalancerError",
    "LoadBalancerDoesNotExistError",
]

from cloudaws.common.types import CloudError


class LoadBalancerError(CloudError):
    def __init__(self, value, driver, balancer_id=None):
        self.balancer_id = balancer_id
        super(LoadBalancerError, self).__init__(value=value, driver=driver)

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        return ('<%s in %s, balancer_id=%s, value=%s>' %
                (self.__class__.__name__, repr(self.driver),
                 self.balancer_id, self.value))


class LoadBalancerDoesNotExistError(LoadBalancerError):
    pass


class State(object):
    """
    Standard states for a load balancer

    :cvar RUNNING: load balancer is running and ready to use
    :cvar UNKNOWN: load balancer state is unknown
    """

    RUNNING = 0
    PENDING = 1
    UNKNOWN = 2
    ERROR = 3
    DELETED = 4


class MemberCondition(object):
    """
    Each member of a load balancer can have an associated condition
    which determines its role within the load balancer.
    """
    ENABLED = 0
    DISABLED = 1
    DRAINING = 2
    UNKNOWN = 3
