# - coding: utf-8 -
__license__ = """
Copyright 2015 Parse.ly, Inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
__all__ = ["PartitionDescriptor", "SubscriptionPattern",
           "REGISTRATION_VERSION", "build_registration"]
from collections import namedtuple


REGISTRATION_VERSION = "1"


PartitionDescriptor = namedtuple("PartitionDescriptor", ["id", "replicas"])
PartitionDescriptor.__doc__ = """A partition as listed in a topic's detail node.

:ivar id: The partition id within its topic
:ivar replicas: The broker ids assigned to hold replicas of the partition
"""


class SubscriptionPattern(object):
    """Enum for the subscription patterns of a consumer registration.

    :cvar WHITE_LIST: The consumer reads exactly the listed topics
    """
    WHITE_LIST = "white_list"


def build_registration(topics):
    """Build the payload stored in a consumer's registration node

    :param topics: Names of the topics the consumer subscribes to
    :type topics: iterable of str
    """
    return {
        "version": REGISTRATION_VERSION,
        "pattern": SubscriptionPattern.WHITE_LIST,
        "subscription": dict((topic, 1) for topic in topics),
    }
