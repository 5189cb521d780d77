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
__all__ = ["brokers_root", "broker_detail", "topics_root", "topic_detail",
           "partition_state", "group_consumers", "consumer_registration",
           "partition_owner", "partition_owner_node", "split_path",
           "join_path", "child_path", "parent_path", "iter_prefixes"]

"""
ZooKeeper layout used by the cluster:

    /brokers/ids/{broker_id}
    /brokers/topics/{topic}/partitions/{partition_id}/state
    /consumers/{group}/ids/{consumer_id}
    /consumers/{group}/owners/{topic}/{partition_id}

Identifiers are not validated here.
"""

SEPARATOR = '/'

BROKERS_ROOT = '/brokers/ids'
TOPICS_ROOT = '/brokers/topics'
CONSUMERS_ROOT = '/consumers'


def brokers_root():
    """Path whose children are the ids of all live brokers"""
    return BROKERS_ROOT


def broker_detail(broker_id):
    """Path of the JSON detail for one broker"""
    return '{root}/{id_}'.format(root=BROKERS_ROOT, id_=int(broker_id))


def topics_root():
    return TOPICS_ROOT


def topic_detail(topic_name):
    """Path of the JSON detail (including the partition map) for a topic"""
    return '{root}/{topic}'.format(root=TOPICS_ROOT, topic=topic_name)


def partition_state(topic_name, partition_id):
    """Path of the JSON state (leader, isr, epochs) of a single partition"""
    return '{topic_path}/partitions/{id_}/state'.format(
        topic_path=topic_detail(topic_name), id_=int(partition_id))


def group_consumers(group_id):
    """Registration root of a consumer group; one child per consumer id"""
    return '{root}/{group}/ids'.format(root=CONSUMERS_ROOT, group=group_id)


def consumer_registration(group_id, consumer_id):
    return child_path(group_consumers(group_id), consumer_id)


def partition_owner(group_id, topic_name):
    """Path under which one child per partition id names its owning consumer"""
    return '{root}/{group}/owners/{topic}'.format(
        root=CONSUMERS_ROOT, group=group_id, topic=topic_name)


def partition_owner_node(group_id, topic_name, partition_id):
    return child_path(partition_owner(group_id, topic_name), partition_id)


def split_path(path):
    """Split a ZooKeeper path into its non-empty segments

    >>> split_path('/consumers/group/ids/')
    ('consumers', 'group', 'ids')
    """
    return tuple(segment for segment in path.split(SEPARATOR) if segment)


def join_path(segments):
    """Build an absolute path from a sequence of segments"""
    return SEPARATOR + SEPARATOR.join(str(segment) for segment in segments)


def child_path(parent, name):
    return join_path(split_path(parent) + (str(name),))


def parent_path(path):
    """Path of the parent node; the root is its own parent"""
    return join_path(split_path(path)[:-1])


def iter_prefixes(path):
    """Yield every ancestor of `path` followed by `path` itself

    Shorter prefixes come first, so a caller creating nodes in this order
    always finds the parent of each node already in place.
    """
    segments = split_path(path)
    for i in range(1, len(segments) + 1):
        yield join_path(segments[:i])
