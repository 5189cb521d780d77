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
__all__ = ["MembershipRegistrar"]
import logging

from kazoo.exceptions import NodeExistsError, NoNodeError
from kazoo.security import OPEN_ACL_UNSAFE

from . import paths
from .common import build_registration
from .exceptions import SchemaError
from .utils import (attribute_repr, decode_json, encode_json, ensure_path,
                    get_bytes, get_string, read_node)


log = logging.getLogger(__name__)


class MembershipRegistrar(object):
    """
    Registers consumers and their partition ownership in ZooKeeper.

    Both consumer registrations and ownership claims are ephemeral nodes: they
    live exactly as long as the ZooKeeper session that created them. Nothing
    in this class deletes them.

    :param zookeeper: A started ZooKeeper client
    :type zookeeper: :class:`kazoo.client.KazooClient`
    :param acl: ACL given to every node created by the registrar. Defaults to
        world:anyone with all permissions.
    :type acl: list of :class:`kazoo.security.ACL`
    """
    def __init__(self, zookeeper, acl=None):
        self._zookeeper = zookeeper
        self._acl = OPEN_ACL_UNSAFE if acl is None else acl

    __repr__ = attribute_repr('_zookeeper')

    def _create_ephemeral(self, path, value):
        """Create an ephemeral node at `path`, creating its ancestors first

        :raises: :class:`kazoo.exceptions.NodeExistsError` if another session
            created the node first
        """
        ensure_path(self._zookeeper, paths.parent_path(path), acl=self._acl)
        self._zookeeper.create(path, value, acl=self._acl, ephemeral=True)

    def register_consumer(self, group_id, consumer_id, topics):
        """Register a consumer and its topic subscription under a group

        A consumer id that is already registered keeps its node and has its
        subscription replaced, so a restarted consumer process can take over
        its previous identity.

        :param group_id: The consumer group to join
        :type group_id: str
        :param consumer_id: The id of the consumer within the group
        :type consumer_id: str
        :param topics: The topics the consumer subscribes to. Nothing is
            registered when this is empty.
        :type topics: str or iterable of str
        :returns: True if this call created the registration node
        """
        if isinstance(topics, (str, bytes)):
            topics = [topics] if topics else []
        topics = set(get_string(topic) for topic in topics or ())
        if not topics:
            log.debug("Not registering consumer %s: no topics given", consumer_id)
            return False
        value = encode_json(build_registration(topics))

        ensure_path(self._zookeeper, paths.group_consumers(group_id), acl=self._acl)
        path = paths.consumer_registration(group_id, get_string(consumer_id))
        if self._zookeeper.exists(path) is None:
            try:
                self._create_ephemeral(path, value)
                log.info("Registered consumer %s in group %s for topics %s",
                         consumer_id, group_id, sorted(topics))
                return True
            except NodeExistsError:
                log.debug("%s was created concurrently, updating it instead", path)
        self._zookeeper.set(path, value)
        log.info("Updated subscription of consumer %s in group %s to %s",
                 consumer_id, group_id, sorted(topics))
        return False

    def list_consumer(self, group_id):
        """Return the ids of the consumers registered in a group

        :param group_id: The consumer group
        :type group_id: str
        :returns: list of consumer ids, empty if the group does not exist
        """
        try:
            return list(self._zookeeper.get_children(paths.group_consumers(group_id)))
        except NoNodeError:
            log.debug("Consumer group %s doesn't exist. No consumers to list",
                      group_id)
            return []

    def get_consumer_registration(self, group_id, consumer_id):
        """Return the decoded registration of a consumer, or None"""
        path = paths.consumer_registration(group_id, consumer_id)
        data = read_node(self._zookeeper, path)
        if data is None:
            return None
        return decode_json(path, data)

    def get_consumers_per_topic(self, group_id):
        """Return a dict mapping each subscribed topic to a consumer id

        When several consumers subscribe to the same topic the one listed last
        wins. The result describes subscriptions only; it does not assign
        partitions.

        :param group_id: The consumer group
        :type group_id: str
        """
        topics = {}
        for consumer_id in self.list_consumer(group_id):
            registration = self.get_consumer_registration(group_id, consumer_id)
            if registration is None:
                # disappeared between ``get_children`` and ``get``
                log.warning("Skipping consumer %s of group %s: not registered",
                            consumer_id, group_id)
                continue
            if not isinstance(registration, dict):
                raise SchemaError(
                    paths.consumer_registration(group_id, consumer_id), 'subscription')
            subscription = registration.get('subscription') or {}
            if not isinstance(subscription, dict):
                raise SchemaError(
                    paths.consumer_registration(group_id, consumer_id), 'subscription')
            for topic in subscription:
                topics[topic] = consumer_id
        return topics

    def add_partition_owner(self, group_id, topic_name, partition_id, consumer_id):
        """Claim a partition of a topic for a consumer

        The first consumer to claim a partition keeps it until its session
        ends. Claims on a partition that is already owned change nothing.

        :param group_id: The consumer group
        :type group_id: str
        :param topic_name: The topic the partition belongs to
        :type topic_name: str
        :param partition_id: The partition to claim
        :type partition_id: int
        :param consumer_id: The consumer claiming the partition
        :type consumer_id: str
        :returns: True if this call took ownership of the partition
        """
        ensure_path(self._zookeeper, paths.partition_owner(group_id, topic_name),
                    acl=self._acl)
        path = paths.partition_owner_node(group_id, topic_name, partition_id)
        if self._zookeeper.exists(path) is not None:
            log.debug("Partition %s of %s is already owned", partition_id, topic_name)
            return False
        try:
            self._create_ephemeral(path, get_bytes(get_string(consumer_id)))
        except NodeExistsError:
            log.debug("Lost the claim on partition %s of %s", partition_id, topic_name)
            return False
        log.info("Consumer %s of group %s now owns partition %s of %s",
                 consumer_id, group_id, partition_id, topic_name)
        return True

    def get_partition_owner(self, group_id, topic_name, partition_id):
        """Return the id of the consumer owning a partition, or None"""
        data = read_node(self._zookeeper,
                         paths.partition_owner_node(group_id, topic_name, partition_id))
        return None if data is None else get_string(data)

    def list_partition_owners(self, group_id, topic_name):
        """Return a dict mapping partition id to owning consumer id

        :param group_id: The consumer group
        :type group_id: str
        :param topic_name: The topic
        :type topic_name: str
        """
        try:
            partition_ids = self._zookeeper.get_children(
                paths.partition_owner(group_id, topic_name))
        except NoNodeError:
            return {}
        owners = {}
        for partition_id in partition_ids:
            owner = self.get_partition_owner(group_id, topic_name, partition_id)
            if owner is not None:
                owners[int(partition_id)] = owner
        return owners
