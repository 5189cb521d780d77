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
__all__ = ["MetadataReader"]
import logging

from kazoo.exceptions import NoNodeError

from . import paths
from .abstract import ClusterMetadata
from .common import PartitionDescriptor
from .exceptions import NotFoundError, SchemaError
from .utils import attribute_repr, decode_json, read_node


log = logging.getLogger(__name__)


class MetadataReader(ClusterMetadata):
    """
    Reads the layout of a Kafka cluster from the ZooKeeper nodes its brokers
    maintain.

    The broker list is cached after the first read and only forgotten on
    :meth:`refresh_metadata`. Every other lookup goes straight to ZooKeeper.

    :param zookeeper: A started ZooKeeper client
    :type zookeeper: :class:`kazoo.client.KazooClient`
    """
    def __init__(self, zookeeper):
        self._zookeeper = zookeeper
        self._brokers = {}
        self._brokers_lock = zookeeper.handler.lock_object()

    __repr__ = attribute_repr('_zookeeper')

    def _read_json(self, path):
        data = read_node(self._zookeeper, path)
        if data is None:
            return None
        return decode_json(path, data)

    def list_brokers(self):
        """Return a dict mapping broker id to broker detail

        Brokers whose detail node is missing or empty are left out.
        """
        with self._brokers_lock:
            if not self._brokers:
                self._brokers = self._fetch_brokers()
            return dict(self._brokers)

    def _fetch_brokers(self):
        log.debug("Populating broker cache from %s", paths.brokers_root())
        try:
            broker_ids = self._zookeeper.get_children(paths.brokers_root())
        except NoNodeError:
            log.warning("%s does not exist -- is the Kafka cluster running?",
                        paths.brokers_root())
            return {}
        brokers = {}
        for broker_id in broker_ids:
            detail = self.get_broker_detail(broker_id)
            if not detail:
                log.warning("Skipping broker %s: no detail registered", broker_id)
                continue
            brokers[int(broker_id)] = detail
        log.debug("Found %d broker(s)", len(brokers))
        return brokers

    def get_broker_detail(self, broker_id):
        """Return the detail of one broker, or None if it is not registered

        :param broker_id: The id of the broker
        :type broker_id: int
        """
        return self._read_json(paths.broker_detail(broker_id))

    def list_topics(self):
        """Return the sorted names of all topics known to the cluster"""
        try:
            return sorted(self._zookeeper.get_children(paths.topics_root()))
        except NoNodeError:
            return []

    def get_topic_detail(self, topic_name):
        """Return the detail of a topic, or None if the topic does not exist

        :param topic_name: The name of the topic
        :type topic_name: str
        """
        return self._read_json(paths.topic_detail(topic_name))

    def list_partitions(self, topic_name):
        """Return the partitions of a topic ordered by partition id

        :param topic_name: The name of the topic
        :type topic_name: str
        :returns: list of :class:`clustermeta.common.PartitionDescriptor`
        :raises: :class:`clustermeta.exceptions.NotFoundError` if the topic
            does not exist, :class:`clustermeta.exceptions.SchemaError` if
            its detail lacks a partition map
        """
        path = paths.topic_detail(topic_name)
        detail = self.get_topic_detail(topic_name)
        if detail is None:
            raise NotFoundError(path)
        partitions = detail.get('partitions') if isinstance(detail, dict) else None
        if isinstance(partitions, dict):
            try:
                items = [(int(id_), replicas) for id_, replicas in partitions.items()]
            except (TypeError, ValueError):
                raise SchemaError(path, 'partitions')
        elif isinstance(partitions, list):
            items = list(enumerate(partitions))
        else:
            raise SchemaError(path, 'partitions')
        return [PartitionDescriptor(id_, replicas)
                for id_, replicas in sorted(items, key=lambda item: item[0])]

    def get_partition_state(self, topic_name, partition_id=0):
        """Return the state (leader, isr, epochs) of a partition, or None

        :param topic_name: The name of the topic
        :type topic_name: str
        :param partition_id: The id of the partition within the topic
        :type partition_id: int
        """
        return self._read_json(paths.partition_state(topic_name, partition_id))

    def refresh_metadata(self):
        """Clear the broker cache"""
        with self._brokers_lock:
            self._brokers = {}
        log.debug("Broker cache cleared")
