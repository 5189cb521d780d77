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

__all__ = ["ClusterMetaClient"]

import logging

from .config import ZookeeperConfig
from .membership import MembershipRegistrar
from .metadata import MetadataReader
from .watches import WatchManager


log = logging.getLogger(__name__)


class ClusterMetaClient(object):
    """
    Access to the cluster state a Kafka cluster keeps in ZooKeeper.

    Groups the three views on that state behind one ZooKeeper session:

    * `metadata`, a :class:`clustermeta.metadata.MetadataReader`, for brokers,
      topics and partition state
    * `membership`, a :class:`clustermeta.membership.MembershipRegistrar`, for
      consumer group registrations and partition ownership
    * `watches`, a :class:`clustermeta.watches.WatchManager`, for change
      notifications

    The client never talks to the brokers themselves.
    """
    def __init__(self,
                 zookeeper_hosts='127.0.0.1:2181',
                 zookeeper_session_timeout_ms=None,
                 zookeeper=None,
                 auto_start=True):
        """Create a client for the cluster registered at `zookeeper_hosts`

        :param zookeeper_hosts: KazooClient-formatted string of ZooKeeper hosts
            to which to connect. Ignored if `zookeeper` is given.
        :type zookeeper_hosts: str
        :param zookeeper_session_timeout_ms: The ZooKeeper session timeout (in
            milliseconds). Ignored if `zookeeper` is given.
        :type zookeeper_session_timeout_ms: int
        :param zookeeper: A KazooClient connected to a ZooKeeper instance. It
            is neither started nor stopped by this client.
        :type zookeeper: :class:`kazoo.client.KazooClient`
        :param auto_start: Whether to connect to ZooKeeper as part of
            construction. If False, :meth:`start` must be called before use.
        :type auto_start: bool
        """
        self._config = ZookeeperConfig(hosts=zookeeper_hosts,
                                       session_timeout_ms=zookeeper_session_timeout_ms)
        self._owns_zookeeper = zookeeper is None
        self._zookeeper = zookeeper
        self.metadata = None
        self.membership = None
        self.watches = None
        if zookeeper is not None:
            self._setup_views()
        if auto_start is True:
            self.start()

    def __repr__(self):
        return "<{module}.{name} at {id_} (hosts={hosts})>".format(
            module=self.__class__.__module__,
            name=self.__class__.__name__,
            id_=hex(id(self)),
            hosts=self._config.hosts,
        )

    def _setup_views(self):
        self.metadata = MetadataReader(self._zookeeper)
        self.membership = MembershipRegistrar(self._zookeeper)
        self.watches = WatchManager(self._zookeeper)

    @property
    def zookeeper(self):
        """The ZooKeeper client backing this instance"""
        return self._zookeeper

    def start(self):
        """Connect to ZooKeeper if this client owns its connection"""
        if self._zookeeper is None:
            self._zookeeper = self._config.connect()
            self._setup_views()

    def stop(self):
        """Close the ZooKeeper session if this client opened it

        Ending the session removes every consumer registration and partition
        claim made through it.
        """
        log.debug("Stopping {}".format(self))
        if self._owns_zookeeper and self._zookeeper is not None:
            self._zookeeper.stop()
            self._zookeeper.close()
            self._zookeeper = None

    def refresh_metadata(self):
        """Clear cached cluster metadata"""
        self.metadata.refresh_metadata()
