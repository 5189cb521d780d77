import unittest

import mock

from clustermeta import ClusterMetaClient
from clustermeta.membership import MembershipRegistrar
from clustermeta.metadata import MetadataReader
from clustermeta.test import FakeZookeeper
from clustermeta.watches import WatchManager


class ClusterMetaClientTests(unittest.TestCase):
    def test_borrowed_zookeeper(self):
        zk = FakeZookeeper()
        client = ClusterMetaClient(zookeeper=zk)
        self.assertIs(client.zookeeper, zk)
        self.assertIsInstance(client.metadata, MetadataReader)
        self.assertIsInstance(client.membership, MembershipRegistrar)
        self.assertIsInstance(client.watches, WatchManager)

    def test_stop_leaves_borrowed_zookeeper_alone(self):
        zk = mock.MagicMock()
        client = ClusterMetaClient(zookeeper=zk)
        client.stop()
        self.assertFalse(zk.stop.called)
        self.assertIs(client.zookeeper, zk)

    @mock.patch('clustermeta.config.KazooClient')
    def test_owned_zookeeper(self, kazoo_client):
        client = ClusterMetaClient(zookeeper_hosts='zk:2181',
                                   zookeeper_session_timeout_ms=4000)
        kazoo_client.assert_called_once_with(hosts='zk:2181', read_only=False,
                                             timeout=4.0)
        zk = kazoo_client.return_value
        zk.start.assert_called_once_with()
        self.assertIs(client.zookeeper, zk)

        client.stop()
        zk.stop.assert_called_once_with()
        zk.close.assert_called_once_with()
        self.assertIsNone(client.zookeeper)

    @mock.patch('clustermeta.config.KazooClient')
    def test_no_auto_start(self, kazoo_client):
        client = ClusterMetaClient(auto_start=False)
        self.assertFalse(kazoo_client.called)
        self.assertIsNone(client.metadata)
        client.start()
        self.assertIsInstance(client.metadata, MetadataReader)

    def test_refresh_metadata(self):
        zk = FakeZookeeper()
        client = ClusterMetaClient(zookeeper=zk)
        zk.create('/brokers', b'')
        zk.create('/brokers/ids', b'')
        zk.create('/brokers/ids/0', b'{"host": "h0", "port": 9092}')
        client.metadata.list_brokers()
        client.refresh_metadata()
        client.metadata.list_brokers()
        self.assertEqual(zk.calls['get_children'], 2)
