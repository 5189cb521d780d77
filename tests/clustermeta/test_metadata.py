import json
import unittest

from clustermeta.common import PartitionDescriptor
from clustermeta.exceptions import DecodeError, NotFoundError, SchemaError
from clustermeta.metadata import MetadataReader
from clustermeta.test import FakeZookeeper
from clustermeta.utils import ensure_path


def _put(zk, path, value):
    ensure_path(zk, path)
    if not isinstance(value, bytes):
        value = json.dumps(value).encode('utf-8')
    zk.set(path, value)


class MetadataReaderTests(unittest.TestCase):
    def setUp(self):
        self.zk = FakeZookeeper()
        self.reader = MetadataReader(self.zk)
        _put(self.zk, '/brokers/ids/0', {"host": "h0", "port": 9092})
        ensure_path(self.zk, '/brokers/ids/1')  # registered without detail
        self.zk.calls.clear()

    def test_list_brokers_skips_missing_detail(self):
        self.assertEqual(self.reader.list_brokers(),
                         {0: {"host": "h0", "port": 9092}})

    def test_list_brokers_is_cached(self):
        first = self.reader.list_brokers()
        calls = dict(self.zk.calls)
        second = self.reader.list_brokers()
        self.assertEqual(first, second)
        self.assertEqual(dict(self.zk.calls), calls)
        self.assertEqual(self.zk.calls['get_children'], 1)

    def test_cached_result_is_a_copy(self):
        self.reader.list_brokers()[5] = {}
        self.assertNotIn(5, self.reader.list_brokers())

    def test_refresh_metadata_refetches(self):
        self.reader.list_brokers()
        _put(self.zk, '/brokers/ids/1', {"host": "h1", "port": 9093})
        self.assertNotIn(1, self.reader.list_brokers())

        self.reader.refresh_metadata()
        self.reader.refresh_metadata()
        before = self.zk.calls['get_children']
        brokers = self.reader.list_brokers()
        self.assertEqual(self.zk.calls['get_children'], before + 1)
        self.assertEqual(brokers[1], {"host": "h1", "port": 9093})

    def test_list_brokers_without_root(self):
        reader = MetadataReader(FakeZookeeper())
        self.assertEqual(reader.list_brokers(), {})

    def test_list_brokers_invalid_json(self):
        _put(self.zk, '/brokers/ids/2', b'{not json')
        with self.assertRaises(DecodeError):
            self.reader.list_brokers()

    def test_get_broker_detail(self):
        self.assertEqual(self.reader.get_broker_detail(0),
                         {"host": "h0", "port": 9092})
        self.assertIsNone(self.reader.get_broker_detail(1))
        self.assertIsNone(self.reader.get_broker_detail(9))

    def test_get_broker_detail_bypasses_cache(self):
        self.reader.list_brokers()
        _put(self.zk, '/brokers/ids/0', {"host": "other", "port": 1})
        self.assertEqual(self.reader.get_broker_detail(0)["host"], "other")

    def test_get_broker_detail_decode_error(self):
        _put(self.zk, '/brokers/ids/3', b'\xff\xfe')
        with self.assertRaises(DecodeError) as ctx:
            self.reader.get_broker_detail(3)
        self.assertEqual(ctx.exception.path, '/brokers/ids/3')

    def test_missing_topic(self):
        self.assertIsNone(self.reader.get_topic_detail("orders"))
        with self.assertRaises(NotFoundError):
            self.reader.list_partitions("orders")

    def test_list_partitions_from_mapping(self):
        _put(self.zk, '/brokers/topics/orders',
             {"version": 1, "partitions": {"10": [0], "2": [1, 0], "0": [0, 1]}})
        self.assertEqual(self.reader.list_partitions("orders"), [
            PartitionDescriptor(0, [0, 1]),
            PartitionDescriptor(2, [1, 0]),
            PartitionDescriptor(10, [0]),
        ])

    def test_list_partitions_from_list(self):
        _put(self.zk, '/brokers/topics/orders', {"partitions": [[0], [1]]})
        partitions = self.reader.list_partitions("orders")
        self.assertEqual([p.id for p in partitions], [0, 1])
        self.assertEqual(partitions[1].replicas, [1])

    def test_list_partitions_schema_error(self):
        _put(self.zk, '/brokers/topics/orders', {"version": 1})
        with self.assertRaises(SchemaError) as ctx:
            self.reader.list_partitions("orders")
        self.assertEqual(ctx.exception.field, 'partitions')

    def test_list_partitions_bad_partition_id(self):
        _put(self.zk, '/brokers/topics/orders', {"partitions": {"x": [0]}})
        with self.assertRaises(SchemaError):
            self.reader.list_partitions("orders")

    def test_get_partition_state(self):
        state = {"controller_epoch": 1, "leader": 0, "leader_epoch": 3, "isr": [0, 1]}
        _put(self.zk, '/brokers/topics/orders/partitions/0/state', state)
        self.assertEqual(self.reader.get_partition_state("orders"), state)
        self.assertIsNone(self.reader.get_partition_state("orders", 1))

    def test_list_topics(self):
        self.assertEqual(self.reader.list_topics(), [])
        _put(self.zk, '/brokers/topics/orders', {"partitions": {}})
        _put(self.zk, '/brokers/topics/clicks', {"partitions": {}})
        self.assertEqual(self.reader.list_topics(), ['clicks', 'orders'])
