import json
import unittest

import mock
from kazoo.exceptions import NodeExistsError

from clustermeta.exceptions import DecodeError, SchemaError
from clustermeta.membership import MembershipRegistrar
from clustermeta.test import FakeEnsemble, FakeZookeeper


class RegisterConsumerTests(unittest.TestCase):
    def setUp(self):
        self.zk = FakeZookeeper()
        self.registrar = MembershipRegistrar(self.zk)

    def _payload(self, path):
        value, _ = self.zk.get(path)
        return json.loads(value.decode('utf-8'))

    def test_empty_topics_is_noop(self):
        self.assertFalse(self.registrar.register_consumer('g', 'c1', set()))
        self.assertIsNone(self.zk.exists('/consumers/g/ids'))
        self.assertEqual(self.zk.calls['create'], 0)

    def test_register_creates_ephemeral_node(self):
        self.assertTrue(self.registrar.register_consumer('g', 'c1', {'t1', 't2'}))
        self.assertEqual(self._payload('/consumers/g/ids/c1'), {
            "version": "1",
            "pattern": "white_list",
            "subscription": {"t1": 1, "t2": 1},
        })
        stat = self.zk.exists('/consumers/g/ids/c1')
        self.assertEqual(stat.ephemeralOwner, self.zk.session_id)
        # ancestors are persistent and empty
        self.assertEqual(self.zk.exists('/consumers/g/ids').ephemeralOwner, 0)
        self.assertEqual(self.zk.get('/consumers/g')[0], b'')

    def test_register_twice_is_idempotent(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        first = self._payload('/consumers/g/ids/c1')
        self.assertFalse(self.registrar.register_consumer('g', 'c1', {'t1'}))
        self.assertEqual(self.zk.get_children('/consumers/g/ids'), ['c1'])
        self.assertEqual(self._payload('/consumers/g/ids/c1'), first)

    def test_reregister_replaces_subscription(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        self.registrar.register_consumer('g', 'c1', ['t2'])
        self.assertEqual(self._payload('/consumers/g/ids/c1')['subscription'],
                         {"t2": 1})
        self.assertEqual(self.zk.get_children('/consumers/g/ids'), ['c1'])

    def test_single_topic_name(self):
        self.registrar.register_consumer('g', 'c1', 'orders')
        self.assertEqual(self._payload('/consumers/g/ids/c1')['subscription'],
                         {"orders": 1})
        self.registrar.register_consumer('g', 'c1', [b'clicks'])
        self.assertEqual(self._payload('/consumers/g/ids/c1')['subscription'],
                         {"clicks": 1})

    def test_create_race_falls_back_to_set(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        with mock.patch.object(self.zk, 'exists', return_value=None), \
                mock.patch.object(self.zk, 'create', side_effect=NodeExistsError):
            self.assertFalse(self.registrar.register_consumer('g', 'c1', {'t3'}))
        self.assertEqual(self._payload('/consumers/g/ids/c1')['subscription'],
                         {"t3": 1})

    def test_registration_vanishes_with_session(self):
        ensemble = FakeEnsemble()
        session = FakeZookeeper(ensemble)
        MembershipRegistrar(session).register_consumer('g', 'c1', {'t1'})
        session.stop()

        other = FakeZookeeper(ensemble)
        registrar = MembershipRegistrar(other)
        self.assertEqual(registrar.list_consumer('g'), [])
        self.assertTrue(registrar.register_consumer('g', 'c1', {'t1'}))


class ConsumerListingTests(unittest.TestCase):
    def setUp(self):
        self.zk = FakeZookeeper()
        self.registrar = MembershipRegistrar(self.zk)

    def test_list_consumer_unknown_group(self):
        self.assertEqual(self.registrar.list_consumer('nobody'), [])

    def test_list_consumer(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        self.registrar.register_consumer('g', 'c2', {'t1'})
        self.registrar.register_consumer('other', 'c3', {'t1'})
        self.assertEqual(sorted(self.registrar.list_consumer('g')), ['c1', 'c2'])

    def test_consumers_per_topic(self):
        self.registrar.register_consumer('g', 'c1', {'t1', 't2'})
        self.registrar.register_consumer('g', 'c2', {'t2', 't3'})
        # the fake lists children in sorted order, so c2 is seen last
        self.assertEqual(self.registrar.get_consumers_per_topic('g'),
                         {'t1': 'c1', 't2': 'c2', 't3': 'c2'})

    def test_consumers_per_topic_empty_group(self):
        self.assertEqual(self.registrar.get_consumers_per_topic('g'), {})

    def test_consumers_per_topic_skips_vanished(self):
        self.registrar.register_consumer('g', 'c2', {'t2'})
        with mock.patch.object(self.registrar, 'list_consumer',
                               return_value=['c1', 'c2']):
            self.assertEqual(self.registrar.get_consumers_per_topic('g'),
                             {'t2': 'c2'})

    def test_consumers_per_topic_without_subscription(self):
        self.zk.create('/consumers', b'')
        self.zk.create('/consumers/g', b'')
        self.zk.create('/consumers/g/ids', b'')
        self.zk.create('/consumers/g/ids/c1', b'{"version": "1"}')
        self.assertEqual(self.registrar.get_consumers_per_topic('g'), {})

    def test_consumers_per_topic_bad_payload(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        self.zk.set('/consumers/g/ids/c1', b'garbage')
        with self.assertRaises(DecodeError):
            self.registrar.get_consumers_per_topic('g')

    def test_consumers_per_topic_non_object_payload(self):
        self.registrar.register_consumer('g', 'c1', {'t1'})
        for payload in (b'[1]', b'"x"', b'1', b'{"subscription": ["t1"]}'):
            self.zk.set('/consumers/g/ids/c1', payload)
            with self.assertRaises(SchemaError) as ctx:
                self.registrar.get_consumers_per_topic('g')
            self.assertEqual(ctx.exception.path, '/consumers/g/ids/c1')
            self.assertEqual(ctx.exception.field, 'subscription')

    def test_get_consumer_registration(self):
        self.assertIsNone(self.registrar.get_consumer_registration('g', 'c1'))
        self.registrar.register_consumer('g', 'c1', {'t1'})
        self.assertEqual(
            self.registrar.get_consumer_registration('g', 'c1')['pattern'],
            'white_list')


class PartitionOwnerTests(unittest.TestCase):
    def setUp(self):
        self.zk = FakeZookeeper()
        self.registrar = MembershipRegistrar(self.zk)

    def test_first_writer_wins(self):
        self.assertTrue(self.registrar.add_partition_owner('g', 'orders', 0, 'c1'))
        self.assertFalse(self.registrar.add_partition_owner('g', 'orders', 0, 'c2'))
        value, stat = self.zk.get('/consumers/g/owners/orders/0')
        self.assertEqual(value, b'c1')
        self.assertEqual(stat.ephemeralOwner, self.zk.session_id)
        self.assertEqual(self.registrar.get_partition_owner('g', 'orders', 0), 'c1')

    def test_first_writer_wins_across_sessions(self):
        ensemble = FakeEnsemble()
        first = MembershipRegistrar(FakeZookeeper(ensemble))
        second = MembershipRegistrar(FakeZookeeper(ensemble))
        self.assertTrue(second.add_partition_owner('g', 'orders', 1, 'c2'))
        self.assertFalse(first.add_partition_owner('g', 'orders', 1, 'c1'))
        self.assertEqual(first.get_partition_owner('g', 'orders', 1), 'c2')

    def test_lost_create_race_is_noop(self):
        self.registrar.add_partition_owner('g', 'orders', 0, 'c1')
        with mock.patch.object(self.zk, 'exists', return_value=None), \
                mock.patch.object(self.zk, 'create', side_effect=NodeExistsError):
            self.assertFalse(self.registrar.add_partition_owner('g', 'orders', 0, 'c2'))
        self.assertEqual(self.registrar.get_partition_owner('g', 'orders', 0), 'c1')

    def test_non_string_consumer_id(self):
        self.assertTrue(self.registrar.add_partition_owner('g', 'orders', 2, 7))
        self.assertEqual(self.zk.get('/consumers/g/owners/orders/2')[0], b'7')
        self.assertEqual(self.registrar.get_partition_owner('g', 'orders', 2), '7')

    def test_owner_released_with_session(self):
        ensemble = FakeEnsemble()
        session = FakeZookeeper(ensemble)
        MembershipRegistrar(session).add_partition_owner('g', 'orders', 0, 'c1')
        session.stop()
        registrar = MembershipRegistrar(FakeZookeeper(ensemble))
        self.assertIsNone(registrar.get_partition_owner('g', 'orders', 0))
        self.assertTrue(registrar.add_partition_owner('g', 'orders', 0, 'c2'))

    def test_list_partition_owners(self):
        self.assertEqual(self.registrar.list_partition_owners('g', 'orders'), {})
        self.registrar.add_partition_owner('g', 'orders', 0, 'c1')
        self.registrar.add_partition_owner('g', 'orders', 1, 'c2')
        self.assertEqual(self.registrar.list_partition_owners('g', 'orders'),
                         {0: 'c1', 1: 'c2'})
