import argparse
import logging
import sys
import time

import tabulate

import clustermeta
from clustermeta import paths

#
# Commands
#


def print_brokers(client, args):
    """Print every live broker registered in the cluster.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    """
    brokers = client.metadata.list_brokers()
    print(tabulate.tabulate(
        [(broker_id, detail.get('host'), detail.get('port'))
         for broker_id, detail in sorted(brokers.items())],
        headers=['Broker', 'Host', 'Port'],
        numalign='center',
    ))


def print_topics(client, args):
    """Print all topics in the cluster.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    """
    rows = []
    for name in client.metadata.list_topics():
        partitions = client.metadata.list_partitions(name)
        rows.append((name,
                     len(partitions),
                     len(partitions[0].replicas) if partitions else 0))
    print(tabulate.tabulate(
        rows,
        headers=['Topic', 'Partitions', 'Replicas'],
        numalign='center',
    ))


def desc_topic(client, args):
    """Print detailed information about a topic.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    :param topic:  Name of the topic.
    :type topic:  :class:`str`
    """
    partitions = client.metadata.list_partitions(args.topic)
    print('Topic: {}'.format(args.topic))
    print('Partitions: {}'.format(len(partitions)))
    rows = []
    for partition in partitions:
        state = client.metadata.get_partition_state(args.topic, partition.id) or {}
        rows.append((partition.id, state.get('leader'), partition.replicas,
                     state.get('isr'), state.get('leader_epoch')))
    print(tabulate.tabulate(
        rows,
        headers=['Partition', 'Leader', 'Replicas', 'ISR', 'Leader Epoch'],
        numalign='center',
    ))


def print_consumers(client, args):
    """Print the consumers registered in a group and their subscriptions.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    :param consumer_group: Name of the consumer group.
    :type consumer_group: :class:`str`
    """
    rows = []
    for consumer_id in sorted(client.membership.list_consumer(args.consumer_group)):
        registration = client.membership.get_consumer_registration(
            args.consumer_group, consumer_id)
        if registration is None:
            continue
        rows.append((consumer_id, registration.get('pattern'),
                     ', '.join(sorted(registration.get('subscription') or {}))))
    print('Consumer group: {}'.format(args.consumer_group))
    print(tabulate.tabulate(rows, headers=['Consumer', 'Pattern', 'Topics']))


def print_consumers_per_topic(client, args):
    """Print the consumer recorded for each topic subscribed to by a group.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    :param consumer_group: Name of the consumer group.
    :type consumer_group: :class:`str`
    """
    consumers = client.membership.get_consumers_per_topic(args.consumer_group)
    print(tabulate.tabulate(sorted(consumers.items()),
                            headers=['Topic', 'Consumer']))


def print_partition_owners(client, args):
    """Print which consumer of a group owns each partition of a topic.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    :param consumer_group: Name of the consumer group.
    :type consumer_group: :class:`str`
    :param topic:  Name of the topic.
    :type topic:  :class:`str`
    """
    owners = client.membership.list_partition_owners(args.consumer_group, args.topic)
    print(tabulate.tabulate(sorted(owners.items()),
                            headers=['Partition', 'Owner'],
                            numalign='center'))


def watch_path(client, args):
    """Print child changes of a path until interrupted.

    :param client: ClusterMetaClient connected to the cluster.
    :type client:  :class:`clustermeta.ClusterMetaClient`
    :param path: The ZooKeeper path to watch.
    :type path: :class:`str`
    """
    def _print_event(event):
        print('{} {} {}'.format(event.type, event.state, event.path))
        sys.stdout.flush()

    if client.watches.watch(args.path, _print_event) is None:
        raise ValueError('Path {} does not exist.'.format(args.path))
    print('Watching {} (Ctrl-C to stop)'.format(args.path))
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        client.watches.cancel_watch(args.path)


def _add_consumer_group(parser):
    """Add consumer_group to arg parser."""
    parser.add_argument('consumer_group',
                        metavar='CONSUMER_GROUP',
                        help='Consumer group name.')


def _add_topic(parser):
    """Add topic to arg parser."""
    parser.add_argument('topic',
                        metavar='TOPIC',
                        help='Topic name.')


def _get_arg_parser():
    output = argparse.ArgumentParser(
        description='Tools for inspecting Kafka cluster state in ZooKeeper.')

    # Common arguments
    output.add_argument('-z', '--zookeeper',
                        required=False,
                        default='127.0.0.1:2181',
                        dest='zookeeper',
                        help='ZooKeeper connect string. '
                             '[default: 127.0.0.1:2181]')
    output.add_argument('-t', '--session_timeout_ms',
                        required=False,
                        default=None,
                        type=int,
                        dest='session_timeout_ms',
                        help='ZooKeeper session timeout in milliseconds')
    output.add_argument('--log-level',
                        default='WARNING',
                        dest='log_level',
                        help='Logging level [default: WARNING]')

    subparsers = output.add_subparsers(help='Commands', dest='command')

    parser = subparsers.add_parser(
        'print_brokers',
        help='Print the brokers registered in the cluster.'
    )
    parser.set_defaults(func=print_brokers)

    parser = subparsers.add_parser(
        'print_topics',
        help='Print information about all topics in the cluster.'
    )
    parser.set_defaults(func=print_topics)

    parser = subparsers.add_parser(
        'desc_topic',
        help='Print detailed info for a topic.'
    )
    parser.set_defaults(func=desc_topic)
    _add_topic(parser)

    parser = subparsers.add_parser(
        'print_consumers',
        help='Print the consumers registered in a consumer group.'
    )
    parser.set_defaults(func=print_consumers)
    _add_consumer_group(parser)

    parser = subparsers.add_parser(
        'print_consumers_per_topic',
        help='Print the consumer recorded for each topic of a consumer group.'
    )
    parser.set_defaults(func=print_consumers_per_topic)
    _add_consumer_group(parser)

    parser = subparsers.add_parser(
        'print_partition_owners',
        help='Print partition ownership of a topic within a consumer group.'
    )
    parser.set_defaults(func=print_partition_owners)
    _add_consumer_group(parser)
    _add_topic(parser)

    parser = subparsers.add_parser(
        'watch_path',
        help='Print child changes of a ZooKeeper path until interrupted.'
    )
    parser.set_defaults(func=watch_path)
    parser.add_argument('path',
                        metavar='PATH',
                        help='ZooKeeper path, e.g. {}'.format(paths.brokers_root()))

    return output


def main():
    parser = _get_arg_parser()
    args = parser.parse_args()
    if args.command:
        logger = logging.getLogger()
        logger.setLevel(getattr(logging, args.log_level.upper()))
        logger.addHandler(logging.StreamHandler())
        client = clustermeta.ClusterMetaClient(
            zookeeper_hosts=args.zookeeper,
            zookeeper_session_timeout_ms=args.session_timeout_ms)
        try:
            args.func(client, args)
        finally:
            client.stop()
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
