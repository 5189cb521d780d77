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
__all__ = ["ZookeeperConfig"]
import logging

from kazoo.client import KazooClient
try:
    from kazoo.handlers.gevent import SequentialGeventHandler
except ImportError:
    SequentialGeventHandler = None

from .exceptions import InvalidArgumentError
from .utils import attribute_repr
from .utils.error_handlers import valid_int


log = logging.getLogger(__name__)


class ZookeeperConfig(object):
    """Settings for the connection to the ZooKeeper ensemble

    :param hosts: KazooClient-formatted string of ZooKeeper hosts to which to
        connect, optionally followed by a chroot (``host1:2181,host2:2181/kafka``)
    :type hosts: str
    :param session_timeout_ms: The ZooKeeper session timeout (in milliseconds).
        The client's default is used when None.
    :type session_timeout_ms: int
    :param connection_timeout_ms: How long (in milliseconds) :meth:`connect`
        waits for the connection to be established. The client's default is
        used when None.
    :type connection_timeout_ms: int
    :param read_only: Whether connecting to a read-only server is acceptable
    :type read_only: bool
    :param use_gevent: Whether the client should dispatch on greenlets instead
        of OS threads
    :type use_gevent: bool
    """
    def __init__(self,
                 hosts='127.0.0.1:2181',
                 session_timeout_ms=None,
                 connection_timeout_ms=None,
                 read_only=False,
                 use_gevent=False):
        if not hosts:
            raise InvalidArgumentError("At least one ZooKeeper host is required")
        if use_gevent and SequentialGeventHandler is None:
            raise ImportError('use_gevent can only be used when gevent is installed.')
        self.hosts = hosts
        self.session_timeout_ms = (None if session_timeout_ms is None
                                   else valid_int(session_timeout_ms))
        self.connection_timeout_ms = (None if connection_timeout_ms is None
                                      else valid_int(connection_timeout_ms))
        self.read_only = read_only
        self.use_gevent = use_gevent

    __repr__ = attribute_repr('hosts', 'session_timeout_ms')

    @classmethod
    def build(cls, kwargs=None):
        """Create a config from a dict, rejecting unknown settings"""
        kwargs = dict(kwargs or {})
        known = ('hosts', 'session_timeout_ms', 'connection_timeout_ms',
                 'read_only', 'use_gevent')
        unknown = sorted(k for k in kwargs if k not in known)
        if unknown:
            raise InvalidArgumentError(
                "Unknown ZooKeeper settings: {}".format(', '.join(unknown)))
        return cls(**kwargs)

    def client_kwargs(self):
        """Keyword arguments for :class:`kazoo.client.KazooClient`"""
        kazoo_kwargs = {'hosts': self.hosts, 'read_only': self.read_only}
        if self.session_timeout_ms is not None:
            kazoo_kwargs['timeout'] = self.session_timeout_ms / 1000
        if self.use_gevent:
            kazoo_kwargs['handler'] = SequentialGeventHandler()
        return kazoo_kwargs

    def make_client(self):
        """Return a new, not yet started, ZooKeeper client"""
        return KazooClient(**self.client_kwargs())

    def connect(self):
        """Return a new ZooKeeper client connected to :attr:`hosts`"""
        zookeeper = self.make_client()
        if self.connection_timeout_ms is None:
            zookeeper.start()
        else:
            zookeeper.start(timeout=self.connection_timeout_ms / 1000)
        log.debug("Connected to ZooKeeper at %s", self.hosts)
        return zookeeper
