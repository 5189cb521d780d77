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
__all__ = ["get_bytes", "get_string", "attribute_repr", "encode_json",
           "decode_json", "read_node", "ensure_path"]
import json
import logging

from kazoo.exceptions import NodeExistsError, NoNodeError
from kazoo.security import OPEN_ACL_UNSAFE

from ..exceptions import DecodeError
from ..paths import iter_prefixes


log = logging.getLogger(__name__)


def get_bytes(value):
    if hasattr(value, 'encode'):
        try:
            value = value.encode('utf-8')
        except UnicodeError:
            # if we can't encode the value just pass it along
            pass
    return value


def get_string(value):
    if hasattr(value, 'decode'):
        try:
            value = value.decode('utf-8')
        except UnicodeError:
            # if we can't decode the value just pass it along
            pass
    else:
        value = str(value)
    return value


def attribute_repr(*attributes):
    """
    Provides an alternative ``__repr__`` implementation that adds the values of
    the given attributes to the output as a development and debugging aid.

    For example::

        >>> class Foo(object):
        ...     __repr__ = attribute_repr('pk', 'slug')
        <foo.models.Foo at 0x100614c50: pk=1, slug=foo>

    :param \\*attributes: a sequence of strings that will be used for attribute
        dereferencing on ``self``.
    """
    def _repr(self):
        cls = self.__class__
        pairs = ('%s=%s' % (attribute, repr(getattr(self, attribute, None)))
                 for attribute in attributes)
        return '<%s.%s at 0x%x: %s>' % (
            cls.__module__, cls.__name__, id(self), ', '.join(pairs))
    return _repr


def encode_json(payload):
    """Serialize `payload` into the compact UTF-8 form stored in znodes"""
    return get_bytes(json.dumps(payload, separators=(',', ':'), sort_keys=True))


def decode_json(path, data):
    """Decode the JSON payload `data` read from `path`

    :raises: :class:`clustermeta.exceptions.DecodeError` if the payload is
        not valid UTF-8 JSON
    """
    try:
        return json.loads(data.decode('utf-8'))
    except (UnicodeError, ValueError) as e:
        raise DecodeError(path, e)


def read_node(zookeeper, path):
    """Return the raw payload of `path`, or None if the node is absent

    Empty payloads count as absent. A node that disappears between the
    existence check and the read is also reported as absent.
    """
    if zookeeper.exists(path) is None:
        return None
    try:
        data, _ = zookeeper.get(path)
    except NoNodeError:
        log.debug("%s disappeared before it could be read", path)
        return None
    return data or None


def ensure_path(zookeeper, path, value=b"", acl=None):
    """Equivalent of ``mkdir -p`` on ZooKeeper

    Creates every missing node from the top of `path` down to `path`
    itself as a persistent node holding `value`.

    :param zookeeper: A started ZooKeeper client
    :type zookeeper: :class:`kazoo.client.KazooClient`
    :param path: The deepest node that must exist afterwards
    :type path: str
    :param value: The payload given to every node created along the way
    :type value: bytes
    :param acl: The ACL given to created nodes. Defaults to world:anyone
    :type acl: list of :class:`kazoo.security.ACL`
    """
    acl = OPEN_ACL_UNSAFE if acl is None else acl
    for prefix in iter_prefixes(path):
        if zookeeper.exists(prefix) is not None:
            continue
        try:
            zookeeper.create(prefix, value, acl=acl)
            log.debug("Created node %s", prefix)
        except NodeExistsError:
            pass  # created by another session after ``exists``
