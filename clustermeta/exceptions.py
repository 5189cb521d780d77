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

"""
Errors raised by clustermeta.

Failures of the ZooKeeper client itself (connection loss, session expiry,
authentication failures) are raised as the original
:class:`kazoo.exceptions.KazooException` subclasses and are never wrapped.
"""


class ClusterMetaException(Exception):
    """Generic exception type. The base of all clustermeta exception types."""
    pass


class NotFoundError(ClusterMetaException):
    """Indicates that a znode required by an operation does not exist"""

    def __init__(self, path, *args, **kwargs):
        super(NotFoundError, self).__init__(
            "No node exists at {}".format(path), *args, **kwargs)
        self.path = path


class DecodeError(ClusterMetaException, ValueError):
    """Indicates that a znode holds a payload that is not valid JSON"""

    def __init__(self, path, reason, *args, **kwargs):
        super(DecodeError, self).__init__(
            "Unable to decode payload of {}: {}".format(path, reason),
            *args, **kwargs)
        self.path = path


class SchemaError(ClusterMetaException):
    """Indicates that a decoded payload is missing an expected field"""

    def __init__(self, path, field, *args, **kwargs):
        super(SchemaError, self).__init__(
            "Payload of {} has no usable '{}' field".format(path, field),
            *args, **kwargs)
        self.path = path
        self.field = field


class InvalidArgumentError(ClusterMetaException, ValueError):
    """Indicates that an argument could not be used"""
    pass
