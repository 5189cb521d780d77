import logging

from .client import ClusterMetaClient
from .common import PartitionDescriptor, SubscriptionPattern
from .config import ZookeeperConfig
from .membership import MembershipRegistrar
from .metadata import MetadataReader
from .watches import Subscription, WatchManager

__version__ = '0.1.0'


__all__ = ["ClusterMetaClient", "ZookeeperConfig", "MetadataReader",
           "MembershipRegistrar", "WatchManager", "Subscription",
           "PartitionDescriptor", "SubscriptionPattern"]

logging.getLogger(__name__).addHandler(logging.NullHandler())
