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
__all__ = ["ClusterMetadata"]
import abc


class ClusterMetadata(abc.ABC):
    """Abstraction of a source of Kafka cluster metadata."""

    @abc.abstractmethod
    def list_brokers(self):
        """Return a dict of broker id to broker detail for every live broker"""
        pass

    @abc.abstractmethod
    def get_topic_detail(self, topic_name):
        pass

    @abc.abstractmethod
    def get_partition_state(self, topic_name, partition_id=0):
        pass

    @abc.abstractmethod
    def refresh_metadata(self):
        """Forget any cached metadata.

        The next read must go back to the source of truth.
        """
        pass
