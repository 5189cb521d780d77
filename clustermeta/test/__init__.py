from .zookeeper import FakeEnsemble, FakeZookeeper

__all__ = ["FakeEnsemble", "FakeZookeeper"]
