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
__all__ = ["Subscription", "WatchManager"]
import itertools
import logging

from kazoo.exceptions import KazooException, NoNodeError
from kazoo.protocol.states import EventType

from .utils import attribute_repr
from .utils.error_handlers import valid_callable


log = logging.getLogger(__name__)


class Subscription(object):
    """A callback registered against a path by :class:`WatchManager`

    Subscriptions compare equal when they hold equal callbacks for the same
    path, so two bound methods of one object count as the same callback.

    :ivar path: The watched path
    :ivar callback: Callable invoked with the
        :class:`kazoo.protocol.states.WatchedEvent` of every change
    :ivar token: Integer unique to this subscription within its manager
    """
    __slots__ = ["path", "callback", "token"]

    def __init__(self, path, callback, token):
        self.path = path
        self.callback = valid_callable(callback)
        self.token = token

    __repr__ = attribute_repr('path', 'token')

    def __eq__(self, other):
        if not isinstance(other, Subscription):
            return NotImplemented
        return self.path == other.path and self.callback == other.callback

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        # callbacks need not be hashable
        return hash(self.path)


class WatchManager(object):
    """
    Keeps callbacks informed about child changes of ZooKeeper paths.

    ZooKeeper fires a watch once and then forgets it. The manager therefore
    sets a new watch every time one fires, before handing the event to the
    callbacks registered for the path, so no change is missed while the
    callbacks run. Exactly one ZooKeeper watch is pending per path that has
    callbacks.

    Events are delivered on the ZooKeeper client's callback thread (or
    greenlet). Callbacks may call :meth:`watch` and :meth:`cancel_watch`.

    :param zookeeper: A started ZooKeeper client
    :type zookeeper: :class:`kazoo.client.KazooClient`
    """
    def __init__(self, zookeeper):
        self._zookeeper = zookeeper
        self._lock = zookeeper.handler.lock_object()
        self._subscriptions = {}
        # paths with a ZooKeeper watch still pending
        self._armed = set()
        self._tokens = itertools.count(1)

    __repr__ = attribute_repr('_zookeeper')

    def watch(self, path, callback):
        """Call `callback` every time the children of `path` change

        :param path: The path to watch
        :type path: str
        :param callback: Callable accepting a single
            :class:`kazoo.protocol.states.WatchedEvent`
        :returns: The :class:`Subscription` of the callback, or None if
            `callback` is not callable or `path` does not exist
        """
        if not callable(callback):
            log.warning("Not watching %s: %r is not callable", path, callback)
            return None
        if self._zookeeper.exists(path) is None:
            log.warning("Not watching %s: no such node", path)
            return None
        with self._lock:
            subscriptions = self._subscriptions.setdefault(path, [])
            matches = [s for s in subscriptions if s.callback == callback]
            added = not matches
            if added:
                subscription = Subscription(path, callback, next(self._tokens))
                subscriptions.append(subscription)
            else:
                subscription = matches[0]
            # a failed re-arm leaves callbacks without a pending watch
            needs_watch = path not in self._armed
            if needs_watch:
                self._armed.add(path)
        if needs_watch:
            try:
                self._zookeeper.get_children(path, watch=self._on_event)
            except NoNodeError:
                self._unarm(subscription, added)
                log.warning("Not watching %s: no such node", path)
                return None
            except Exception:
                self._unarm(subscription, added)
                raise
            log.debug("Watching children of %s", path)
        return subscription

    def _unarm(self, subscription, added):
        with self._lock:
            self._armed.discard(subscription.path)
            if added:
                self._remove(subscription)

    def _remove(self, subscription):
        """Drop a subscription from the table. Must hold self._lock"""
        subscriptions = self._subscriptions.get(subscription.path)
        if not subscriptions or subscription not in subscriptions:
            return False
        subscriptions.remove(subscription)
        if not subscriptions:
            del self._subscriptions[subscription.path]
        return True

    def _rearm(self, event):
        """Set a new watch on the path of `event`

        Deleted nodes get an existence watch so that their re-creation is
        noticed; the child watch is restored once it fires.
        """
        path = event.path
        if event.type != EventType.DELETED:
            try:
                self._zookeeper.get_children(path, watch=self._on_event)
                return
            except NoNodeError:
                pass
        self._zookeeper.exists(path, watch=self._on_event)

    def _on_event(self, event):
        """Re-arm the watch for `event.path` and deliver `event`"""
        path = event.path
        with self._lock:
            subscriptions = list(self._subscriptions.get(path, ()))
            if not subscriptions:
                self._armed.discard(path)
        if not subscriptions:
            log.debug("Dropping %s event for unwatched path %s", event.type, path)
            return
        try:
            self._rearm(event)
        except KazooException:
            log.exception("Unable to re-arm watch on %s", path)
            with self._lock:
                self._armed.discard(path)
        for subscription in subscriptions:
            try:
                subscription.callback(event)
            except Exception:
                log.exception("Watch callback for %s threw an exception", path)

    def cancel_watch(self, path, callback=None):
        """Stop delivering changes of `path` to one or all callbacks

        A watch already pending in ZooKeeper may still fire once; it is not
        re-armed when no callbacks remain.

        :param path: The watched path
        :type path: str
        :param callback: The callback, or its :class:`Subscription`, to
            remove. Removes every callback of `path` when None.
        :returns: None if `path` has no callbacks, otherwise whether a
            callback was removed
        """
        with self._lock:
            if path not in self._subscriptions:
                return None
            if callback is None:
                del self._subscriptions[path]
            else:
                if not isinstance(callback, Subscription):
                    matches = [s for s in self._subscriptions[path]
                               if s.callback == callback]
                    if not matches:
                        return False
                    callback = matches[0]
                elif callback.path != path:
                    return False
                return self._remove(callback)
        # a last read lets the server settle the watch it still holds
        self._zookeeper.exists(path)
        log.debug("Cancelled all watches on %s", path)
        return True

    def is_watched(self, path):
        """Whether `path` has at least one callback"""
        with self._lock:
            return path in self._subscriptions

    def watched_paths(self):
        """Return the sorted list of paths that have callbacks"""
        with self._lock:
            return sorted(self._subscriptions)
