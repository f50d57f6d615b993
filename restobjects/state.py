# Copyright (c) 2009-2010 Six Apart Ltd.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# * Redistributions of source code must retain the above copyright notice,
#   this list of conditions and the following disclaimer.
#
# * Redistributions in binary form must reproduce the above copyright notice,
#   this list of conditions and the following disclaimer in the documentation
#   and/or other materials provided with the distribution.
#
# * Neither the name of Six Apart Ltd. nor the names of its contributors may
#   be used to endorse or promote products derived from this software without
#   specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""

`State` is the mixin carrying the lifecycle flags shared by single resources
and resource collections, and the change tracking that sets ``is_dirty``.

A change to a tracked attribute is reported to `State._on_property_change()`.
The change dirties the object's parent if it has one (a `has_many`
collection reports to the resource owning it), and the object itself
otherwise, but only when that target is loaded or new. Changes to
placeholders that were never loaded are ignored.

Objects also report when they *become* dirty to any observers registered
with `add_observer()`. Collections observe their elements this way. Since
only the transition from clean to dirty is reported, propagation stops by
itself on cyclic object graphs.

"""

from contextlib import contextmanager
import logging
import weakref


log = logging.getLogger('restobjects.state')


class State(object):

    """Lifecycle state and change tracking for resources and collections."""

    is_new = True
    is_saving = False
    is_loaded = False
    is_error = False
    errors = None

    def __init__(self, non_observable=False, **kwargs):
        self._is_dirty = False
        self._observable = not non_observable
        self._suspended = 0
        self._batched = None
        self._observers = []
        self._event_handlers = {}
        with self.tracking_suspended():
            super(State, self).__init__(**kwargs)

    @classmethod
    def statefields(cls):
        """Returns the names of the state attributes `copy_state()` copies."""
        return ['is_new', 'is_dirty', 'is_loaded', 'is_error', 'errors']

    @property
    def is_observable(self):
        return self._observable

    @property
    def parent_object(self):
        return None

    def _get_is_dirty(self):
        return self._is_dirty

    def _set_is_dirty(self, value):
        value = bool(value)
        if value == self._is_dirty:
            return
        self._is_dirty = value
        if value:
            self._notify_observers('is_dirty')

    is_dirty = property(_get_is_dirty, _set_is_dirty)

    def add_observer(self, observer):
        """Registers `observer` to have its ``on_change(sender, key)`` method
        called when this object becomes dirty.

        Only a weak reference to `observer` is kept.

        """
        if self._find_observer(observer) is None:
            self._observers.append(weakref.ref(observer))

    def remove_observer(self, observer):
        ref = self._find_observer(observer)
        if ref is not None:
            self._observers.remove(ref)

    def _find_observer(self, observer):
        for ref in self._observers:
            if ref() is observer:
                return ref
        return None

    def _notify_observers(self, key):
        live = []
        for ref in self._observers:
            observer = ref()
            if observer is not None:
                live.append(ref)
        self._observers = live
        for ref in list(live):
            observer = ref()
            if observer is not None:
                observer.on_change(self, key)

    def _on_property_change(self, key):
        """Records that tracked attribute `key` of this object changed."""
        if not self._observable or self._suspended:
            return
        if self._batched is not None:
            self._batched.append(key)
            return

        target = self.parent_object
        if target is None:
            target = self
        elif not target._observable or target._suspended:
            return
        elif target._batched is not None:
            target._batched.append(key)
            return
        if target.is_loaded or target.is_new:
            target.is_dirty = True

    @contextmanager
    def tracking_suspended(self):
        """Returns a context manager inside which changes to this object are
        not tracked."""
        self._suspended += 1
        try:
            yield self
        finally:
            self._suspended -= 1

    @contextmanager
    def property_changes(self):
        """Returns a context manager that reports all the changes made inside
        it as one change when it exits."""
        if self._batched is not None:
            # Already batching; the outermost block reports.
            yield self
            return
        self._batched = []
        try:
            yield self
        finally:
            changed, self._batched = self._batched, None
        if changed:
            self._on_property_change(changed[-1])

    def on(self, event, callback):
        """Registers `callback` to be called with this object when `event`
        is triggered."""
        self._event_handlers.setdefault(event, []).append(callback)
        return self

    def off(self, event, callback=None):
        """Unregisters `callback` from `event`, or all of the event's
        callbacks if `callback` is not given."""
        if callback is None:
            self._event_handlers.pop(event, None)
        else:
            handlers = self._event_handlers.get(event, [])
            if callback in handlers:
                handlers.remove(callback)
        return self

    def _trigger_event(self, event):
        log.debug('%s triggered on %r', event, self)
        method = getattr(self, event, None)
        if callable(method):
            method()
        for callback in list(self._event_handlers.get(event, ())):
            callback(self)

    def _on_error(self, errors):
        """Records the failure payload `errors` of a request.

        With `restobjects.http.RESTAdapter`, `errors` is the exception the
        request was rejected with rather than the raw response body. A
        `RESTAdapter.RequestFailed` carries the body as its `content`, and
        the decoded body as its `data`.

        """
        log.debug('Request for %r failed: %r', self, errors)
        self.is_error = True
        self.errors = errors
        self._trigger_event('became_error')

    def clear_errors(self):
        self.is_error = False
        self.errors = None

    def copy_state(self, clone):
        """Copies this object's state flags onto `clone` and returns it."""
        for name in self.statefields():
            setattr(clone, name, getattr(self, name))
        return clone
