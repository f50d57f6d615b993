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

`Resource` is the class to subclass for each type of resource in your API.

A `Resource` instance represents one remote entity. It knows whether it has
been saved yet (`is_new`), whether it has local changes (`is_dirty`), and
which request it is waiting on (`current_request`). Its class finds existing
entities with `find()`, `find_all()` and `find_by_id()`.

Requests are issued through the class's adapter, and every state transition
that depends on a response happens in a continuation attached to the
request's handle. Nothing blocks; results fill in when requests settle.

"""

import logging
import numbers

from restobjects import fields
from restobjects.dataobject import DataObject
from restobjects.listobject import ResourceCollection
from restobjects.promise import Request
from restobjects.state import State
import restobjects.http


log = logging.getLogger('restobjects.resource')


def attach_transitions(request, succeeded, failed, settled=None):
    """Attaches the state transitions for `request` as one continuation.

    `succeeded` or `failed` runs with the outcome, then `settled` runs even
    if that raised. Because it is a single continuation, this holds whether
    `request` is still pending or settled before this was called.

    """
    def finished(value):
        try:
            if request.is_resolved:
                succeeded(value)
            else:
                failed(value)
        finally:
            if settled is not None:
                settled(value)
    request.always(finished)
    return request


class Resource(State, DataObject):

    """A local object representing one remote REST resource.

    Declare a resource's attributes as fields:

    >>> from restobjects import Resource, fields
    >>> class Post(Resource):
    ...     title    = fields.Field('string')
    ...     author   = fields.BelongsTo('Author')
    ...     comments = fields.HasMany('Comment')
    ...
    >>> post = Post.find(1)
    >>> post.title = 'Edited'
    >>> post.is_dirty
    True
    >>> post.save_record()

    Pass ``non_observable=True`` to create an instance whose changes are not
    tracked at all.

    """

    id = fields.Field('number')

    adapter = None

    def __init__(self, non_observable=False, **kwargs):
        self.current_request = None
        self.is_destroyed = False
        super(Resource, self).__init__(non_observable=non_observable, **kwargs)

    def __repr__(self):
        return '<%s %s=%r>' % (type(self).__name__, type(self).primary_key(),
            self.__dict__.get(type(self).primary_key()))

    @classmethod
    def get_adapter(cls):
        if cls.adapter is not None:
            return cls.adapter
        return restobjects.http.default_adapter

    @classmethod
    def primary_key(cls):
        """Returns the name of the primary key attribute, ``id`` unless
        configured otherwise through the adapter's `map()`."""
        return cls.get_adapter().model_options(cls).get('primary_key', 'id')

    @classmethod
    def resource_name(cls):
        return cls.__name__.lower()

    @classmethod
    def resource_name_plural(cls):
        return cls.get_adapter().plural_for(cls.resource_name())

    @classmethod
    def statefields(cls):
        # is_new follows the primary key, which copy() copies.
        return [name for name in super(Resource, cls).statefields()
            if name != 'is_new']

    @property
    def is_new(self):
        return getattr(self, type(self).primary_key(), None) is None

    def serialize(self):
        return type(self).get_adapter().serialize(self)

    def deserialize(self, data):
        return type(self).get_adapter().deserialize(self, data)

    def deserialize_resource(self, payload):
        """Updates the resource from a response wrapped in its resource name,
        such as ``{"post": {"id": 1, "title": "..."}}``."""
        if not payload:
            return self
        resource_name = type(self).resource_name()
        try:
            data = payload[resource_name]
        except (KeyError, TypeError):
            log.warning('Response for %r has no %r object', self, resource_name)
            return self
        if not isinstance(data, dict):
            log.warning('Response for %r has a non-object %r: %r', self,
                resource_name, data)
            return self
        return self.deserialize(data)

    @classmethod
    def load(cls, data):
        """Returns a new loaded, clean instance decoded from `data`, without
        issuing a request."""
        self = cls()
        self.deserialize(data)
        self.is_loaded = True
        return self

    def _clear_current_request(self, value):
        self.current_request = None

    def request(self, method='GET', data=None, **kwargs):
        """Issues a request for this resource through the class's adapter and
        returns its handle.

        If the resource has no primary key yet but `data` carries an ``id``,
        that id addresses the request and is left out of the data sent.

        """
        cls = type(self)
        resource_name = cls.resource_name_plural()
        resource_id = getattr(self, cls.primary_key(), None)

        if resource_id is None and isinstance(data, dict) and data.get('id') is not None:
            data = dict(data)
            resource_id = data.pop('id')

        params = dict(method=method, data=data)
        params.update(kwargs)
        request = cls.get_adapter().request(params, resource_name, resource_id)

        # Keep the active request until it settles, however it settles.
        self.current_request = request
        request.always(self._clear_current_request)
        return request

    def _check_destroyed(self, action):
        if self.is_destroyed:
            raise ValueError('Cannot %s destroyed %r' % (action, self))

    def save_record(self):
        """Saves the resource: ``POST`` if it is new, ``PUT`` if it is dirty.

        A resource that is neither new nor dirty isn't sent; an already
        resolved handle is returned instead.

        """
        self._check_destroyed('save')
        if not self.is_new and not self.is_dirty:
            return Request.resolved()

        if self.is_saving:
            # Overlapping saves aren't serialized; the last request started
            # becomes current_request, and both sets of callbacks run.
            log.warning('Saving %r while a previous save is still in flight', self)

        # Which event to fire depends on whether the resource was new when
        # the save began, not when it ends.
        is_new = self.is_new
        was_dirty = self.is_dirty
        self.is_saving = True
        method = 'POST' if is_new else 'PUT'
        log.debug('Saving %r with %s', self, method)
        save_request = self.request(method=method, data=self.serialize())
        self.is_dirty = False

        def saved(payload):
            self.deserialize_resource(payload)
            self.clear_errors()
            self.mark_clean()
            self._trigger_event('did_create' if is_new else 'did_update')

        def failed(failure):
            self._on_error(failure)
            if was_dirty:
                self.is_dirty = True

        def settled(value):
            self.is_saving = False
            self.is_loaded = True
            self._trigger_event('did_load')

        attach_transitions(save_request, saved, failed, settled)
        return save_request

    def delete_record(self):
        """Deletes the remote resource. Once the deletion succeeds the
        resource is destroyed."""
        self._check_destroyed('delete')
        log.debug('Deleting %r', self)
        delete_request = self.request(method='DELETE', data=self.serialize())

        def deleted(payload):
            self._trigger_event('did_delete')
            self.destroy()

        attach_transitions(delete_request, deleted, self._on_error)
        return delete_request

    def reload_record(self):
        """Fetches the resource again by its primary key, discarding local
        changes."""
        self._check_destroyed('reload')
        reload_request = self.request(method='GET')

        def reloaded(payload):
            self.deserialize_resource(payload)
            self.clear_errors()
            self.mark_clean()

        def settled(value):
            self.is_loaded = True
            self._trigger_event('did_load')

        attach_transitions(reload_request, reloaded, self._on_error, settled)
        return reload_request

    def destroy(self):
        """Disconnects the resource: it stops tracking changes and can no
        longer be saved or deleted."""
        log.debug('Destroying %r', self)
        self.is_destroyed = True
        self._observable = False
        self._observers = []
        self._event_handlers = {}
        for collection in self._collections():
            collection.disconnect()

    def _collections(self):
        for name, field in self.fields.items():
            if field.kind == fields.HAS_MANY:
                collection = self.__dict__.get(name)
                if collection is not None:
                    yield collection

    def mark_clean(self, seen=None):
        """Marks the resource clean, along with the collections it holds and
        their resources, which are saved along with it."""
        if seen is None:
            seen = set()
        if id(self) in seen:
            return
        seen.add(id(self))
        self.is_dirty = False
        for collection in self._collections():
            collection.is_dirty = False
            for item in collection:
                item.mark_clean(seen)

    def copy(self, deep=False, memo=None):
        """Returns a new instance of this class with the same attribute
        values.

        Related resources are shared with the copy, unless `deep` is true,
        in which case they are copied too. Each has_many collection of the
        copy is its own, holding the same (or copied) elements.

        """
        if memo is None:
            memo = {}
        if id(self) in memo:
            return memo[id(self)]
        clone = type(self)()
        memo[id(self)] = clone

        with self.property_changes(), clone.property_changes():
            for name, field in self.fields.items():
                # Placeholders nobody has read yet stay unbuilt.
                value = self.__dict__.get(name)
                if value is None:
                    continue
                if deep and field.kind != fields.SCALAR:
                    value = value.copy(deep=True, memo=memo)
                setattr(clone, name, value)
        return clone

    def copy_with_state(self, deep=False):
        """Returns a copy of the resource that also has its state flags."""
        return self.copy_state(self.copy(deep))

    @classmethod
    def find(cls, params=None):
        """Finds resources of this class.

        If `params` is a string or a number, it's taken as a primary key and
        the single resource with that key is returned (see `find_by_id()`).
        Otherwise `params` are query parameters for finding a collection of
        resources (see `find_all()`).

        """
        if isinstance(params, (str, numbers.Number)) and not isinstance(params, bool):
            return cls.find_by_id(params)
        return cls.find_all(params)

    @classmethod
    def find_all(cls, params=None):
        """Returns a `ResourceCollection` that fills with the resources of
        this class matching the query parameters `params` once the request
        for them succeeds."""
        resource_name_plural = cls.resource_name_plural()
        # Only used to issue the request; never kept.
        resource_instance = cls(non_observable=True)
        result = ResourceCollection(cls)
        find_request = resource_instance.request(method='GET', data=params)

        def found(payload):
            data = None
            if isinstance(payload, dict):
                data = payload.get(resource_name_plural)
            if data is None:
                log.warning('Response for %s has no %r list', cls.__name__,
                    resource_name_plural)
            result.deserialize_many(data or ())
            result.clear_errors()
            meta = cls.get_adapter().extract_meta(payload)
            if meta is not None:
                result.meta = meta

        def settled(value):
            result.is_loaded = True
            result._trigger_event('did_load')

        attach_transitions(find_request, found, result._on_error, settled)
        return result

    @classmethod
    def find_by_id(cls, id):
        """Returns an instance that fills with the resource of this class
        with primary key `id` once the request for it succeeds."""
        result = cls()
        find_request = result.request(method='GET', data={'id': id})

        def found(payload):
            result.deserialize_resource(payload)
            result.clear_errors()

        def settled(value):
            result.is_loaded = True
            result._trigger_event('did_load')

        attach_transitions(find_request, found, result._on_error, settled)
        return result
