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

import logging
import weakref

import restobjects.dataobject
from restobjects.state import State


log = logging.getLogger('restobjects.listobject')


class SequenceProxy(object):

    """An abstract class implementing the read side of the sequence
    protocol by proxying it to an instance attribute.

    `SequenceProxy` instances act like sequences by forwarding sequence
    method calls to their `content` attributes. The `content` attribute
    should be a list.

    """

    def make_sequence_method(methodname):
        """Makes a new function that proxies calls to `methodname` to the
        `content` attribute of the instance on which the function is called
        as an instance method."""
        def seqmethod(self, *args, **kwargs):
            # Proxy these methods to self.content.
            return getattr(self.content, methodname)(*args, **kwargs)
        seqmethod.__name__ = methodname
        return seqmethod

    __len__      = make_sequence_method('__len__')
    __getitem__  = make_sequence_method('__getitem__')
    __iter__     = make_sequence_method('__iter__')
    __reversed__ = make_sequence_method('__reversed__')
    __contains__ = make_sequence_method('__contains__')
    index        = make_sequence_method('index')
    count        = make_sequence_method('count')

    del make_sequence_method


class ResourceCollection(SequenceProxy, State):

    """An ordered collection of resources of one type, with its own
    lifecycle state.

    Collections are what `Resource.find_all()` returns, and what every
    `fields.HasMany` attribute holds. A collection held by a resource keeps
    a weak reference to it in `parent_object`; changes to such a collection
    dirty the parent rather than the collection.

    Any structural change (adding, removing or replacing elements) is a
    change to the collection. So is an element becoming dirty: collections
    observe the elements they hold.

    """

    def __init__(self, resource_type, content=None, parent_object=None,
                 non_observable=False):
        self._resource_type = resource_type
        self.content = []
        self.meta = None
        self._parent_ref = None
        if parent_object is not None:
            self._parent_ref = weakref.ref(parent_object)
        super(ResourceCollection, self).__init__(non_observable=non_observable)
        if content:
            with self.tracking_suspended():
                self.extend(content)

    def __repr__(self):
        return '<%s of %s (%d)>' % (type(self).__name__,
            self._resource_type_name(), len(self.content))

    def _resource_type_name(self):
        if isinstance(self._resource_type, str):
            return self._resource_type
        return self._resource_type.__name__

    @property
    def resource_type(self):
        if isinstance(self._resource_type, str):
            return restobjects.dataobject.find_by_name(self._resource_type)
        return self._resource_type

    @property
    def parent_object(self):
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def get_adapter(self):
        return self.resource_type.get_adapter()

    def on_change(self, sender, key):
        """Called by an element of the collection when it becomes dirty."""
        if sender in self.content:
            self._on_property_change('content')

    def _content_did_change(self, removed, added):
        for item in removed:
            if item not in self.content and hasattr(item, 'remove_observer'):
                item.remove_observer(self)
        if self.is_observable:
            for item in added:
                if hasattr(item, 'add_observer'):
                    item.add_observer(self)
        self._on_property_change('content')

    def append(self, item):
        self.content.append(item)
        self._content_did_change((), (item,))

    def extend(self, items):
        items = list(items)
        self.content.extend(items)
        self._content_did_change((), items)

    def insert(self, index, item):
        self.content.insert(index, item)
        self._content_did_change((), (item,))

    def remove(self, item):
        self.content.remove(item)
        self._content_did_change((item,), ())

    def pop(self, index=-1):
        item = self.content.pop(index)
        self._content_did_change((item,), ())
        return item

    def clear(self):
        self.set_content([])

    def set_content(self, items):
        """Replaces all the elements of the collection with `items`."""
        removed, self.content = self.content, list(items)
        self._content_did_change(removed, self.content)

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            value = list(value)
        removed = self.content[key]
        self.content[key] = value
        if isinstance(key, slice):
            self._content_did_change(removed, value)
        else:
            self._content_did_change((removed,), (value,))

    def __delitem__(self, key):
        removed = self.content[key]
        del self.content[key]
        if not isinstance(key, slice):
            removed = (removed,)
        self._content_did_change(removed, ())

    def disconnect(self):
        """Stops tracking changes: the collection forgets its parent and
        stops observing its elements."""
        self._observable = False
        self._parent_ref = None
        for item in self.content:
            if hasattr(item, 'remove_observer'):
                item.remove_observer(self)

    def serialize_many(self):
        """Encodes the elements of the collection through the adapter of the
        collection's resource type."""
        return self.get_adapter().serialize_many(self)

    def deserialize_many(self, data):
        """Replaces the collection's elements with resources decoded from the
        list of dictionaries `data`, without tracking the change."""
        with self.tracking_suspended():
            self.get_adapter().deserialize_many(self, data)
        return self

    @classmethod
    def load_many(cls, resource_type, data):
        """Returns a new, loaded collection of `resource_type` resources
        decoded from `data`."""
        collection = cls(resource_type)
        collection.deserialize_many(data)
        collection.is_loaded = True
        return collection

    def copy(self, deep=False, memo=None):
        """Returns a new collection of the same type holding the same
        elements, or copies of them if `deep` is true."""
        content = self.content
        if deep:
            if memo is None:
                memo = {}
            content = [item.copy(deep=True, memo=memo) for item in content]
        return type(self)(self._resource_type, content=content)

    def copy_with_state(self, deep=False):
        return self.copy_state(self.copy(deep))
