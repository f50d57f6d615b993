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

Fields are class attributes for `Resource` subclasses that declare the
attributes and relationships of a resource type.

Every field is a descriptor. Reading it returns the instance's value;
assigning it stores the value and tells the owning instance which attribute
changed, which is what drives a resource's ``is_dirty`` flag.

There are three kinds of field:

* `Field` (and `Datetime`) for plain scalar attributes,
* `BelongsTo` for a reference to one other resource,
* `HasMany` for a `ResourceCollection` of other resources.

"""

from datetime import datetime, tzinfo, timedelta
import time

import restobjects.dataobject
import restobjects.listobject


SCALAR = 'scalar'
BELONGS_TO = 'belongs_to'
HAS_MANY = 'has_many'


class Property(object):

    """An attribute that can be installed declaratively on a `DataObject`."""

    def install(self, attrname, cls):
        """Signals to the `Property` that it has been installed on the given
        class as an attribute with the given name.

        This implementation does nothing. Override this method to customize
        the behavior to install an attribute on DataObject classes where your
        field is declared.

        """
        pass


class Field(Property):

    """A scalar attribute of a resource.

    Use a `Field` instance directly for attributes whose values are the same
    type as their values in the API's JSON: strings, numbers and booleans.
    Parameter `value_type` is descriptive only (``'string'``, ``'number'``,
    ``'boolean'``) and is kept in the type's attribute map for adapters that
    care about it.

    Optional parameter `api_name` is the key of the field's value in the
    dictionary form of the resource. If not given, the attribute name is
    used.

    Optional parameter `default` is the value of the attribute on a new
    instance. If `default` is callable, it is called with the new instance
    and should return the value.

    Fields declared with ``read_only=True`` are decoded from API data but
    never encoded back into it.

    """

    kind = SCALAR
    value_type = None

    def __init__(self, value_type=None, api_name=None, default=None,
                 read_only=False):
        if value_type is not None:
            self.value_type = value_type
        self.api_name = api_name
        self.default = default
        self.read_only = read_only

    def install(self, attrname, cls):
        self.attrname = attrname
        if self.api_name is None:
            self.api_name = attrname
        self.of_cls = cls

    def __repr__(self):
        return '<%s %s.%s>' % (type(self).__name__,
            getattr(getattr(self, 'of_cls', None), '__name__', '?'),
            getattr(self, 'attrname', '?'))

    def initial_value(self, obj):
        if callable(self.default):
            return self.default(obj)
        return self.default

    def initialize(self, obj):
        """Gives a new instance its own storage for this field."""
        obj.__dict__[self.attrname] = self.initial_value(obj)

    def __get__(self, obj, cls):
        if obj is None:
            # Yield the real field instance when gotten through the class.
            return self
        try:
            return obj.__dict__[self.attrname]
        except KeyError:
            value = self.initial_value(obj)
            obj.__dict__[self.attrname] = value
            return value

    def __set__(self, obj, value):
        attrname = self.attrname
        if attrname in obj.__dict__ and same_value(obj.__dict__[attrname], value):
            return
        obj.__dict__[attrname] = value
        obj._on_property_change(attrname)

    def __delete__(self, obj):
        self.__set__(obj, None)

    def update(self, obj, value):
        """Sets the attribute on `obj` from the API value `value`."""
        setattr(obj, self.attrname, self.decode(value))

    def decode(self, value):
        """Decodes a dictionary value into a `DataObject` attribute value.

        This implementation returns the `value` parameter unchanged. This is
        generally only appropriate for strings, numbers, and boolean values.

        """
        return value

    def encode(self, value):
        """Encodes a `DataObject` attribute value into a dictionary value.

        This implementation returns the `value` parameter unchanged. Return
        `None` to leave the value out of the dictionary entirely.

        """
        return value


def same_value(old, new):
    if old is new:
        return True
    if type(old) is not type(new):
        return False
    try:
        return bool(old == new)
    except (TypeError, ValueError):
        return False


class UTC(tzinfo):
    """UTC"""
    ZERO = timedelta(0)

    def utcoffset(self, dt):
        return UTC.ZERO

    def tzname(self, dt):
        return "UTC"

    def dst(self, dt):
        return UTC.ZERO


class Datetime(Field):

    """A field representing a timestamp."""

    dateformat = "%Y-%m-%dT%H:%M:%SZ"
    utc = UTC()

    def __init__(self, dateformat=None, **kwargs):
        kwargs.setdefault('value_type', 'date')
        super(Datetime, self).__init__(**kwargs)
        if dateformat is not None:
            self.dateformat = dateformat

    def decode(self, value):
        """Decodes a timestamp string into a Python `datetime` instance.

        Timestamp strings should be of the format ``YYYY-MM-DDTHH:MM:SSZ``.
        The resulting `datetime` will have UTC tzinfo.
        """
        if value is None:
            return None
        try:
            return datetime(*(time.strptime(value, self.dateformat))[0:6],
                    tzinfo=Datetime.utc)
        except (TypeError, ValueError):
            raise TypeError('Value to decode %r is not a valid date time stamp' % (value,))

    def encode(self, value):
        """Encodes a Python `datetime` instance into a timestamp string.

        Naive datetimes are taken to be in UTC already.

        """
        if not isinstance(value, datetime):
            raise TypeError('Value to encode %r is not a datetime' % (value,))
        if value.tzinfo is not None:
            value = value.astimezone(Datetime.utc)
        return value.replace(microsecond=0).strftime(self.dateformat)


class AcceptsStringCls(object):
    """Mixin for fields with a ``cls`` attribute that can either be a
    ``Resource`` subclass or a string name of a ``Resource`` subclass (to
    allow forward references)."""

    def get_cls(self):
        cls = self.__dict__['cls']
        if not callable(cls):
            cls = restobjects.dataobject.find_by_name(cls)
        return cls

    def set_cls(self, cls):
        self.__dict__['cls'] = cls

    cls = property(get_cls, set_cls)

    @property
    def value_type(self):
        return self.cls


class BelongsTo(AcceptsStringCls, Field):

    """A reference to a single other resource.

    Parameter `cls` is the `Resource` class of the referenced resource, or
    its name. Reading the attribute of an instance that has no reference yet
    yields an empty, new instance of `cls` owned by that instance.

    Replacing the referenced resource counts as a change to the owning
    instance. Changes made *inside* the referenced resource do not.

    """

    kind = BELONGS_TO

    def __init__(self, cls, **kwargs):
        super(BelongsTo, self).__init__(**kwargs)
        self.cls = cls

    def initialize(self, obj):
        # Placeholders are built on first read, so self-referencing types
        # don't recurse forever.
        pass

    def initial_value(self, obj):
        if self.default is not None:
            return super(BelongsTo, self).initial_value(obj)
        return self.cls()

    def decode(self, value):
        if value is None:
            return None
        if isinstance(value, dict):
            return self.cls.load(value)
        # A bare primary key.
        cls = self.cls
        return cls.load({cls.fields[cls.primary_key()].api_name: value})

    def encode(self, value):
        data = value.to_dict()
        return data or None


class HasMany(AcceptsStringCls, Field):

    """A `ResourceCollection` of other resources.

    Every instance gets its own empty collection at construction. The
    collection keeps a weak reference back to the instance, so adding,
    removing or changing its elements marks the owning instance dirty.

    Assigning any iterable to the attribute replaces the contents of the
    instance's collection; the collection object itself stays the same.

    """

    kind = HAS_MANY

    def __init__(self, cls, **kwargs):
        super(HasMany, self).__init__(**kwargs)
        self.cls = cls

    def initial_value(self, obj):
        # Keep the declared name; the collection resolves it when needed.
        resource_type = self.__dict__['cls']
        if getattr(obj, 'is_observable', False):
            return restobjects.listobject.ResourceCollection(resource_type,
                parent_object=obj)
        return restobjects.listobject.ResourceCollection(resource_type,
            non_observable=True)

    def __set__(self, obj, value):
        collection = self.__get__(obj, type(obj))
        if value is collection:
            return
        collection.set_content(list(value or ()))

    def update(self, obj, value):
        self.__get__(obj, type(obj)).deserialize_many(value or ())

    def encode(self, value):
        return value.serialize_many()
