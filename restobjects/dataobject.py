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

`DataObject` is the base of every resource class. It owns the declarative
side of a resource: the table of fields declared on the class (its attribute
map) and the coding between instances and plain dictionaries.

The attribute map is built once per class, when the class statement runs,
by `DataObjectMetaclass`. Instances never scan themselves for attributes.

"""

from copy import deepcopy

import restobjects.fields


classes_by_name = {}


def find_by_name(name):
    """Finds and returns the DataObject subclass with the given name.

    Parameter `name` should be a bare class name with no module. If there is
    no class by that name, raises `KeyError`.

    """
    return classes_by_name[name]


class DataObjectMetaclass(type):
    """Metaclass for `DataObject` classes.

    This metaclass installs all `restobjects.fields.Property` instances
    declared as attributes of the new class and collects the `Field` ones
    into the class's ``fields`` table, inheriting the fields of its bases.

    This metaclass also makes the new class findable through the
    `dataobject.find_by_name()` function, so relationship fields can refer
    to classes declared later by name.

    """

    def __new__(cls, name, bases, attrs):
        """Creates and returns a new `DataObject` class with its declared
        fields and name."""
        fields = {}
        new_fields = {}
        new_properties = {}

        # Inherit all the parent DataObject classes' fields.
        for base in reversed(bases):
            if isinstance(base, DataObjectMetaclass):
                fields.update(base.fields)

        # Move all the class's attributes that are Fields to the fields set.
        for attrname, field in attrs.items():
            if isinstance(field, restobjects.fields.Property):
                new_properties[attrname] = field
                if isinstance(field, restobjects.fields.Field):
                    new_fields[attrname] = field
            elif attrname in fields:
                # Throw out any parent fields that the subclass defined as
                # something other than a Field.
                del fields[attrname]

        fields.update(new_fields)
        attrs['fields'] = fields
        obj_cls = super(DataObjectMetaclass, cls).__new__(cls, name, bases, attrs)

        for attrname, value in new_properties.items():
            value.install(attrname, obj_cls)

        # Register the new class so relationship fields can forward-reference it.
        classes_by_name[name] = obj_cls

        return obj_cls


class DataObject(object, metaclass=DataObjectMetaclass):

    """An object with declared fields that can be encoded as and updated
    from a dictionary.

    DataObject subclasses should be declared with their different data
    attributes defined as instances of fields from the `restobjects.fields`
    module. For example:

    >>> from restobjects import dataobject, fields
    >>> class Post(dataobject.DataObject):
    ...     title    = fields.Field('string')
    ...     posted   = fields.Datetime()
    ...     author   = fields.BelongsTo('Author')
    ...     comments = fields.HasMany('Comment')
    ...

    """

    def __init__(self, **kwargs):
        """Initializes a new `DataObject` with its own field storage and the
        given field values."""
        self.api_data = {}
        for field in self.fields.values():
            field.initialize(self)
        for name, value in kwargs.items():
            setattr(self, name, value)

    @classmethod
    def attribute_map(cls):
        """Returns the class's fields, keyed by attribute name."""
        return cls.fields

    def _on_property_change(self, key):
        """Called by fields when the value of attribute `key` changes.

        This implementation does nothing; `restobjects.state.State` tracks
        the change.

        """
        pass

    def to_dict(self):
        """Encodes the DataObject to a dictionary.

        Attributes with `None` values and read-only fields are left out.
        Keys from API data that match no field are passed through unchanged.

        """
        data = deepcopy(self.api_data)
        for field in self.fields.values():
            if field.read_only:
                continue
            # Read the storage directly so unread placeholders stay unbuilt.
            value = self.__dict__.get(field.attrname)
            if value is None:
                continue
            value = field.encode(value)
            if value is not None:
                data[field.api_name] = value
        return data

    def update_from_dict(self, data):
        """Adds the content of a dictionary to this DataObject.

        Parameter `data` is the dictionary from which to update the object.
        Only the attributes present in `data` are changed. Keys that match no
        field are kept aside and written back by `to_dict()`.

        """
        if not isinstance(data, dict):
            raise TypeError("Cannot update %r from non-dictionary data source %r"
                % (self, data))
        fields_by_api_name = dict((f.api_name, f) for f in self.fields.values())
        for key, value in data.items():
            try:
                field = fields_by_api_name[key]
            except KeyError:
                self.api_data[key] = deepcopy(value)
            else:
                field.update(self, value)
