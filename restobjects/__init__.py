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

restobjects represent the resources of a remote REST API as local objects
that know their own state.

You define the resources in an API as `Resource` classes and their
attributes. Instances then track whether they have been saved yet
(``is_new``), whether they have unsaved changes (``is_dirty``), whether a save
is in flight (``is_saving``), whether they have been loaded
(``is_loaded``), and whether their last request failed (``is_error`` and
``errors``). Saving, deleting and finding resources issue requests through an
adapter and update that state when the requests settle.

restobjects have:

* declarative attributes and relationships (`fields.Field`,
  `fields.BelongsTo`, `fields.HasMany`)

* dirtiness tracking that follows relationships, so changing a resource's
  has-many collection, or any resource in it, marks the owner dirty

* request handles with ``done``, ``fail`` and ``always`` continuations

* a JSON REST adapter over `httplib2`


Example
=======

    >>> from restobjects import Resource, RESTAdapter, fields
    >>> blog = RESTAdapter('http://example.com', namespace='api')
    >>> blog.configure('plurals', {'person': 'people'})
    >>> class Person(Resource):
    ...     adapter = blog
    ...     name    = fields.Field('string')
    ...
    >>> class Post(Resource):
    ...     adapter  = blog
    ...     title    = fields.Field('string')
    ...     author   = fields.BelongsTo(Person)
    ...     comments = fields.HasMany('Comment')
    ...
    >>> class Comment(Resource):
    ...     adapter = blog
    ...     body    = fields.Field('string')
    ...
    >>> post = Post.find(1)
    >>> post.comments.append(Comment(body='First!'))
    >>> post.is_dirty
    True
    >>> post.save_record().done(lambda payload: print('saved'))
    saved

"""

__version__ = '0.1.0'
__date__ = '19 October 2026'
__author__ = 'Six Apart Ltd.'

import restobjects.dataobject
from restobjects import fields
from restobjects.http import Adapter, RESTAdapter
from restobjects.listobject import ResourceCollection
from restobjects.promise import Request, PromiseError
from restobjects.resource import Resource

__all__ = ('Resource', 'ResourceCollection', 'fields', 'Adapter',
    'RESTAdapter', 'Request', 'PromiseError')
