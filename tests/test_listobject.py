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

import unittest

from restobjects import fields, listobject, resource
from tests import utils


class TestResourceCollections(unittest.TestCase):

    cls = listobject.ResourceCollection

    def make_classes(self):
        h = utils.FakeAdapter()

        class Remark(resource.Resource):
            adapter = h
            body = fields.Field()

        class Article(resource.Resource):
            adapter = h
            title   = fields.Field()
            remarks = fields.HasMany(Remark)

        return Article, Remark

    def test_sequence(self):
        Article, Remark = self.make_classes()
        one, two, three = Remark(body='1'), Remark(body='2'), Remark(body='3')
        c = self.cls(Remark, content=[one, two, three])

        self.assertEqual(len(c), 3)
        self.assertTrue(c[1] is two)
        self.assertEqual(c[1:], [two, three])
        self.assertEqual(list(c), [one, two, three])
        self.assertEqual(list(reversed(c)), [three, two, one])
        self.assertTrue(one in c)
        self.assertFalse(Remark(body='1') in c, 'elements are compared by identity')
        self.assertEqual(c.index(three), 2)
        self.assertEqual(c.count(two), 1)
        self.assertTrue(c.resource_type is Remark)
        self.assertTrue(c.meta is None)
        self.assertEqual({c: 1}[c], 1, 'collections are hashable')

    def test_resource_type_by_name(self):
        Article, Remark = self.make_classes()
        c = self.cls('Remark')
        self.assertTrue(c.resource_type is Remark)
        self.assertTrue('Remark' in repr(c))

    def test_parentless_changes(self):
        Article, Remark = self.make_classes()
        c = self.cls(Remark, content=[Remark()])
        self.assertFalse(c.is_dirty, 'initial content is no change')
        self.assertTrue(c.is_new)

        c.append(Remark())
        self.assertTrue(c.is_dirty)
        self.assertEqual(len(c), 2)

    def test_mutators(self):
        Article, Remark = self.make_classes()
        one, two = Remark(body='1'), Remark(body='2')
        c = self.cls(Remark)

        mutations = (
            lambda: c.append(one),
            lambda: c.extend([two]),
            lambda: c.insert(0, Remark()),
            lambda: c.remove(one),
            lambda: c.pop(),
            lambda: c.__setitem__(0, one),
            lambda: c.__delitem__(0),
            lambda: c.set_content([one, two]),
            lambda: c.__setitem__(slice(0, 1), [two]),
            lambda: c.clear(),
        )
        for mutate in mutations:
            c.is_dirty = False
            mutate()
            self.assertTrue(c.is_dirty)
        self.assertEqual(len(c), 0)

    def test_slice_assignment_from_iterator(self):
        Article, Remark = self.make_classes()
        one, two = Remark(body='1'), Remark(body='2')
        c = self.cls(Remark, content=[one])

        c[0:1] = (r for r in [two])
        self.assertEqual(list(c), [two])

        c.is_dirty = False
        two.body = 'changed'
        self.assertTrue(c.is_dirty, 'assigned elements are observed')

    def test_non_observable(self):
        Article, Remark = self.make_classes()
        c = self.cls(Remark, non_observable=True)
        r = Remark()
        c.append(r)
        r.body = 'changed'
        self.assertFalse(c.is_dirty)

    def test_structural_change_dirties_parent(self):
        Article, Remark = self.make_classes()
        a = Article.load({'id': 1, 'title': 'Hi', 'remarks': []})
        self.assertTrue(a.is_loaded)
        self.assertFalse(a.is_dirty)

        a.remarks.append(Remark(body='new'))
        self.assertTrue(a.is_dirty, 'the owning resource is dirtied')
        self.assertFalse(a.remarks.is_dirty, 'the collection itself is not')

    def test_element_change_dirties_parent(self):
        Article, Remark = self.make_classes()
        a = Article.load({
            'id': 1,
            'remarks': [{'id': 2, 'body': 'x'}, {'id': 3, 'body': 'y'}],
        })
        self.assertFalse(a.is_dirty)
        first = a.remarks[0]
        self.assertTrue(first.is_loaded)
        self.assertFalse(first.is_dirty)

        first.body = 'changed'
        self.assertTrue(first.is_dirty)
        self.assertTrue(a.is_dirty)

        # Removed elements are no longer observed.
        removed = a.remarks.pop()
        a.is_dirty = False
        removed.body = 'changed too'
        self.assertTrue(removed.is_dirty)
        self.assertFalse(a.is_dirty)

    def test_saved_parent_cleans_elements(self):
        Article, Remark = self.make_classes()
        h = Article.adapter
        a = Article.load({'id': 1, 'remarks': [{'id': 2, 'body': 'x'}]})
        remark = a.remarks[0]

        remark.body = 'y'
        self.assertTrue(a.is_dirty)
        a.save_record()
        h.last.resolve({'article': {'id': 1}})
        self.assertFalse(a.is_dirty)
        self.assertFalse(remark.is_dirty, 'elements are saved with their parent')

        remark.body = 'z'
        self.assertTrue(a.is_dirty, 'later edits dirty the parent again')
        a.save_record()
        self.assertEqual(len(h.requests), 2)
        self.assertEqual(h.last_params['method'], 'PUT')

    def test_element_change_in_parentless_collection(self):
        Article, Remark = self.make_classes()
        c = self.cls.load_many(Remark, [{'id': 5, 'body': 'x'}])
        self.assertTrue(c.is_loaded)
        self.assertFalse(c.is_dirty)

        c[0].body = 'y'
        self.assertTrue(c.is_dirty)

    def test_load_many(self):
        Article, Remark = self.make_classes()
        c = self.cls.load_many('Remark', [{'id': 5, 'body': 'x'}, {'id': 6}])
        self.assertEqual([r.id for r in c], [5, 6])
        self.assertEqual(c[0].body, 'x')
        for r in c:
            self.assertTrue(isinstance(r, Remark))
            self.assertTrue(r.is_loaded)
            self.assertFalse(r.is_new)
            self.assertFalse(r.is_dirty)
        self.assertEqual(c.serialize_many(), [{'id': 5, 'body': 'x'}, {'id': 6}])

    def test_copy(self):
        Article, Remark = self.make_classes()
        c = self.cls.load_many(Remark, [{'id': 5, 'body': 'x'}])

        shallow = c.copy()
        self.assertTrue(shallow is not c)
        self.assertTrue(shallow[0] is c[0], 'a shallow copy shares the elements')
        self.assertFalse(shallow.is_dirty)
        self.assertFalse(shallow.is_loaded)

        shallow.append(Remark())
        self.assertEqual(len(c), 1)

        deep = c.copy(deep=True)
        self.assertTrue(deep[0] is not c[0])
        self.assertEqual(deep[0].id, 5)
        self.assertEqual(deep[0].body, 'x')

        with_state = c.copy_with_state()
        self.assertTrue(with_state.is_loaded)
        self.assertFalse(with_state.is_dirty)


if __name__ == '__main__':
    utils.log()
    unittest.main()
