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

A `Request` is the handle for one network operation that has been issued
but may not have finished. It settles exactly once, either resolved with the
decoded response or rejected with a failure, and runs the continuations
registered on it with `done()`, `fail()` and `always()` when it does.

Adapters create `Request` instances (see `restobjects.http`); resources and
collections attach their state transitions to them as continuations.

"""

import logging


log = logging.getLogger('restobjects.promise')

PENDING = 'pending'
RESOLVED = 'resolved'
REJECTED = 'rejected'


class PromiseError(Exception):
    """An exception representing an error settling or delivering a
    `Request`."""
    pass


class Request(object):

    """A settle-once handle for an asynchronous request.

    Continuations run in the order they were registered. A continuation
    registered after the request settled runs immediately. Each
    continuation runs at most once.

    If a continuation raises, the remaining continuations still run, and the
    first exception is raised again once they have.

    """

    def __init__(self):
        self.state = PENDING
        self.value = None
        self._continuations = []

    @classmethod
    def resolved(cls, value=None):
        """Returns a new `Request` that has already succeeded with `value`."""
        request = cls()
        request.resolve(value)
        return request

    @classmethod
    def rejected(cls, failure=None):
        """Returns a new `Request` that has already failed with `failure`."""
        request = cls()
        request.reject(failure)
        return request

    @property
    def is_pending(self):
        return self.state == PENDING

    @property
    def is_resolved(self):
        return self.state == RESOLVED

    @property
    def is_rejected(self):
        return self.state == REJECTED

    def done(self, fn):
        """Registers `fn` to be called with the response if the request
        succeeds."""
        return self._add(RESOLVED, fn)

    def fail(self, fn):
        """Registers `fn` to be called with the failure if the request
        fails."""
        return self._add(REJECTED, fn)

    def always(self, fn):
        """Registers `fn` to be called with the response or failure once the
        request settles either way."""
        return self._add(None, fn)

    def _add(self, when, fn):
        if self.state == PENDING:
            self._continuations.append((when, fn))
        elif when is None or when == self.state:
            fn(self.value)
        return self

    def resolve(self, value=None):
        """Settles the request as succeeded with `value`."""
        self._settle(RESOLVED, value)

    def reject(self, failure=None):
        """Settles the request as failed with `failure`."""
        self._settle(REJECTED, failure)

    def _settle(self, state, value):
        if self.state != PENDING:
            raise PromiseError('%s %r has already %s'
                % (type(self).__name__, self, self.state))
        self.state = state
        self.value = value
        continuations, self._continuations = self._continuations, []

        error = None
        for when, fn in continuations:
            if when is not None and when != state:
                continue
            try:
                fn(value)
            except Exception as exc:
                log.exception('Continuation %r of %r raised', fn, self)
                if error is None:
                    error = exc
        if error is not None:
            raise error
