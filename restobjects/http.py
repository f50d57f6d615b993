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

Adapters translate between resources and a remote service. A resource class
holds its adapter by direct reference (its ``adapter`` class attribute) and
asks it to encode itself (`Adapter.serialize()`), to decode responses into
itself (`Adapter.deserialize()`), and to issue requests
(`Adapter.request()`), which return `restobjects.promise.Request` handles.

The adapter also holds the configuration resource classes consult: custom
plural names for resource endpoints, and per-class options such as the name
of the primary key attribute.

`RESTAdapter` is the default adapter, for JSON REST APIs served over HTTP
through the `httplib2` library.

"""

from http import client as httplib
import logging
from urllib.parse import urlencode, quote

import httplib2
import simplejson as json

from restobjects.promise import Request, PromiseError


userAgent = httplib2.Http()

log = logging.getLogger('restobjects.http')


def omit_nulls(data):
    """Strips `None` values from a dictionary or object being encoded as
    JSON."""
    if not isinstance(data, dict):
        if not hasattr(data, '__dict__'):
            return str(data)
        data = dict(data.__dict__)
    for key in list(data.keys()):
        if data[key] is None:
            del data[key]
    return data


class Adapter(object):

    """The interface between resources and a remote service.

    This implementation codes resources as dictionaries through their
    fields. It has no transport: override `request()` to issue requests.

    """

    def __init__(self):
        self.configurations = {
            'plurals': {},
            'models':  {},
        }

    def configure(self, key, value):
        """Merges `value` into the configuration named `key`.

        For example, to give the ``person`` resource the endpoint name
        ``people`` instead of ``persons``:

        >>> adapter.configure('plurals', {'person': 'people'})

        """
        if isinstance(value, dict) and isinstance(self.configurations.get(key), dict):
            self.configurations[key].update(value)
        else:
            self.configurations[key] = value

    def map(self, model, **options):
        """Sets per-class options for the resource class `model` (or the
        class of that name), such as ``primary_key='slug'``."""
        name = model if isinstance(model, str) else model.__name__
        self.configurations['models'].setdefault(name, {}).update(options)

    def model_options(self, model):
        return self.configurations['models'].get(model.__name__, {})

    def plural_for(self, resource_name):
        return self.configurations['plurals'].get(resource_name, resource_name + 's')

    def serialize(self, resource):
        """Encodes `resource` as a dictionary keyed by its resource name."""
        return {type(resource).resource_name(): resource.to_dict()}

    def deserialize(self, resource, data):
        """Updates `resource` from the dictionary `data` without marking it
        dirty, and returns it."""
        with resource.tracking_suspended():
            resource.update_from_dict(data)
        return resource

    def serialize_many(self, collection):
        return [resource.to_dict() for resource in collection]

    def deserialize_many(self, collection, data):
        """Replaces the content of `collection` with loaded resources decoded
        from the list of dictionaries `data`."""
        resource_type = collection.resource_type
        resources = []
        for item in data:
            resource = self.deserialize(resource_type(), item)
            resource.is_loaded = True
            resources.append(resource)
        collection.set_content(resources)
        return collection

    def extract_meta(self, payload):
        """Returns the metadata (such as pagination details) in the response
        `payload`, or `None`."""
        if isinstance(payload, dict):
            return payload.get('meta')
        return None

    def request(self, params, resource_name, resource_id=None):
        """Issues a request and returns its `Request` handle.

        Parameter `params` is a dictionary with the HTTP ``method`` and the
        request ``data``. Parameters `resource_name` and `resource_id` name
        the plural endpoint and, optionally, the resource in it.

        """
        raise NotImplementedError


class HttpRequest(Request):

    """A `Request` that is issued through `httplib2` when delivered.

    The handle stays pending until `deliver()` is called, then settles with
    the outcome of the HTTP request.

    """

    def __init__(self, adapter, http, request):
        super(HttpRequest, self).__init__()
        self._adapter = adapter
        self._http = http
        self._delivered = False
        self.request = request

    def deliver(self):
        """Performs the HTTP request and settles the handle with its
        outcome."""
        if self._delivered:
            raise PromiseError('%s %r has already been delivered' % (type(self).__name__, self))
        self._delivered = True

        http = self._http
        if http is None:
            http = userAgent

        url = self.request['uri']
        try:
            response, content = http.request(**self.request)
        except (httplib2.HttpLib2Error, OSError) as exc:
            log.warning('%s %s failed: %s', self.request.get('method'), url, exc)
            self.reject(exc)
            return

        failure = self._adapter.failure_for_response(url, response, content)
        if failure is not None:
            log.debug('%s %s failed: %s', self.request.get('method'), url, failure)
            self.reject(failure)
            return
        self.resolve(self._adapter.decode_content(response, content))


class RESTAdapter(Adapter):

    """An adapter for JSON REST APIs over HTTP.

    Resources live at ``<url>/<namespace>/<plural name>/<id>``. Requests
    send JSON bodies, except for ``GET`` requests, whose data is sent as
    query parameters.

    Optional parameter `http` is the user agent to request with, compatible
    with `httplib2.Http`. If `deliver_immediately` is false, requests are
    returned undelivered; call their `deliver()` methods to issue them.

    """

    content_types = ('application/json',)

    response_has_content = {
        httplib.OK:         True,
        httplib.CREATED:    True,
        httplib.ACCEPTED:   False,
        httplib.NO_CONTENT: False,
    }

    class RequestFailed(httplib.HTTPException):
        """An HTTPException representing a request the server did not
        fulfill.

        The `response` and raw `content` of the failed request are available
        on the exception, along with its `data`: the decoded JSON content, or
        the first line of a plain text error.

        """

        def __init__(self, message, response=None, content=None, data=None):
            super(RESTAdapter.RequestFailed, self).__init__(message)
            self.response = response
            self.content = content
            self.data = data

        @property
        def status(self):
            if self.response is None:
                return None
            return self.response.status

    class NotFound(RequestFailed):
        """The server reports that the requested resource was not found."""
        pass

    class Unauthorized(RequestFailed):
        """The server reports that the requested resource is not available
        through an unauthenticated request.

        This exception corresponds to the HTTP status code 401. Thus when this
        failure is received, the caller may need to try again using the
        available authentication credentials.

        """
        pass

    class Forbidden(RequestFailed):
        """The server reports that the client, as authenticated, is not
        authorized to request the requested resource."""
        pass

    class PreconditionFailed(RequestFailed):
        """The server reports that some of the conditions in a conditional
        request were not true.

        This exception corresponds to the HTTP status code 412. The most
        common cause of this status is an attempt to ``PUT`` a resource that
        has already changed on the server.

        """
        pass

    class RequestError(RequestFailed):
        """The server reports an error in the client's request, such as
        invalid resource data (statuses 400 and 422)."""
        pass

    class ServerError(RequestFailed):
        """The server reports an unexpected error (statuses 500 and up)."""
        pass

    class BadResponse(RequestFailed):
        """The client received some other non-success HTTP response, or a
        successful response it can't decode."""
        pass

    def __init__(self, url='', namespace=None, http=None, deliver_immediately=True):
        super(RESTAdapter, self).__init__()
        self.url = url
        self.namespace = namespace
        self.http = http
        self.deliver_immediately = deliver_immediately

    def resource_url(self, resource_name, resource_id=None):
        parts = [self.url.rstrip('/')]
        if self.namespace:
            parts.append(self.namespace.strip('/'))
        parts.append(resource_name)
        if resource_id is not None:
            parts.append(quote(str(resource_id), safe=''))
        return '/'.join(parts)

    def get_request(self, params, resource_name, resource_id=None):
        """Returns the keyword arguments for `httplib2.Http.request()` that
        perform the request described by `params`."""
        params = dict(params)
        method = params.pop('method', 'GET').upper()
        data = params.pop('data', None)
        headers = dict(params.pop('headers', None) or {})
        if 'accept' not in headers:
            headers['accept'] = ', '.join(self.content_types)

        url = self.resource_url(resource_name, resource_id)
        # Use 'uri' because httplib2.request does.
        request = dict(uri=url, method=method, headers=headers)
        if data:
            if method == 'GET':
                request['uri'] = '%s?%s' % (url, urlencode(sorted(data.items()), doseq=True))
            else:
                request['body'] = json.dumps(data, default=omit_nulls)
                headers['content-type'] = self.content_types[0]
        request.update(params)
        return request

    def request(self, params, resource_name, resource_id=None):
        request = HttpRequest(self, self.http, self.get_request(params, resource_name, resource_id))
        log.debug('Requesting %s %s', request.request['method'], request.request['uri'])
        if self.deliver_immediately:
            request.deliver()
        return request

    def decode_json(self, content):
        if isinstance(content, bytes):
            # Undecodable bytes become U+FFFD rather than failing the request.
            content = content.decode('utf-8', 'replace')
        if not content or not content.strip():
            return None
        return json.loads(content)

    def decode_content(self, response, content):
        """Returns the decoded JSON content of the successful `response`, or
        `None` if it has none."""
        if not self.response_has_content.get(response.status, True):
            return None
        return self.decode_json(content)

    def failure_for_response(self, url, response, content):
        """Returns the exception describing why `response` failed, or `None`
        if it succeeded.

        Override this method to customize which responses count as failures
        for your target API.

        """
        status = response.status
        if 200 <= status < 300:
            if not self.response_has_content.get(status, True) or not content:
                return None
            content_type = response.get('content-type', '').split(';', 1)[0].strip()
            if content_type not in self.content_types:
                return self.BadResponse(
                    'Bad response requesting %s: content-type %s is not an expected type'
                    % (url, response.get('content-type')),
                    response=response, content=content)
            try:
                self.decode_json(content)
            except json.JSONDecodeError as exc:
                return self.BadResponse('Bad response requesting %s: %s' % (url, exc),
                    response=response, content=content)
            return None

        if status == httplib.NOT_FOUND:
            err_cls = self.NotFound
        elif status == httplib.UNAUTHORIZED:
            err_cls = self.Unauthorized
        elif status == httplib.FORBIDDEN:
            err_cls = self.Forbidden
        elif status == httplib.PRECONDITION_FAILED:
            err_cls = self.PreconditionFailed
        elif status in (httplib.BAD_REQUEST, httplib.UNPROCESSABLE_ENTITY):
            err_cls = self.RequestError
        elif status >= 500:
            err_cls = self.ServerError
        else:
            err_cls = self.BadResponse

        # Pull out an error if we can.
        data = None
        content_type = response.get('content-type', '').split(';', 1)[0].strip()
        if content_type in self.content_types:
            try:
                data = self.decode_json(content)
            except json.JSONDecodeError:
                data = None
        elif content_type == 'text/plain' and content:
            if isinstance(content, bytes):
                content = content.decode('utf-8', 'replace')
            data = content.split('\n', 1)[0]

        message = '%d %s requesting %s' % (status, response.reason, url)
        if isinstance(data, str):
            message = '%s: %s' % (message, data)
        return err_cls(message, response=response, content=content, data=data)


default_adapter = RESTAdapter()
