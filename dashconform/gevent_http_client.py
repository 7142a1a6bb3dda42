#############################################################################
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
#############################################################################
#
#  Project Name        :    MPEG DASH conformance checker
#
#  Author              :    Alex Ashley
#
#############################################################################
import http.client
import re

from geventhttpclient import HTTPClient, URL

from .exceptions import TransportError
from .http_client import normalise_headers
from .manifest import HeaderSet
from .options import ValidatorOptions
from .requests_http_client import USER_AGENT

class HttpResponse:
    CONTENT_TYPE_RE = re.compile(r'^(?P<mimetype>[\w/+.-]+);\s*charset=(?P<charset>[\w-]+)$')

    headers: HeaderSet
    status: str
    status_code: int

    def __init__(self, response) -> None:
        self.status_code = response.status_code
        self.headers = normalise_headers(response.items())
        self.status = response.status_message
        try:
            self._body = response.read()
        finally:
            response.release()

    def get_data(self, as_text: bool) -> bytes | str:
        if as_text:
            content_type = self.headers.get('content-type', 'text/plain; charset=utf-8')
            match = self.CONTENT_TYPE_RE.match(content_type)
            if match:
                return str(self._body, encoding=match.group('charset'))
            return str(self._body, 'utf-8')
        return self._body


class GeventHttpClient:
    """
    Implements HttpClient protocol using the geventhttpclient library
    """

    clients: dict[tuple[str, str, int], HTTPClient]

    def __init__(self, options: ValidatorOptions) -> None:
        self.log = options.log
        self.timeout = options.timeout
        self.clients = {}

    def close(self) -> None:
        for client in self.clients.values():
            client.close()
        self.clients = {}

    def client_for(self, url: URL) -> HTTPClient:
        key = (url.scheme, url.host, url.port)
        try:
            return self.clients[key]
        except KeyError:
            pass
        kwargs = {
            'concurrency': 1,
            'headers': {'User-Agent': USER_AGENT},
        }
        if self.timeout is not None:
            kwargs['connection_timeout'] = self.timeout
            kwargs['network_timeout'] = self.timeout
        client = HTTPClient.from_url(url, **kwargs)
        self.clients[key] = client
        return client

    async def head(self, url: str, headers: dict | None = None) -> HttpResponse:
        self.log.debug('HEAD %s', url)
        return self._request('HEAD', url, headers)

    async def get(self, url: str, headers: dict | None = None) -> HttpResponse:
        self.log.debug('GET %s', url)
        return self._request('GET', url, headers)

    def _request(self, method: str, url: str, headers: dict | None) -> HttpResponse:
        parsed = URL(url)
        client = self.client_for(parsed)
        try:
            if method == 'HEAD':
                resp = client.head(parsed.request_uri, headers=headers)
            else:
                resp = client.get(parsed.request_uri, headers=headers)
            return HttpResponse(resp)
        except (OSError, http.client.HTTPException) as err:
            raise TransportError(url, reason=str(err)) from err
