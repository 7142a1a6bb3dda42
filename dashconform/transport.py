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
import logging
from typing import NamedTuple
import urllib.parse

from .exceptions import TransportError
from .http_client import HttpClient, HttpResponse
from .manifest import HeaderSet

class ManifestResponse(NamedTuple):
    body: str
    headers: HeaderSet


def resolve_base_url(uri: str) -> str:
    """
    Returns the URL that relative segment URLs are resolved against, which
    is the manifest URL up to and including the final '/' of its path.
    """
    parts = urllib.parse.urlsplit(uri)
    path = parts.path
    if '/' in path:
        path = path[:path.rindex('/') + 1]
    else:
        path = '/'
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, path, '', ''))


class Transport:
    """
    Fetches manifests and probes media segments, converting any
    non-2xx response into a TransportError.
    """

    http: HttpClient
    log: logging.Logger

    def __init__(self, http_client: HttpClient, log: logging.Logger) -> None:
        self.http = http_client
        self.log = log

    async def fetch_manifest(self, uri: str) -> ManifestResponse:
        self.log.debug('Fetch manifest %s', uri)
        resp = self.check_status(uri, await self.http.get(uri))
        return ManifestResponse(body=resp.get_data(as_text=True), headers=resp.headers)

    async def fetch_segment_headers(self, uri: str) -> HeaderSet:
        resp = self.check_status(uri, await self.http.head(uri))
        return resp.headers

    async def fetch_segment_full(self, uri: str) -> HeaderSet:
        resp = self.check_status(uri, await self.http.get(uri))
        body = resp.get_data(as_text=False)
        self.log.debug('Downloaded %d bytes from %s', len(body), uri)
        return resp.headers

    def resolve_base_url(self, uri: str) -> str:
        return resolve_base_url(uri)

    @staticmethod
    def check_status(uri: str, resp: HttpResponse) -> HttpResponse:
        if resp.status_code < 200 or resp.status_code > 299:
            raise TransportError(uri, status=resp.status_code, reason=resp.status)
        return resp

    def close(self) -> None:
        self.http.close()
