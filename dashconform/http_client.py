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
from abc import abstractmethod
from collections.abc import Iterable
from typing import Protocol

from .manifest import HeaderSet

def normalise_headers(items: Iterable[tuple[str, str]]) -> HeaderSet:
    """
    Converts HTTP response headers into a HeaderSet, where every
    name is lower case. Repeated headers are joined with a comma.
    """
    headers: HeaderSet = {}
    for key, value in items:
        name = key.lower()
        if name in headers:
            headers[name] = f'{headers[name]},{value}'
        else:
            headers[name] = value
    return headers


class HttpResponse(Protocol):
    status_code: int
    status: str
    headers: HeaderSet

    @abstractmethod
    def get_data(self, as_text: bool) -> bytes | str:
        raise Exception("Not implemented")


class HttpClient(Protocol):
    """
    Interface used by Transport to make HTTP requests. Implementations
    raise TransportError when a request could not be completed.
    """

    async def head(self, url: str, headers: dict | None = None) -> HttpResponse:
        ...

    async def get(self, url: str, headers: dict | None = None) -> HttpResponse:
        ...

    def close(self) -> None:
        ...
