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
import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
import logging
from typing import Callable

import requests
from werkzeug.utils import cached_property

from .exceptions import TransportError
from .http_client import normalise_headers
from .manifest import HeaderSet
from .options import ValidatorOptions

USER_AGENT = 'dashconform/1.0'

class HttpResponse:
    headers: HeaderSet
    status: str
    status_code: int
    response: requests.Response

    def __init__(self, response: requests.Response) -> None:
        self.response = response
        self.status_code = response.status_code
        self.headers = normalise_headers(response.headers.items())
        if response.ok:
            self.status = 'OK'
        else:
            self.status = response.reason

    @cached_property
    def body(self) -> bytes:
        return self.response.content

    def get_data(self, as_text: bool) -> bytes | str:
        if as_text:
            return self.response.text
        return self.body


class RequestsHttpClient:
    """
    Implements HttpClient protocol using the requests library
    """

    log: logging.Logger
    executor: Executor
    session: requests.Session
    timeout: float | None

    def __init__(self, options: ValidatorOptions,
                 session: requests.Session | None = None) -> None:
        self.log = options.log
        self.timeout = options.timeout
        if session is None:
            session = requests.Session()
            session.headers['User-Agent'] = USER_AGENT
        self.session = session
        if options.executor is None:
            # one worker, so at most one request is ever in flight
            self.executor = ThreadPoolExecutor(max_workers=1)
            self._owns_executor = True
        else:
            self.executor = options.executor
            self._owns_executor = False

    async def head(self, url: str, headers: dict | None = None) -> HttpResponse:
        def do_head() -> requests.Response:
            return self.session.head(
                url, headers=headers, timeout=self.timeout, allow_redirects=True)

        self.log.debug('HEAD %s', url)
        return await self._request(url, do_head)

    async def get(self, url: str, headers: dict | None = None) -> HttpResponse:
        def do_get() -> requests.Response:
            # stream=False makes requests read the whole body inside the worker thread
            return self.session.get(url, headers=headers, timeout=self.timeout)

        self.log.debug('GET %s', url)
        return await self._request(url, do_get)

    async def _request(self, url: str, fn: Callable[[], requests.Response]) -> HttpResponse:
        loop = asyncio.get_running_loop()
        try:
            resp = await loop.run_in_executor(self.executor, fn)
        except requests.Timeout as err:
            raise TransportError(url, reason=f'timeout: {err}') from err
        except requests.RequestException as err:
            raise TransportError(url, reason=str(err)) from err
        return HttpResponse(resp)

    def close(self) -> None:
        self.session.close()
        if self._owns_executor:
            self.executor.shutdown(wait=False)
