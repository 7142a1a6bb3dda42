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

class DashConformError(Exception):
    pass


class TransportError(DashConformError):
    """
    A network failure, timeout or non-2xx response for one request
    """

    def __init__(self, url: str, status: int | None = None,
                 reason: str | None = None) -> None:
        if status is not None:
            msg = f'{url}: HTTP {status:d} {reason or ""}'.rstrip()
        elif reason:
            msg = f'{url}: {reason}'
        else:
            msg = f'{url}: request failed'
        super().__init__(msg)
        self.url = url
        self.status = status
        self.reason = reason


class ParseError(DashConformError):
    def __init__(self, msg: str, url: str | None = None) -> None:
        if url is not None:
            msg = f'{msg}: {url}'
        super().__init__(msg)
        self.url = url


class PolicyViolation(DashConformError):
    def __init__(self, check: str, msg: str) -> None:
        super().__init__(f'{check}: {msg}')
        self.check = check


class RunnerRefreshError(DashConformError):
    def __init__(self, iteration: int, cause: BaseException) -> None:
        super().__init__(f'Manifest refresh {iteration:d} failed: {cause}')
        self.iteration = iteration
        self.__cause__ = cause


class RunnerStateError(DashConformError):
    pass


class ValidatorNotLoaded(DashConformError):
    def __init__(self) -> None:
        super().__init__('Manifest has not been loaded, call load() first')
