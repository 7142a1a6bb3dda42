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
from abc import ABC, abstractmethod
import sys
from typing import TextIO

class Progress(ABC):
    """
    Receives a notification as each segment probe or manifest
    refresh completes.
    """

    def __init__(self) -> None:
        self.total: int = 0
        self.done: int = 0
        self.txt: str = ''

    def reset(self, total: int) -> None:
        self.total = total
        self.done = 0
        self.txt = ''
        self._send_output()

    def step(self, text: str = '') -> None:
        self.done += 1
        if text:
            self.txt = text
        self._send_output()

    def finished(self, text: str = '') -> None:
        self.done = self.total
        self.txt = text
        self._send_output()

    def percentage(self) -> float:
        if self.total < 1:
            return 100.0
        return 100.0 * min(self.done, self.total) / self.total

    def _send_output(self) -> None:
        self.send_progress(pct=self.percentage(), text=self.txt)

    @abstractmethod
    def send_progress(self, pct: float, text: str) -> None:
        ...


class NullProgress(Progress):
    def send_progress(self, pct: float, text: str) -> None:
        pass


class ConsoleProgress(Progress):
    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr

    def send_progress(self, pct: float, text: str) -> None:
        self.stream.write(f'\r{pct:#05.1f}% {self.done}/{self.total}: {text}     ')
        self.stream.flush()

    def finished(self, text: str = '') -> None:
        super().finished(text)
        self.stream.write('\n')
        self.stream.flush()
