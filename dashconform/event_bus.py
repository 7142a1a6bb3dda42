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
from collections.abc import Iterable
import logging
from typing import Callable, Generic, TypeVar

T = TypeVar('T')

EventCallback = Callable[[str, T], None]

class EventBus(Generic[T]):
    """
    Synchronous publish/subscribe with a fixed set of event names.
    Subscribing to a name outside that set is ignored.
    """

    allowed: frozenset[str]
    listeners: dict[str, list[EventCallback]]
    log: logging.Logger

    def __init__(self, allowed: Iterable[str], log: logging.Logger) -> None:
        self.allowed = frozenset(str(name) for name in allowed)
        self.listeners = {}
        self.log = log

    def on(self, name: str, listener: EventCallback) -> bool:
        name = str(name)
        if name not in self.allowed:
            self.log.debug('Ignoring listener for unknown event "%s"', name)
            return False
        self.listeners.setdefault(name, []).append(listener)
        return True

    def off(self, name: str, listener: EventCallback) -> None:
        name = str(name)
        try:
            self.listeners[name] = [
                item for item in self.listeners[name] if item != listener]
        except KeyError:
            pass

    def trigger(self, name: str, payload: T) -> int:
        """
        Calls every listener of the named event, in the order they were
        added. Returns the number of listeners that were called.
        """
        name = str(name)
        ev_listeners = list(self.listeners.get(name, []))
        for cb in ev_listeners:
            try:
                cb(name, payload)
            except Exception as err:
                self.log.exception('Event listener error for "%s": %s', name, err)
        return len(ev_listeners)
