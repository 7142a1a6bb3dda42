import asyncio
from contextlib import AsyncContextDecorator, ContextDecorator, asynccontextmanager
import datetime
import time
from typing import Any, Callable, ClassVar, ContextManager
from unittest import mock

from dashconform.date_time import from_iso_datetime

class MockTime(ContextDecorator, AsyncContextDecorator):
    """
    Replaces the wall clock with a virtual one. asyncio.sleep() and
    time.sleep() advance the virtual clock instead of waiting, and
    every call to asyncio.sleep() is recorded in "sleeps".
    """
    real_datetime_class = datetime.datetime
    real_asyncio_sleep: ClassVar[Callable[[float], None]] = asyncio.sleep

    now: datetime.datetime
    sleeps: list[float]

    def __init__(self, iso_now: str):
        self.now = from_iso_datetime(iso_now)
        self.sleeps = []

        # isinstance() checks against the patched class must still accept
        # datetime objects created before the patch was applied
        class DatetimeSubclassMeta(type):
            @classmethod
            def __instancecheck__(mcs, obj):
                return isinstance(obj, MockTime.real_datetime_class)

        class BaseMockedDatetime(MockTime.real_datetime_class):
            @classmethod
            def now(cls, tz=None) -> datetime.datetime:
                now = cls._get_now()
                if tz is None:
                    return now.replace(tzinfo=None)
                return now.astimezone(tz)

            @classmethod
            def utcnow(cls) -> datetime.datetime:
                return cls._get_now().replace(tzinfo=None)

            @classmethod
            def _get_now(cls) -> datetime.datetime:
                raise RuntimeError('_get_now should have been replaced')

        MockedDatetime = DatetimeSubclassMeta(
            'datetime', (BaseMockedDatetime,), {})
        MockedDatetime._get_now = self.get_now
        self.datetime_patch = mock.patch.object(datetime, 'datetime', MockedDatetime)
        self.asyncio_patch = mock.patch.object(
            asyncio, 'sleep', self.mock_asyncio_sleep)
        self.time_patch = mock.patch.multiple(
            time, sleep=self.mock_time_sleep, time=self.mock_time_time)

    def __enter__(self) -> ContextManager["MockTime"]:
        return self.__do_enter()

    async def __aenter__(self) -> ContextManager["MockTime"]:
        return self.__do_enter()

    def __do_enter(self) -> ContextManager["MockTime"]:
        self.asyncio_patch.start()
        self.datetime_patch.start()
        self.time_patch.start()
        return self

    def __exit__(self, *args) -> bool:
        self.__do_exit()
        return False

    async def __aexit__(self, *args) -> bool:
        self.__do_exit()
        return False

    def __do_exit(self) -> None:
        self.time_patch.stop()
        self.datetime_patch.stop()
        self.asyncio_patch.stop()

    def get_now(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)

    def mock_time_sleep(self, duration: float) -> None:
        self.advance(duration)

    async def mock_asyncio_sleep(self, duration: float, result: Any = None) -> None:
        self.sleeps.append(duration)
        self.advance(duration)
        return await MockTime.real_asyncio_sleep(0, result=result)

    def mock_time_time(self) -> float:
        return self.now.timestamp()


@asynccontextmanager
async def async_mock_time(now: str) -> ContextManager[MockTime]:
    with MockTime(now) as mt:
        yield mt
