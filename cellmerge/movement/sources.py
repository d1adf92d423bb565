"""
Position Sources - External absolute-position streams.

A source is anything that can say whether it works on this host and
push (lat, lng) fixes to subscribers. Real deployments wrap a GPS or
browser geolocation bridge; the ones here are in-process.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Iterable
import logging

logger = logging.getLogger(__name__)

PositionCallback = Callable[[float, float], None]


class PositionSource(ABC):
    """Interface for absolute-position streams."""

    name: str = "position"

    @abstractmethod
    def is_available(self) -> bool:
        """Can this source produce fixes at all?"""
        ...

    @abstractmethod
    def subscribe(self, callback: PositionCallback) -> Callable[[], None]:
        """
        Register a callback for every fix.

        Returns a function that cancels the subscription.
        """
        ...


class PushPositionSource(PositionSource):
    """
    A source fed by explicit push() calls.

    Used by the HTTP API (clients post their fixes) and in tests.
    """

    def __init__(self, name: str = "push", available: bool = True):
        self.name = name
        self.available = available
        self._subscribers: list[PositionCallback] = []

    def is_available(self) -> bool:
        return self.available

    def subscribe(self, callback: PositionCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def push(self, lat: float, lng: float) -> int:
        """Deliver a fix to every subscriber. Returns how many received it."""
        if not self._subscribers:
            logger.debug("Dropping fix (%s, %s): no subscribers on %s", lat, lng, self.name)
        for callback in list(self._subscribers):
            callback(lat, lng)
        return len(self._subscribers)


class ReplayPositionSource(PushPositionSource):
    """Replays a recorded track of fixes, one per advance() call."""

    def __init__(self, track: Iterable[tuple[float, float]], name: str = "replay"):
        super().__init__(name=name)
        self._track = list(track)
        self._cursor = 0

    @property
    def remaining(self) -> int:
        return len(self._track) - self._cursor

    def advance(self) -> bool:
        """Emit the next fix. Returns False once the track is exhausted."""
        if self._cursor >= len(self._track):
            return False
        lat, lng = self._track[self._cursor]
        self._cursor += 1
        self.push(lat, lng)
        return True


class UnavailablePositionSource(PositionSource):
    """Stands in for a host with no location support."""

    name = "unavailable"

    def is_available(self) -> bool:
        return False

    def subscribe(self, callback: PositionCallback) -> Callable[[], None]:
        raise RuntimeError("Cannot subscribe to an unavailable position source")
