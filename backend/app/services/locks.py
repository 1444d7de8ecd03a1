from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock

from app.core.exceptions import ScheduleConflictError

Coordinate = tuple[int, int]


class CoordinateLockRegistry:
    """In-process mutual exclusion for (day index, slot index) coordinates.

    Write paths hold the locks of every coordinate they touch from the conflict
    check through the commit. Locks are taken in sorted order so writers with
    overlapping coordinates cannot deadlock.
    """

    def __init__(self) -> None:
        self._locks: dict[Coordinate, Lock] = {}
        self._lock = Lock()

    def _lock_for(self, coordinate: Coordinate) -> Lock:
        with self._lock:
            lock = self._locks.get(coordinate)
            if lock is None:
                lock = Lock()
                self._locks[coordinate] = lock
            return lock

    @contextmanager
    def hold(self, coordinates: Iterable[Coordinate], *, timeout: float) -> Iterator[None]:
        acquired: list[Lock] = []
        try:
            for coordinate in sorted(set(coordinates)):
                lock = self._lock_for(coordinate)
                if not lock.acquire(timeout=timeout):
                    raise ScheduleConflictError(
                        "Another change to this time slot is in progress, try again",
                        details={"day_index": coordinate[0], "slot_index": coordinate[1]},
                    )
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def clear(self) -> None:
        with self._lock:
            self._locks.clear()


_registry = CoordinateLockRegistry()


def hold_coordinates(coordinates: Iterable[Coordinate], *, timeout: float):
    return _registry.hold(coordinates, timeout=timeout)


def clear_coordinate_locks() -> None:
    _registry.clear()
