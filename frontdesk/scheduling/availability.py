"""
Availability translation and first-fit resolution.

A schedule window is cut into fixed-size slots, one boolean per slot
(True = free). The resolver then looks for the leftmost run of free slots long
enough to hold an appointment.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Protocol

from frontdesk.core import config
from frontdesk.core.exceptions import InvalidRecordError

MINUTES_PER_DAY = 24 * 60


class Window(Protocol):
    start_time: time | None
    stop_time: time | None


@dataclass(frozen=True)
class SlotRun:
    """Half-open range of slot indexes [start, stop) inside a vector."""

    start: int
    stop: int

    @property
    def length(self) -> int:
        return self.stop - self.start

    def bounds(self, day: date, window_start: time, granularity: int) -> tuple[datetime, datetime]:
        origin = datetime.combine(day, window_start)
        return (
            origin + timedelta(minutes=self.start * granularity),
            origin + timedelta(minutes=self.stop * granularity),
        )


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _granularity(granularity: int | None) -> int:
    granularity = config.SLOT_MINUTES if granularity is None else granularity
    if granularity <= 0:
        raise InvalidRecordError('Slot granularity must be a positive number of minutes.')
    return granularity


def availability_vector(
    schedule: Window,
    granularity: int | None = None,
    booked: Iterable[tuple[time, time]] = (),
) -> list[bool]:
    """Translate a schedule window into free/busy slot flags.

    Slots overlapping one of the ``booked`` intervals are marked busy; with no
    bookings every slot is free. An interval whose end is not after its start
    ran past midnight and keeps the rest of the day busy. Only whole slots are
    produced, so a trailing remainder shorter than ``granularity`` is dropped.
    """
    if schedule.start_time is None or schedule.stop_time is None:
        raise InvalidRecordError('Schedule start and stop time are required.')
    if schedule.start_time > schedule.stop_time:
        raise InvalidRecordError('The start time must not be after the stop time.')

    granularity = _granularity(granularity)
    window_start = _minutes(schedule.start_time)
    slot_count = (_minutes(schedule.stop_time) - window_start) // granularity
    vector = [True] * slot_count

    for booked_start, booked_end in booked:
        if booked_start is None or booked_end is None:
            continue
        busy_start = _minutes(booked_start)
        busy_end = _minutes(booked_end)
        if busy_end <= busy_start:
            busy_end = MINUTES_PER_DAY
        for index in range(slot_count):
            slot_start = window_start + index * granularity
            slot_end = slot_start + granularity
            if busy_start < slot_end and slot_start < busy_end:
                vector[index] = False

    return vector


def slots_needed(duration: int, granularity: int | None = None) -> int:
    if duration is None or duration <= 0:
        raise InvalidRecordError('Duration must be a positive number of minutes.')
    granularity = _granularity(granularity)
    return -(-duration // granularity)


def find_first_fit(vector: list[bool], duration: int, granularity: int | None = None) -> SlotRun | None:
    """Return the leftmost run of free slots covering ``duration`` minutes, or None."""
    needed = slots_needed(duration, granularity)

    run_start = 0
    for index, free in enumerate(vector):
        if not free:
            run_start = index + 1
            continue
        if index + 1 - run_start >= needed:
            return SlotRun(start=run_start, stop=run_start + needed)

    return None


def fits_at(vector: list[bool], index: int, duration: int, granularity: int | None = None) -> SlotRun | None:
    """Return the run starting at slot ``index`` when it is free for ``duration``."""
    needed = slots_needed(duration, granularity)
    if index < 0 or index + needed > len(vector):
        return None
    if not all(vector[index:index + needed]):
        return None
    return SlotRun(start=index, stop=index + needed)


def slot_index(window_start: time, at: time, granularity: int | None = None) -> int | None:
    """Index of the slot starting exactly at ``at``, or None when off the grid."""
    granularity = _granularity(granularity)
    offset = _minutes(at) - _minutes(window_start)
    if offset < 0 or offset % granularity:
        return None
    return offset // granularity
