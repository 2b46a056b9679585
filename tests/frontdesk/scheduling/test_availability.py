from datetime import date, datetime, time
from types import SimpleNamespace

import pytest

from frontdesk.core.exceptions import InvalidRecordError
from frontdesk.scheduling.availability import (
    SlotRun,
    availability_vector,
    find_first_fit,
    fits_at,
    slot_index,
    slots_needed,
)


def _window(start: time | None, stop: time | None) -> SimpleNamespace:
    return SimpleNamespace(start_time=start, stop_time=stop)


@pytest.mark.parametrize(
    ('start', 'stop', 'granularity', 'expected_length'),
    [
        (time(9, 0), time(17, 0), 15, 32),
        (time(9, 0), time(17, 0), 30, 16),
        (time(9, 0), time(9, 50), 15, 3),
        (time(9, 0), time(9, 0), 15, 0),
    ],
)
def test_availability_vector_length_matches_whole_slots(start, stop, granularity, expected_length) -> None:
    vector = availability_vector(_window(start, stop), granularity)

    assert len(vector) == expected_length
    assert all(vector)


def test_availability_vector_marks_booked_slots_busy() -> None:
    vector = availability_vector(
        _window(time(9, 0), time(11, 0)),
        15,
        booked=[(time(9, 30), time(10, 10))],
    )

    assert vector == [True, True, False, False, False, True, True, True]


def test_availability_vector_ignores_bookings_outside_the_window() -> None:
    vector = availability_vector(
        _window(time(9, 0), time(10, 0)),
        30,
        booked=[(time(8, 0), time(9, 0)), (time(10, 0), time(11, 0))],
    )

    assert vector == [True, True]


def test_availability_vector_keeps_overnight_booking_busy_until_midnight() -> None:
    vector = availability_vector(
        _window(time(22, 0), time(23, 59)),
        30,
        booked=[(time(22, 30), time(0, 30))],
    )

    assert vector == [True, False, False]


@pytest.mark.parametrize(
    'window',
    [
        _window(None, time(17, 0)),
        _window(time(9, 0), None),
        _window(time(17, 0), time(9, 0)),
    ],
)
def test_availability_vector_rejects_invalid_windows(window) -> None:
    with pytest.raises(InvalidRecordError):
        availability_vector(window, 15)


def test_availability_vector_rejects_non_positive_granularity() -> None:
    with pytest.raises(InvalidRecordError):
        availability_vector(_window(time(9, 0), time(10, 0)), 0)


def test_find_first_fit_returns_leftmost_run() -> None:
    vector = [True, False, True, True, True, False, True, True, True, True]

    assert find_first_fit(vector, 30, 15) == SlotRun(start=2, stop=4)


def test_find_first_fit_is_not_best_fit() -> None:
    # The first gap is larger than needed; a tighter gap later is ignored.
    vector = [True, True, True, False, True, True]

    assert find_first_fit(vector, 30, 15) == SlotRun(start=0, stop=2)


def test_find_first_fit_returns_none_without_a_long_enough_run() -> None:
    vector = [True, False, True, False, True, True]

    assert find_first_fit(vector, 45, 15) is None


def test_find_first_fit_on_empty_vector_returns_none() -> None:
    assert find_first_fit([], 15, 15) is None


def test_find_first_fit_is_idempotent() -> None:
    vector = [False, True, True, True]

    first = find_first_fit(vector, 30, 15)
    second = find_first_fit(vector, 30, 15)

    assert first == second == SlotRun(start=1, stop=3)
    assert vector == [False, True, True, True]


def test_find_first_fit_accepts_run_exactly_equal_to_duration() -> None:
    vector = availability_vector(_window(time(9, 0), time(17, 0)), 30)

    assert find_first_fit(vector, 480, 30) == SlotRun(start=0, stop=16)


def test_find_first_fit_rejects_duration_longer_than_window() -> None:
    vector = availability_vector(_window(time(9, 0), time(17, 0)), 30)

    assert find_first_fit(vector, 481, 30) is None


def test_slots_needed_rounds_partial_slots_up() -> None:
    assert slots_needed(20, 15) == 2
    assert slots_needed(60, 15) == 4


@pytest.mark.parametrize('duration', [0, -15])
def test_slots_needed_rejects_non_positive_duration(duration: int) -> None:
    with pytest.raises(InvalidRecordError):
        slots_needed(duration, 15)


def test_slot_run_bounds_map_indexes_to_datetimes() -> None:
    run = SlotRun(start=2, stop=6)

    assert run.length == 4
    assert run.bounds(date(2024, 11, 25), time(9, 0), 15) == (
        datetime(2024, 11, 25, 9, 30),
        datetime(2024, 11, 25, 10, 30),
    )


def test_fits_at_checks_the_requested_position_only() -> None:
    vector = [True, True, False, True, True, True]

    assert fits_at(vector, 3, 45, 15) == SlotRun(start=3, stop=6)
    assert fits_at(vector, 1, 30, 15) is None
    assert fits_at(vector, 4, 45, 15) is None


def test_slot_index_requires_grid_aligned_time_inside_window() -> None:
    assert slot_index(time(9, 0), time(10, 30), 15) == 6
    assert slot_index(time(9, 0), time(10, 40), 15) is None
    assert slot_index(time(9, 0), time(8, 45), 15) is None
