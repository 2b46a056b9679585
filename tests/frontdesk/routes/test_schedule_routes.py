from datetime import date, datetime, time

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from frontdesk.auth.dependencies import Operator
from frontdesk.core.exceptions import StoreError
from frontdesk.models.appointment import Appointment
from frontdesk.models.schedule import Schedule
from frontdesk.routes.appointment_routes import RescheduleChoiceRequest, reschedule_appointment
from frontdesk.routes.schedule_routes import (
    ScheduleRequest,
    check_availability,
    create_schedule,
    delete_schedule,
    list_schedules,
)
from frontdesk.scheduling import reschedule

OPERATOR = Operator(username='desk1', role='desk')


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('frontdesk.routes.schedule_routes.ensure_database_ready', lambda: None)
    monkeypatch.setattr('frontdesk.routes.appointment_routes.ensure_database_ready', lambda: None)


@pytest.fixture
def tomorrow_is_future(monkeypatch: pytest.MonkeyPatch):
    # Reschedule candidates are searched from "today"; pin it to the deleted day.
    class FixedDate(date):
        @classmethod
        def today(cls):
            return cls(2024, 11, 24)

    monkeypatch.setattr(reschedule, 'date', FixedDate)


def test_schedule_request_rejects_reversed_window() -> None:
    with pytest.raises(ValidationError):
        ScheduleRequest(day=date(2024, 11, 24), start_time=time(17, 0), stop_time=time(9, 0), staff_id=11)


def test_create_schedule_persists_window(db, add_staff) -> None:
    add_staff()

    created = create_schedule(
        ScheduleRequest(day=date(2024, 11, 24), start_time=time(9, 0), stop_time=time(17, 0), staff_id=11),
        db=db,
        operator=OPERATOR,
    )

    assert created.id is not None
    assert db.get(Schedule, created.id).staff_id == 11


def test_create_schedule_for_unknown_staff_is_a_conflict(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_schedule(
            ScheduleRequest(day=date(2024, 11, 24), start_time=time(9, 0), stop_time=time(17, 0), staff_id=11),
            db=db,
            operator=OPERATOR,
        )

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'Staff member 11 does not exist.'


def test_list_schedules_filters_by_staff_and_day(db, add_staff, add_schedule) -> None:
    add_staff()
    wanted = add_schedule(date(2024, 11, 24))
    add_schedule(date(2024, 11, 25))

    schedules = list_schedules(staff_id=11, day=date(2024, 11, 24), start_time=None, stop_time=None, db=db)

    assert [schedule.id for schedule in schedules] == [wanted.id]


def test_check_availability(db, add_staff, add_schedule) -> None:
    add_staff()
    add_schedule(date(2024, 11, 24), time(9, 0), time(12, 0))

    response = check_availability(staff_id=11, day=date(2024, 11, 24), at=time(11, 0), db=db)

    assert response.is_available is True


def test_delete_schedule_reports_reschedule_options(
    db, add_staff, add_client, add_schedule, add_appointment, tomorrow_is_future
) -> None:
    add_staff()
    client = add_client()
    deleted = add_schedule(date(2024, 11, 24))
    future = add_schedule(date(2024, 11, 25))
    appointment = add_appointment(date(2024, 11, 24), time(10, 0), duration=60, client_id=client.id)

    response = delete_schedule(deleted.id, db=db, operator=OPERATOR)

    assert response.schedule.id == deleted.id
    assert len(response.outcomes) == 1
    outcome = response.outcomes[0]
    assert outcome.status == 'reschedule'
    assert outcome.appointment.id == appointment.id
    assert outcome.appointment.client_name == 'Federico Silvi'
    assert outcome.appointment.deleted is True
    assert [schedule.id for schedule in outcome.schedules] == [future.id]
    assert outcome.candidates[0].schedule_id == future.id
    assert outcome.candidates[0].start_time == datetime(2024, 11, 25, 9, 0)
    assert outcome.candidates[0].end_time == datetime(2024, 11, 25, 10, 0)


def test_delete_schedule_reports_cancellation(db, add_staff, add_schedule, add_appointment, tomorrow_is_future) -> None:
    add_staff()
    deleted = add_schedule(date(2024, 11, 24))
    add_appointment(date(2024, 11, 24), time(10, 0), duration=60)

    response = delete_schedule(deleted.id, db=db, operator=OPERATOR)

    assert [outcome.status for outcome in response.outcomes] == ['cancelled']
    assert response.outcomes[0].candidates == []


def test_delete_unknown_schedule_returns_not_found(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        delete_schedule(404, db=db, operator=OPERATOR)

    assert exception_info.value.status_code == 404


def test_delete_schedule_store_failure_is_unavailable(
    db, add_staff, add_schedule, add_appointment, monkeypatch: pytest.MonkeyPatch
) -> None:
    add_staff()
    deleted = add_schedule(date(2024, 11, 24))
    appointment = add_appointment(date(2024, 11, 24), time(10, 0), duration=60)

    def broken_future_schedules(self, staff_id, today):
        raise StoreError('connection lost')

    monkeypatch.setattr(
        'frontdesk.stores.schedule_store.ScheduleStore.future_schedules',
        broken_future_schedules,
    )

    with pytest.raises(HTTPException) as exception_info:
        delete_schedule(deleted.id, db=db, operator=OPERATOR)

    assert exception_info.value.status_code == 503
    assert db.get(Schedule, deleted.id) is not None
    assert db.get(Appointment, appointment.id).deleted is False


def test_reschedule_appointment_books_chosen_candidate(
    db, add_staff, add_schedule, add_appointment, tomorrow_is_future
) -> None:
    add_staff()
    future = add_schedule(date(2024, 11, 25), time(9, 0), time(12, 0))
    displaced = add_appointment(date(2024, 11, 24), time(10, 0), duration=60, deleted=True)

    booked = reschedule_appointment(
        displaced.id,
        RescheduleChoiceRequest(schedule_id=future.id, start_time=time(10, 0)),
        db=db,
        operator=OPERATOR,
    )

    assert booked.day == date(2024, 11, 25)
    assert booked.start_time == time(10, 0)
    assert booked.deleted is False


def test_reschedule_appointment_rejects_taken_slot(
    db, add_staff, add_schedule, add_appointment, tomorrow_is_future
) -> None:
    add_staff()
    future = add_schedule(date(2024, 11, 25), time(9, 0), time(12, 0))
    add_appointment(date(2024, 11, 25), time(10, 0), duration=30)
    displaced = add_appointment(date(2024, 11, 24), time(10, 0), duration=60, deleted=True)

    with pytest.raises(HTTPException) as exception_info:
        reschedule_appointment(
            displaced.id,
            RescheduleChoiceRequest(schedule_id=future.id, start_time=time(10, 0)),
            db=db,
            operator=OPERATOR,
        )

    assert exception_info.value.status_code == 409


def test_reschedule_appointment_twice_is_a_conflict(
    db, add_staff, add_schedule, add_appointment, tomorrow_is_future
) -> None:
    add_staff()
    future = add_schedule(date(2024, 11, 25), time(9, 0), time(12, 0))
    displaced = add_appointment(date(2024, 11, 24), time(10, 0), duration=60, deleted=True)

    choice = RescheduleChoiceRequest(schedule_id=future.id)
    booked = reschedule_appointment(displaced.id, choice, db=db, operator=OPERATOR)

    with pytest.raises(HTTPException) as exception_info:
        reschedule_appointment(displaced.id, choice, db=db, operator=OPERATOR)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == f'Appointment {displaced.id} was already rebooked as appointment {booked.id}.'
