"""
Schedule deletion and the reschedule workflow for displaced appointments.

Deleting a schedule soft deletes every appointment booked inside it and looks,
for each of them, at the future schedules of the same staff member. The result
keeps one entry per future schedule, in store order, with ``None`` where the
appointment does not fit. Nothing is booked automatically: the operator picks
one of the candidates, or is told the appointment is cancelled.

Every public call runs in one transaction. A store failure rolls the whole call
back and is reported as ``StoreFailure`` instead of being mistaken for
"no candidate found".
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable

from sqlalchemy.orm import Session

from frontdesk.core import config
from frontdesk.core.exceptions import (
    AppointmentNotFoundError,
    BusinessRuleError,
    InvalidRecordError,
    ScheduleNotFoundError,
    StoreError,
)
from frontdesk.database import transaction
from frontdesk.models.appointment import Appointment
from frontdesk.models.schedule import Schedule
from frontdesk.scheduling.availability import SlotRun, availability_vector, find_first_fit, fits_at, slot_index
from frontdesk.stores.appointment_store import AppointmentStore
from frontdesk.stores.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RescheduleCandidate:
    schedule: Schedule
    run: SlotRun
    starts_at: datetime
    ends_at: datetime


@dataclass(frozen=True)
class Rescheduled:
    appointment: Appointment
    schedules: list[Schedule]
    candidates: list[RescheduleCandidate | None]

    @property
    def candidate_mask(self) -> list[bool]:
        return [candidate is not None for candidate in self.candidates]

    @property
    def options(self) -> list[RescheduleCandidate]:
        return [candidate for candidate in self.candidates if candidate is not None]


@dataclass(frozen=True)
class Cancelled:
    appointment: Appointment
    schedules: list[Schedule] = field(default_factory=list)


@dataclass(frozen=True)
class StoreFailure:
    appointment: Appointment | None
    error: StoreError


RescheduleOutcome = Rescheduled | Cancelled | StoreFailure


@dataclass(frozen=True)
class ScheduleDeletion:
    schedule: Schedule | None
    outcomes: list[RescheduleOutcome]

    @property
    def failed(self) -> bool:
        return any(isinstance(outcome, StoreFailure) for outcome in self.outcomes)


class RescheduleService:
    def __init__(
        self,
        db: Session,
        schedules: ScheduleStore | None = None,
        appointments: AppointmentStore | None = None,
        granularity: int | None = None,
        today: Callable[[], date] | None = None,
    ):
        self.db = db
        self.schedules = schedules or ScheduleStore(db)
        self.appointments = appointments or AppointmentStore(db)
        self.granularity = config.SLOT_MINUTES if granularity is None else granularity
        self.today = today or date.today

    def fit(self, appointment: Appointment, schedule: Schedule) -> RescheduleCandidate | None:
        booked = self.appointments.booked_intervals(schedule.staff_id, schedule.day)
        vector = availability_vector(schedule, self.granularity, booked)
        run = find_first_fit(vector, appointment.duration, self.granularity)
        if run is None:
            return None

        starts_at, ends_at = run.bounds(schedule.day, schedule.start_time, self.granularity)
        return RescheduleCandidate(schedule=schedule, run=run, starts_at=starts_at, ends_at=ends_at)

    def _reschedule(self, appointment: Appointment) -> Rescheduled | Cancelled:
        self.appointments.soft_delete(appointment.id)

        future = self.schedules.future_schedules(appointment.staff_id, self.today())
        candidates = [self.fit(appointment, schedule) for schedule in future]

        if not any(candidate is not None for candidate in candidates):
            logger.info(
                'Appointment %s has no room in %d future schedule(s); it stays cancelled',
                appointment.id,
                len(future),
            )
            return Cancelled(appointment=appointment, schedules=future)

        logger.info(
            'Appointment %s fits %d of %d future schedule(s)',
            appointment.id,
            sum(candidate is not None for candidate in candidates),
            len(future),
        )
        return Rescheduled(appointment=appointment, schedules=future, candidates=candidates)

    def reschedule_appointment(self, appointment: Appointment) -> RescheduleOutcome:
        try:
            with transaction(self.db):
                return self._reschedule(appointment)
        except StoreError as exc:
            logger.exception('Rescheduling appointment %s failed; changes rolled back', appointment.id)
            return StoreFailure(appointment=appointment, error=exc)

    def delete_schedule(self, schedule_id: int) -> ScheduleDeletion:
        """Delete a schedule and reschedule the appointments it held.

        Raises ScheduleNotFoundError for an unknown id and StaffNotFoundError
        when the schedule points at a staff member that no longer exists.

        Every displaced appointment is fitted against the bookings as they
        stand before any of them is rebooked, so two of them may be offered
        the same slot. ``book`` checks the fit again and refuses the second.
        """
        schedule: Schedule | None = None
        current: Appointment | None = None
        try:
            with transaction(self.db):
                schedule = self.schedules.get(schedule_id)
                if schedule is None:
                    raise ScheduleNotFoundError(schedule_id)

                linked = self.appointments.linked_to(schedule)
                self.schedules.delete(schedule)

                outcomes: list[RescheduleOutcome] = []
                for appointment in linked:
                    current = appointment
                    outcomes.append(self._reschedule(appointment))
        except StoreError as exc:
            logger.exception('Deleting schedule %s failed; changes rolled back', schedule_id)
            return ScheduleDeletion(schedule=schedule, outcomes=[StoreFailure(appointment=current, error=exc)])

        return ScheduleDeletion(schedule=schedule, outcomes=outcomes)

    def book(self, appointment_id: int, schedule_id: int, start_time: time | None = None) -> Appointment:
        """Book a displaced appointment into one of its candidate schedules.

        Without ``start_time`` the first fitting slot is used. The displaced
        appointment stays soft deleted and points at the new appointment that
        takes its place; it can be rebooked only once.
        """
        with transaction(self.db):
            appointment = self.appointments.get(appointment_id)
            if appointment is None:
                raise AppointmentNotFoundError(appointment_id)
            if appointment.replaced_by is not None:
                raise BusinessRuleError(
                    f'Appointment {appointment_id} was already rebooked as appointment {appointment.replaced_by}.'
                )
            schedule = self.schedules.get(schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)
            if schedule.staff_id != appointment.staff_id:
                raise BusinessRuleError('The chosen schedule belongs to a different staff member.')
            if schedule.day < self.today():
                raise BusinessRuleError('Appointments cannot be moved into a past schedule.')
            if not appointment.deleted:
                self.appointments.soft_delete(appointment.id)

            if start_time is None:
                candidate = self.fit(appointment, schedule)
                if candidate is None:
                    raise BusinessRuleError('The appointment no longer fits the chosen schedule.')
                run = candidate.run
            else:
                index = slot_index(schedule.start_time, start_time, self.granularity)
                if index is None:
                    raise InvalidRecordError(
                        f'Start time must fall inside the schedule on {self.granularity}-minute boundaries.'
                    )
                booked = self.appointments.booked_intervals(schedule.staff_id, schedule.day)
                vector = availability_vector(schedule, self.granularity, booked)
                run = fits_at(vector, index, appointment.duration, self.granularity)
                if run is None:
                    raise BusinessRuleError('The appointment does not fit at the chosen time.')

            starts_at, _ = run.bounds(schedule.day, schedule.start_time, self.granularity)
            replacement = Appointment(
                service=appointment.service,
                duration=appointment.duration,
                client_id=appointment.client_id,
                staff_id=appointment.staff_id,
                day=schedule.day,
                start_time=starts_at.time(),
                deleted=False,
            )
            self.appointments.insert(replacement)
            self.appointments.mark_replaced(appointment, replacement)

        logger.info(
            'Appointment %s rebooked as %s on %s at %s',
            appointment_id,
            replacement.id,
            replacement.day,
            replacement.start_time,
        )
        return replacement
