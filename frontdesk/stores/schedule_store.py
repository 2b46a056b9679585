import logging
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from frontdesk.core.exceptions import InvalidRecordError, ScheduleNotFoundError, StaffNotFoundError, StoreError
from frontdesk.models.schedule import Schedule
from frontdesk.stores.filters import ScheduleFilter
from frontdesk.stores.staff_store import StaffStore

logger = logging.getLogger(__name__)


def verify_schedule(schedule: Schedule | None) -> None:
    if schedule is None:
        raise InvalidRecordError('Schedule cannot be empty.')
    if schedule.day is None or schedule.start_time is None or schedule.stop_time is None:
        raise InvalidRecordError('Schedule day, start time and stop time are required.')
    if schedule.start_time > schedule.stop_time:
        raise InvalidRecordError('The start time must not be after the stop time.')


class ScheduleStore:
    """Reads and writes staff working windows; never commits."""

    def __init__(self, db: Session, staff: StaffStore | None = None):
        self.db = db
        self.staff = staff or StaffStore(db)

    def _require_staff(self, staff_id: int | None) -> None:
        if not self.staff.exists(staff_id):
            raise StaffNotFoundError(staff_id)

    def select(self, schedule_filter: ScheduleFilter | None = None) -> list[Schedule]:
        schedule_filter = schedule_filter or ScheduleFilter()
        statement = select(Schedule).where(*schedule_filter.conditions()).order_by(
            Schedule.day.asc(),
            Schedule.start_time.asc(),
            Schedule.id.asc(),
        )

        try:
            schedules = list(self.db.scalars(statement))
        except SQLAlchemyError as exc:
            logger.exception('Schedule select failed for %s', schedule_filter)
            raise StoreError('An error occurred while fetching schedule data.') from exc

        logger.info(
            'Schedule select %s returned %d record(s)',
            schedule_filter.model_dump(exclude_none=True),
            len(schedules),
        )
        return schedules

    def get(self, schedule_id: int) -> Schedule | None:
        try:
            return self.db.get(Schedule, schedule_id)
        except SQLAlchemyError as exc:
            logger.exception('Schedule lookup failed for id %s', schedule_id)
            raise StoreError('An error occurred while fetching schedule data.') from exc

    def future_schedules(self, staff_id: int, today: date) -> list[Schedule]:
        statement = select(Schedule).where(
            Schedule.staff_id == staff_id,
            Schedule.day >= today,
        ).order_by(Schedule.day.asc(), Schedule.start_time.asc(), Schedule.id.asc())

        try:
            schedules = list(self.db.scalars(statement))
        except SQLAlchemyError as exc:
            logger.exception('Future schedule lookup failed for staff %s', staff_id)
            raise StoreError('An error occurred while fetching future schedules.') from exc

        logger.info('Found %d future schedule(s) for staff %s from %s', len(schedules), staff_id, today)
        return schedules

    def insert(self, schedule: Schedule) -> Schedule:
        verify_schedule(schedule)
        self._require_staff(schedule.staff_id)

        try:
            self.db.add(schedule)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Schedule insert failed')
            raise StoreError('An error occurred while inserting schedule data.') from exc

        logger.info('Inserted %r', schedule)
        return schedule

    def update(self, schedule: Schedule) -> Schedule:
        verify_schedule(schedule)
        self._require_staff(schedule.staff_id)
        existing = self.get(schedule.id)
        if existing is None:
            raise ScheduleNotFoundError(schedule.id)

        try:
            existing.day = schedule.day
            existing.start_time = schedule.start_time
            existing.stop_time = schedule.stop_time
            existing.staff_id = schedule.staff_id
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Schedule update failed for id %s', schedule.id)
            raise StoreError('An error occurred while updating schedule data.') from exc

        logger.info('Updated %r', existing)
        return existing

    def delete(self, schedule: Schedule) -> None:
        if schedule is None or schedule.day is None:
            raise InvalidRecordError('Schedule cannot be empty and must have a day.')
        self._require_staff(schedule.staff_id)

        try:
            self.db.delete(schedule)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Schedule delete failed for id %s', schedule.id)
            raise StoreError('An error occurred while deleting schedule data.') from exc

        logger.info('Deleted %r', schedule)

    def is_available(self, day: date, at: time, staff_id: int) -> bool:
        if day is None or at is None or staff_id is None or staff_id <= 0:
            raise InvalidRecordError('Day, time and staff id are required.')

        schedules_of_day = self.select(ScheduleFilter(day=day, staff_id=staff_id))
        return any(s.start_time <= at <= s.stop_time for s in schedules_of_day)
