import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from frontdesk.core.exceptions import InvalidRecordError, StaffNotFoundError, StoreError
from frontdesk.models.staff import Staff
from frontdesk.stores.filters import StaffFilter

logger = logging.getLogger(__name__)


def verify_staff(staff: Staff | None) -> None:
    if staff is None or not staff.name or not staff.surname or staff.specialties is None:
        raise InvalidRecordError('Staff member must have a name, a surname and specialties.')


class StaffStore:
    """Reads and writes staff members; never commits, callers own the transaction."""

    def __init__(self, db: Session):
        self.db = db

    def select(self, staff_filter: StaffFilter | None = None) -> list[Staff]:
        staff_filter = staff_filter or StaffFilter()
        statement = select(Staff).where(*staff_filter.conditions()).order_by(Staff.id.asc())

        try:
            staff = list(self.db.scalars(statement))
        except SQLAlchemyError as exc:
            logger.exception('Staff select failed for %s', staff_filter)
            raise StoreError('An error occurred while fetching staff data.') from exc

        logger.info('Staff select %s returned %d record(s)', staff_filter.model_dump(exclude_none=True), len(staff))
        return staff

    def get(self, staff_id: int) -> Staff | None:
        if staff_id is None or staff_id <= 0:
            return None

        try:
            return self.db.get(Staff, staff_id)
        except SQLAlchemyError as exc:
            logger.exception('Staff lookup failed for id %s', staff_id)
            raise StoreError('An error occurred while fetching staff data.') from exc

    def exists(self, staff_id: int | None) -> bool:
        return staff_id is not None and self.get(staff_id) is not None

    def last(self) -> Staff | None:
        try:
            return self.db.scalars(select(Staff).order_by(Staff.id.desc()).limit(1)).first()
        except SQLAlchemyError as exc:
            logger.exception('Last staff lookup failed')
            raise StoreError('An error occurred while fetching staff data.') from exc

    def insert(self, staff: Staff) -> Staff:
        verify_staff(staff)

        try:
            self.db.add(staff)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Staff insert failed')
            raise StoreError('An error occurred while inserting staff data.') from exc

        logger.info('Inserted staff member %s', staff.id)
        return staff

    def update(self, staff: Staff) -> Staff:
        verify_staff(staff)
        existing = self.get(staff.id)
        if existing is None:
            raise StaffNotFoundError(staff.id)

        try:
            existing.name = staff.name
            existing.surname = staff.surname
            existing.specialties = staff.specialties
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Staff update failed for id %s', staff.id)
            raise StoreError('An error occurred while updating staff data.') from exc

        logger.info('Updated staff member %s', existing.id)
        return existing

    def delete(self, staff_id: int) -> None:
        if staff_id is None or staff_id <= 0:
            raise InvalidRecordError('Staff id must be a positive integer.')
        staff = self.get(staff_id)
        if staff is None:
            logger.info('No staff found with id %s', staff_id)
            raise StaffNotFoundError(staff_id)

        try:
            self.db.delete(staff)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Staff delete failed for id %s', staff_id)
            raise StoreError('An error occurred while deleting staff data.') from exc

        logger.info('Deleted staff member %s', staff_id)

    def soft_delete(self, staff_id: int, today: date | None = None) -> Staff:
        if staff_id is None or staff_id <= 0:
            raise InvalidRecordError('Staff id must be a positive integer.')
        staff = self.get(staff_id)
        if staff is None:
            raise StaffNotFoundError(staff_id)

        try:
            staff.fired_date = today or date.today()
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Setting fired_date failed for staff %s', staff_id)
            raise StoreError(f'An error occurred while firing staff member {staff_id}.') from exc

        logger.info('Set fired_date %s for staff member %s', staff.fired_date, staff_id)
        return staff

    def select_fired_before(self, day: date) -> list[Staff]:
        statement = select(Staff).where(
            Staff.fired_date.is_not(None),
            Staff.fired_date <= day,
        ).order_by(Staff.fired_date.asc(), Staff.id.asc())

        try:
            return list(self.db.scalars(statement))
        except SQLAlchemyError as exc:
            logger.exception('Selecting staff fired before %s failed', day)
            raise StoreError('An error occurred while fetching former staff.') from exc
