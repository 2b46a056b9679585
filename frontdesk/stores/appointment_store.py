import logging
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from frontdesk.core.exceptions import AppointmentNotFoundError, InvalidRecordError, StoreError
from frontdesk.models.appointment import Appointment
from frontdesk.models.schedule import Schedule

logger = logging.getLogger(__name__)


class AppointmentStore:
    """Reads and writes appointments; never commits."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int) -> Appointment | None:
        try:
            return self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as exc:
            logger.exception('Appointment lookup failed for id %s', appointment_id)
            raise StoreError('An error occurred while fetching appointment data.') from exc

    def linked_to(self, schedule: Schedule) -> list[Appointment]:
        """Active appointments that fall inside the given schedule window."""
        statement = select(Appointment).where(
            Appointment.staff_id == schedule.staff_id,
            Appointment.day == schedule.day,
            Appointment.start_time >= schedule.start_time,
            Appointment.start_time < schedule.stop_time,
            Appointment.deleted.is_(False),
        ).order_by(Appointment.start_time.asc(), Appointment.id.asc())

        try:
            appointments = list(self.db.scalars(statement))
        except SQLAlchemyError as exc:
            logger.exception('Linked appointment lookup failed for %r', schedule)
            raise StoreError('An error occurred while fetching the appointments of a schedule.') from exc

        logger.info('Schedule %s has %d linked appointment(s)', schedule.id, len(appointments))
        return appointments

    def booked_intervals(self, staff_id: int, day: date) -> list[tuple[time, time]]:
        statement = select(Appointment).where(
            Appointment.staff_id == staff_id,
            Appointment.day == day,
            Appointment.start_time.is_not(None),
            Appointment.deleted.is_(False),
        )

        try:
            appointments = self.db.scalars(statement).all()
        except SQLAlchemyError as exc:
            logger.exception('Booked interval lookup failed for staff %s on %s', staff_id, day)
            raise StoreError('An error occurred while fetching booked appointments.') from exc

        return [(appointment.start_time, appointment.end_time) for appointment in appointments]

    def soft_delete(self, appointment_id: int) -> Appointment:
        appointment = self.get(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)

        try:
            appointment.deleted = True
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Soft delete failed for appointment %s', appointment_id)
            raise StoreError(f'An error occurred while deleting appointment {appointment_id}.') from exc

        logger.info('Soft deleted appointment %s', appointment_id)
        return appointment

    def mark_replaced(self, appointment: Appointment, replacement: Appointment) -> Appointment:
        try:
            appointment.replaced_by = replacement.id
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Linking appointment %s to its replacement failed', appointment.id)
            raise StoreError(f'An error occurred while updating appointment {appointment.id}.') from exc

        return appointment

    def insert(self, appointment: Appointment) -> Appointment:
        if not appointment.service or not appointment.staff_id:
            raise InvalidRecordError('Appointment service and staff id are required.')
        if appointment.duration is None or appointment.duration <= 0:
            raise InvalidRecordError('Appointment duration must be a positive number of minutes.')

        try:
            self.db.add(appointment)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Appointment insert failed')
            raise StoreError('An error occurred while inserting appointment data.') from exc

        logger.info('Inserted appointment %s for staff %s on %s', appointment.id, appointment.staff_id, appointment.day)
        return appointment
