import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from frontdesk.auth.dependencies import Operator, require_desk_operator
from frontdesk.core.exceptions import FrontDeskError, StoreError
from frontdesk.database import transaction
from frontdesk.models.appointment import Appointment
from frontdesk.models.client import Client
from frontdesk.models.schedule import Schedule
from frontdesk.routes.deps import ensure_database_ready, get_db, to_http_exception
from frontdesk.scheduling.presentation import present_outcome
from frontdesk.scheduling.reschedule import RescheduleCandidate, RescheduleService
from frontdesk.stores.filters import ScheduleFilter
from frontdesk.stores.schedule_store import ScheduleStore

router = APIRouter(tags=['schedules'])

logger = logging.getLogger(__name__)


class ScheduleRequest(BaseModel):
    day: date
    start_time: time
    stop_time: time
    staff_id: int

    @model_validator(mode='after')
    def validate_window(self) -> 'ScheduleRequest':
        if self.start_time > self.stop_time:
            raise ValueError('The start time must not be after the stop time.')
        if self.staff_id <= 0:
            raise ValueError('A valid staff id is required.')
        return self


class ScheduleResponse(BaseModel):
    id: int
    day: date
    start_time: time
    stop_time: time
    staff_id: int

    class Config:
        from_attributes = True


class CandidateResponse(BaseModel):
    schedule_id: int
    start_time: datetime
    end_time: datetime


class DisplacedAppointmentResponse(BaseModel):
    id: int
    service: str
    duration: int
    client_id: int | None = None
    client_name: str | None = None
    staff_id: int
    deleted: bool


class RescheduleOutcomeResponse(BaseModel):
    status: str  # 'reschedule' or 'cancelled'
    appointment: DisplacedAppointmentResponse
    schedules: list[ScheduleResponse]
    candidates: list[CandidateResponse | None]


class ScheduleDeletionResponse(BaseModel):
    schedule: ScheduleResponse
    outcomes: list[RescheduleOutcomeResponse]


class AvailabilityCheckResponse(BaseModel):
    staff_id: int
    day: date
    time: time
    is_available: bool


class ResponsePresenter:
    """Collects reschedule outcomes into response models."""

    def __init__(self, db: Session):
        self.db = db
        self.outcomes: list[RescheduleOutcomeResponse] = []

    def _displaced(self, appointment: Appointment) -> DisplacedAppointmentResponse:
        client_name = None
        if appointment.client_id is not None:
            try:
                client = self.db.get(Client, appointment.client_id)
            except SQLAlchemyError as exc:
                raise StoreError('An error occurred while fetching client data.') from exc
            if client is not None:
                client_name = f'{client.name} {client.surname}'

        return DisplacedAppointmentResponse(
            id=appointment.id,
            service=appointment.service,
            duration=appointment.duration,
            client_id=appointment.client_id,
            client_name=client_name,
            staff_id=appointment.staff_id,
            deleted=bool(appointment.deleted),
        )

    def present_reschedule_options(
        self,
        schedules: list[Schedule],
        candidates: list[RescheduleCandidate | None],
        appointment: Appointment,
    ) -> None:
        self.outcomes.append(
            RescheduleOutcomeResponse(
                status='reschedule',
                appointment=self._displaced(appointment),
                schedules=[ScheduleResponse.model_validate(schedule) for schedule in schedules],
                candidates=[
                    None if candidate is None else CandidateResponse(
                        schedule_id=candidate.schedule.id,
                        start_time=candidate.starts_at,
                        end_time=candidate.ends_at,
                    )
                    for candidate in candidates
                ],
            )
        )

    def present_cancellation_notice(self, appointment: Appointment) -> None:
        logger.warning('Appointment %s could not be rescheduled and is cancelled', appointment.id)
        self.outcomes.append(
            RescheduleOutcomeResponse(
                status='cancelled',
                appointment=self._displaced(appointment),
                schedules=[],
                candidates=[],
            )
        )


@router.get('', response_model=list[ScheduleResponse])
def list_schedules(
    staff_id: int | None = Query(default=None),
    day: date | None = Query(default=None),
    start_time: time | None = Query(default=None),
    stop_time: time | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    schedule_filter = ScheduleFilter(staff_id=staff_id, day=day, start_time=start_time, stop_time=stop_time)
    try:
        return ScheduleStore(db).select(schedule_filter)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.get('/future', response_model=list[ScheduleResponse])
def list_future_schedules(
    staff_id: int = Query(...),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return ScheduleStore(db).future_schedules(staff_id, date.today())
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.get('/availability', response_model=AvailabilityCheckResponse)
def check_availability(
    staff_id: int = Query(...),
    day: date = Query(...),
    at: time = Query(..., alias='time'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        is_available = ScheduleStore(db).is_available(day, at, staff_id)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc

    return AvailabilityCheckResponse(staff_id=staff_id, day=day, time=at, is_available=is_available)


@router.post('', response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    data: ScheduleRequest,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            schedule = ScheduleStore(db).insert(
                Schedule(day=data.day, start_time=data.start_time, stop_time=data.stop_time, staff_id=data.staff_id)
            )
        return schedule
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.put('/{schedule_id}', response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    data: ScheduleRequest,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            schedule = ScheduleStore(db).update(
                Schedule(
                    id=schedule_id,
                    day=data.day,
                    start_time=data.start_time,
                    stop_time=data.stop_time,
                    staff_id=data.staff_id,
                )
            )
        return schedule
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/{schedule_id}', response_model=ScheduleDeletionResponse)
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    presenter = ResponsePresenter(db)
    try:
        deletion = RescheduleService(db).delete_schedule(schedule_id)
        for outcome in deletion.outcomes:
            present_outcome(outcome, presenter)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc

    logger.info('Operator %s deleted schedule %s', operator.username, schedule_id)
    return ScheduleDeletionResponse(
        schedule=ScheduleResponse.model_validate(deletion.schedule),
        outcomes=presenter.outcomes,
    )
