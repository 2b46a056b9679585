from datetime import date, time

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from frontdesk.auth.dependencies import Operator, require_desk_operator
from frontdesk.core.exceptions import FrontDeskError
from frontdesk.routes.deps import ensure_database_ready, get_db, to_http_exception
from frontdesk.scheduling.reschedule import RescheduleService

router = APIRouter(tags=['appointments'])


class RescheduleChoiceRequest(BaseModel):
    schedule_id: int
    start_time: time | None = None


class AppointmentResponse(BaseModel):
    id: int
    service: str
    duration: int
    client_id: int | None = None
    staff_id: int
    day: date | None = None
    start_time: time | None = None
    deleted: bool
    replaced_by: int | None = None

    class Config:
        from_attributes = True


@router.post('/{appointment_id}/reschedule', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def reschedule_appointment(
    appointment_id: int,
    data: RescheduleChoiceRequest,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        return RescheduleService(db).book(appointment_id, data.schedule_id, data.start_time)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc
