from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from frontdesk.auth.dependencies import Operator, require_desk_operator
from frontdesk.core.exceptions import FrontDeskError, StaffNotFoundError
from frontdesk.database import transaction
from frontdesk.models.staff import Staff
from frontdesk.routes.deps import ensure_database_ready, get_db, to_http_exception
from frontdesk.stores.filters import StaffFilter
from frontdesk.stores.staff_store import StaffStore

router = APIRouter(tags=['staff'])


class StaffRequest(BaseModel):
    name: str
    surname: str
    specialties: str = ''

    @field_validator('name', 'surname')
    @classmethod
    def validate_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name and surname are required.')
        return normalized

    @field_validator('specialties')
    @classmethod
    def normalize_specialties(cls, value: str) -> str:
        return value.strip()


class StaffResponse(BaseModel):
    id: int
    name: str
    surname: str
    specialties: str
    fired_date: date | None = None

    class Config:
        from_attributes = True


def _not_found(staff_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f'Staff member {staff_id} not found.',
    )


@router.get('', response_model=list[StaffResponse])
def list_staff(
    name: str | None = Query(default=None),
    surname: str | None = Query(default=None),
    specialties: str | None = Query(default=None),
    fired_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    staff_filter = StaffFilter(name=name, surname=surname, specialties=specialties, fired_date=fired_date)
    try:
        return StaffStore(db).select(staff_filter)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.get('/fired', response_model=list[StaffResponse])
def list_fired_staff(
    before: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return StaffStore(db).select_fired_before(before or date.today())
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{staff_id}', response_model=StaffResponse)
def get_staff(staff_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        staff = StaffStore(db).get(staff_id)
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc

    if staff is None:
        raise _not_found(staff_id)
    return staff


@router.post('', response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(
    data: StaffRequest,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            staff = StaffStore(db).insert(
                Staff(name=data.name, surname=data.surname, specialties=data.specialties)
            )
        return staff
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.put('/{staff_id}', response_model=StaffResponse)
def update_staff(
    staff_id: int,
    data: StaffRequest,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            staff = StaffStore(db).update(
                Staff(id=staff_id, name=data.name, surname=data.surname, specialties=data.specialties)
            )
        return staff
    except StaffNotFoundError as exc:
        raise _not_found(staff_id) from exc
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/{staff_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            StaffStore(db).delete(staff_id)
    except StaffNotFoundError as exc:
        raise _not_found(staff_id) from exc
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc


@router.post('/{staff_id}/fire', response_model=StaffResponse)
def fire_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    operator: Operator = Depends(require_desk_operator),
):
    ensure_database_ready()

    try:
        with transaction(db):
            staff = StaffStore(db).soft_delete(staff_id)
        return staff
    except StaffNotFoundError as exc:
        raise _not_found(staff_id) from exc
    except FrontDeskError as exc:
        raise to_http_exception(exc) from exc
