from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from frontdesk.core.exceptions import (
    AppointmentNotFoundError,
    BusinessRuleError,
    FrontDeskError,
    InvalidRecordError,
    ScheduleNotFoundError,
    StoreError,
)
from frontdesk.database import SessionLocal, ensure_schema

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def ensure_database_ready() -> None:
    try:
        ensure_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def to_http_exception(exc: FrontDeskError) -> HTTPException:
    if isinstance(exc, StoreError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)
    if isinstance(exc, InvalidRecordError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, (AppointmentNotFoundError, ScheduleNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, BusinessRuleError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
