import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from frontdesk.database import Base  # noqa: E402
from frontdesk.models.appointment import Appointment  # noqa: E402
from frontdesk.models.client import Client  # noqa: E402
from frontdesk.models.schedule import Schedule  # noqa: E402
from frontdesk.models.staff import Staff  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def add_staff(db):
    def _add_staff(staff_id: int = 11, name: str = 'Marco', surname: str = 'Caruso', specialties: str = 'massage'):
        staff = Staff(id=staff_id, name=name, surname=surname, specialties=specialties)
        db.add(staff)
        db.commit()
        return staff

    return _add_staff


@pytest.fixture
def add_schedule(db):
    def _add_schedule(day: date, start: time = time(9, 0), stop: time = time(17, 0), staff_id: int = 11):
        schedule = Schedule(day=day, start_time=start, stop_time=stop, staff_id=staff_id)
        db.add(schedule)
        db.commit()
        return schedule

    return _add_schedule


@pytest.fixture
def add_appointment(db):
    def _add_appointment(
        day: date,
        start: time,
        duration: int = 60,
        staff_id: int = 11,
        client_id: int | None = None,
        service: str = 'massage',
        deleted: bool = False,
    ):
        appointment = Appointment(
            service=service,
            duration=duration,
            client_id=client_id,
            staff_id=staff_id,
            day=day,
            start_time=start,
            deleted=deleted,
        )
        db.add(appointment)
        db.commit()
        return appointment

    return _add_appointment


@pytest.fixture
def add_client(db):
    def _add_client(name: str = 'Federico', surname: str = 'Silvi'):
        client = Client(name=name, surname=surname)
        db.add(client)
        db.commit()
        return client

    return _add_client
