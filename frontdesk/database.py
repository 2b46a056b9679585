from contextlib import contextmanager
from threading import Lock
from typing import Iterator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from frontdesk.core import config


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked = False


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def ensure_schema() -> None:
    global _schema_checked

    if _schema_checked:
        return

    with _schema_lock:
        if _schema_checked:
            return

        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())

        with engine.begin() as connection:
            if 'appointment' in table_names:
                existing_columns = {column['name'] for column in inspector.get_columns('appointment')}
                migration_steps = [
                    ('day', 'ALTER TABLE appointment ADD COLUMN day DATE'),
                    ('start_time', 'ALTER TABLE appointment ADD COLUMN start_time TIME'),
                    ('deleted', 'ALTER TABLE appointment ADD COLUMN deleted BOOLEAN NOT NULL DEFAULT 0'),
                    ('replaced_by', 'ALTER TABLE appointment ADD COLUMN replaced_by INTEGER'),
                ]
                for column_name, statement in migration_steps:
                    if column_name not in existing_columns:
                        connection.execute(text(statement))
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_appointment_staff_day ON appointment(staff_id, day)')
                )

            if 'staff' in table_names:
                existing_columns = {column['name'] for column in inspector.get_columns('staff')}
                if 'fired_date' not in existing_columns:
                    connection.execute(text('ALTER TABLE staff ADD COLUMN fired_date DATE'))

            if 'schedule' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_schedule_staff_day ON schedule(staff_id, day, start_time)')
                )

        _schema_checked = True
