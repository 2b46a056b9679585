import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from frontdesk.core import config
from frontdesk.database import Base, engine, ensure_schema
from frontdesk.models import appointment, client, schedule, staff  # noqa: F401  registers tables
from frontdesk.routes import appointment_routes, schedule_routes, staff_routes

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Clinic Front Desk')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Clinic Front Desk API Running'}


app.include_router(staff_routes.router, prefix='/staff')
app.include_router(schedule_routes.router, prefix='/schedules')
app.include_router(appointment_routes.router, prefix='/appointments')
