import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, SessionLocal, engine, ensure_appointment_schema
from backend.models import appointment, user  # noqa: F401
from backend.repositories.user_repository import UserRepository
from backend.routes import admin_routes, appointment_routes, auth_routes, payment_routes
from backend.services.errors import AppointmentError
from backend.services.payment_service import configure_stripe
from backend.services.user_service import UserService

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Appointment Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.exception_handler(AppointmentError)
async def handle_appointment_error(request: Request, exc: AppointmentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.message})


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if config.SEED_ADMIN:
        db = SessionLocal()
        try:
            UserService(UserRepository(db)).ensure_admin(config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
        except SQLAlchemyError:
            db.rollback()
            logger.exception('Could not seed the admin user.')
        finally:
            db.close()


@app.on_event('startup')
def initialize_payments() -> None:
    configure_stripe()


@app.get('/')
def root():
    return {'status': 'Appointment Booking API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(appointment_routes.router, prefix='/api/appointments')
app.include_router(admin_routes.router, prefix='/api/admin')
app.include_router(payment_routes.router, prefix='/api/payments')
