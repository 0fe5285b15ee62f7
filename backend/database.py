from datetime import datetime, timezone
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_appointment_schema(bind=None) -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        bind = bind or engine
        inspector = inspect(bind)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('description', 'ALTER TABLE appointments ADD COLUMN description VARCHAR'),
            ('created_at', 'ALTER TABLE appointments ADD COLUMN created_at TIMESTAMP'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_time_range ON appointments(start_time, end_time)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_user_status ON appointments(user_id, status)')
            )

        _appointment_schema_checked = True
