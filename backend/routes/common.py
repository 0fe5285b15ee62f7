from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def database_unavailable(exc: SQLAlchemyError, db: Session | None = None) -> HTTPException:
    if db is not None:
        db.rollback()
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )
