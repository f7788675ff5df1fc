import logging
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError


class EmployeeServerError(Exception):
    """Base for errors that map straight onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(EmployeeServerError):
    status_code = 400


class ConflictError(EmployeeServerError):
    status_code = 400


class UploadError(EmployeeServerError):
    status_code = 400


class NotFoundError(EmployeeServerError):
    status_code = 404


class InternalError(EmployeeServerError):
    status_code = 500


# Driver-specific markers for a duplicate primary/unique key
_MYSQL_DUP_ENTRY = 1062
_PG_UNIQUE_VIOLATION = "23505"


def db_error_code(exc: Exception):
    """Best-effort driver error code (pymysql errno, psycopg2 pgcode, ...)."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        return getattr(exc, "code", None)
    pgcode = getattr(orig, "pgcode", None)
    if pgcode:
        return pgcode
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return getattr(exc, "code", None)


def is_unique_violation(exc: Exception) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    code = db_error_code(exc)
    if code in (_MYSQL_DUP_ENTRY, _PG_UNIQUE_VIOLATION):
        return True
    # sqlite reports no code, only the message
    return "UNIQUE constraint failed" in str(exc.orig)


def log_db_error(logger: logging.Logger, where: str, exc: Exception) -> None:
    detail = None
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        detail = str(exc.orig)
    logger.error(
        "%s: %s",
        where,
        {"message": str(exc), "code": db_error_code(exc), "detail": detail},
        exc_info=exc,
    )
