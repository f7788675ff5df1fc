import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from employee_server.database import get_db
from employee_server.errors import InternalError, log_db_error
from employee_server.repositories import users_repository
from employee_server.schemas.common import ErrorResponse
from employee_server.schemas.users import UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/new-users", response_model=List[UserSummary], responses={500: {"model": ErrorResponse}})
def get_new_users(db: Session = Depends(get_db)):
    """Users created since the previous call (used for sign-up notifications)"""
    try:
        return users_repository.new_users_watermark.poll(db)
    except SQLAlchemyError as e:
        log_db_error(logger, "Error in GET /api/new-users", e)
        raise InternalError("Server error", details=str(e))


@router.get("/all-users", response_model=List[UserSummary], responses={500: {"model": ErrorResponse}})
def get_all_users(db: Session = Depends(get_db)):
    """Get all users, newest first"""
    try:
        return users_repository.get_all_users(db)
    except SQLAlchemyError as e:
        log_db_error(logger, "Error in GET /api/all-users", e)
        raise InternalError("Server error", details=str(e))
