# employee_server/routers/employees_router.py
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from employee_server.database import get_db
from employee_server.errors import EmployeeServerError, InternalError, NotFoundError, log_db_error
from employee_server.repositories import employee_repository
from employee_server.schemas.common import ErrorResponse, MessageResponse
from employee_server.schemas.employee import EmployeeResponse, EmployeeSaved
from employee_server.uploads import has_file, check_image_type, save_profile_image, delete_upload
from employee_server.utils import success_resp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["employees"])


@router.post(
    "/add-employee",
    response_model=EmployeeSaved,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": EmployeeSaved, "description": "Existing employee updated"},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def add_employee(
    id: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    join_date: Optional[str] = Form(None, alias="joinDate"),
    experience: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    achievement: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    db: Session = Depends(get_db),
):
    """
    Add a new employee, or replace every field of the employee with this id.
    Responds 201 on insert and 200 on update.
    """
    # wrong file type is refused before the form is even looked at
    if has_file(profile_image):
        check_image_type(profile_image)

    row = employee_repository.validate_employee_form({
        "id": id,
        "name": name,
        "role": role,
        "gender": gender,
        "dob": dob,
        "location": location,
        "email": email,
        "phone": phone,
        "joinDate": join_date,
        "experience": experience,
        "skills": skills,
        "achievement": achievement,
    })

    stored_path = save_profile_image(profile_image)
    try:
        outcome, image = employee_repository.upsert_employee(db, row, stored_path)
    except EmployeeServerError:
        delete_upload(stored_path)
        raise

    if outcome == employee_repository.CREATED:
        return success_resp(
            {"message": "Employee added successfully", "profile_image": image},
            status_code=status.HTTP_201_CREATED,
        )
    return success_resp({"message": "Employee updated successfully", "profile_image": image})


@router.get("/employees", response_model=List[EmployeeResponse], responses={500: {"model": ErrorResponse}})
def list_employees(db: Session = Depends(get_db)):
    """Get all employees"""
    try:
        return employee_repository.get_employees(db)
    except SQLAlchemyError as e:
        log_db_error(logger, "Error in GET /api/employees", e)
        raise InternalError("Server error", details=str(e))


@router.delete(
    "/delete-employee/{employee_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def delete_employee(employee_id: str, db: Session = Depends(get_db)):
    """Delete employee by ID"""
    try:
        deleted = employee_repository.delete_employee(db, employee_id)
    except SQLAlchemyError as e:
        db.rollback()
        log_db_error(logger, "Error in DELETE /api/delete-employee", e)
        raise InternalError("Server error", details=str(e))

    if deleted == 0:
        raise NotFoundError("Employee not found")
    logger.info("Deleted employee %s", employee_id)
    return {"message": "Employee deleted successfully"}
