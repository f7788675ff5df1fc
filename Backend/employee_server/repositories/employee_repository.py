import os
import re
import logging
from datetime import datetime
from typing import Optional, List, Tuple, Dict

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from employee_server.errors import (
    ValidationError,
    ConflictError,
    InternalError,
    is_unique_violation,
    log_db_error,
)
from employee_server.models.employee_model import Employee

logger = logging.getLogger(__name__)

# False reproduces the legacy behaviour: an update without a new file clears the image.
KEEP_IMAGE_ON_UPDATE = os.getenv("KEEP_IMAGE_ON_UPDATE", "false").strip().lower() in ("1", "true", "yes")

EMPLOYEE_ID_RE = re.compile(r"[A-Z]{3}[0-9]{4}")
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"[0-9]{10}")
EXPERIENCE_RE = re.compile(r"[0-9]+")
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# form field name -> column name
FORM_FIELDS = {
    "id": "id",
    "name": "name",
    "role": "role",
    "gender": "gender",
    "dob": "dob",
    "location": "location",
    "email": "email",
    "phone": "phone",
    "joinDate": "join_date",
    "experience": "experience",
    "skills": "skills",
    "achievement": "achievement",
}

MAX_LENGTHS = {"name": 50, "role": 40, "gender": 10, "location": 40, "email": 50}

DATE_FORMAT = "%Y-%m-%d"

CREATED = "created"
UPDATED = "updated"


def validate_employee_form(form: Dict[str, Optional[str]]) -> Dict[str, object]:
    """
    Check the submitted form and return column values ready for the table.

    Checks run in a fixed order and stop at the first failure:
    required fields, employee id, email, phone, then experience, dates and
    column lengths. Values are stored exactly as submitted; surrounding
    whitespace only matters for the required-field check.
    """
    values = {k: form.get(k) or "" for k in FORM_FIELDS}
    if any(not v.strip() for v in values.values()):
        raise ValidationError("All fields are required")

    if not EMPLOYEE_ID_RE.fullmatch(values["id"]):
        raise ValidationError("Invalid Employee ID format")
    if not EMAIL_RE.fullmatch(values["email"]):
        raise ValidationError("Invalid email format")
    if not PHONE_RE.fullmatch(values["phone"]):
        raise ValidationError("Phone number must be 10 digits")
    if not EXPERIENCE_RE.fullmatch(values["experience"]):
        raise ValidationError("Experience must be a whole number")

    dates = {}
    for field in ("dob", "joinDate"):
        if not DATE_RE.fullmatch(values[field]):
            raise ValidationError(f"Invalid date format for {field}")
        try:
            dates[field] = datetime.strptime(values[field], DATE_FORMAT).date()
        except ValueError:
            raise ValidationError(f"Invalid date format for {field}")

    for field, limit in MAX_LENGTHS.items():
        if len(values[field]) > limit:
            raise ValidationError(f"{field} must be at most {limit} characters")

    row = {FORM_FIELDS[k]: v for k, v in values.items()}
    row["dob"] = dates["dob"]
    row["join_date"] = dates["joinDate"]
    row["experience"] = int(values["experience"])
    return row


def get_employees(db: Session) -> List[Employee]:
    return list(db.scalars(select(Employee)))


def upsert_employee(
    db: Session,
    row: Dict[str, object],
    profile_image: Optional[str],
    keep_existing_image: Optional[bool] = None,
) -> Tuple[str, Optional[str]]:
    """
    Insert the employee, or fully replace the row that already has this id.

    Returns (CREATED | UPDATED, stored profile_image). With
    keep_existing_image the previous image survives an update that brings
    no new file; otherwise the column takes profile_image as given.
    """
    if keep_existing_image is None:
        keep_existing_image = KEEP_IMAGE_ON_UPDATE

    try:
        existing = db.get(Employee, row["id"])
        if existing is not None:
            for k, v in row.items():
                setattr(existing, k, v)
            if profile_image is not None or not keep_existing_image:
                existing.profile_image = profile_image
            stored = existing.profile_image
            db.commit()
            return UPDATED, stored

        db.add(Employee(**row, profile_image=profile_image))
        db.commit()
        return CREATED, profile_image
    except IntegrityError as e:
        db.rollback()
        log_db_error(logger, "Error in POST /api/add-employee", e)
        if is_unique_violation(e):
            raise ConflictError("Employee ID already exists")
        raise InternalError("Server error", details=str(e.orig))
    except SQLAlchemyError as e:
        db.rollback()
        log_db_error(logger, "Error in POST /api/add-employee", e)
        raise InternalError("Server error", details=str(e))


def delete_employee(db: Session, employee_id: str) -> int:
    """Delete by id; returns the number of rows removed (0 or 1)."""
    result = db.execute(delete(Employee).where(Employee.id == employee_id))
    db.commit()
    return result.rowcount
