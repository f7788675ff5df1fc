from pydantic import BaseModel, Field
from typing import Optional
from datetime import date


# ---------------------------------------------------------
# RESPONSE SCHEMA: one row of the employees table
# ---------------------------------------------------------
class EmployeeResponse(BaseModel):
    id: str
    name: str
    role: str
    gender: str
    dob: date
    location: str
    email: str
    phone: str
    join_date: date
    experience: int
    skills: str
    achievement: str
    profile_image: Optional[str] = None

    class Config:
        from_attributes = True


class EmployeeSaved(BaseModel):
    message: str
    profile_image: Optional[str] = Field(None, description="Relative path of the stored image, if any")

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Employee added successfully",
                "profile_image": "uploads/1700000000000-123456789-jane.png",
            }
        }

