from pydantic import BaseModel
from typing import Optional


class UserSummary(BaseModel):
    username: str
    email: str
    profile_image: Optional[str] = None

    class Config:
        from_attributes = True
