from sqlalchemy import Column, Integer, String, TIMESTAMP, func
from employee_server.database import Base


class User(Base):
    """Read-only mapping of the login server's users table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False)
    profile_image = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
