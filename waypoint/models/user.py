from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from waypoint.database.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="developer")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

class UserSession(Base):
    """
    One active refresh-token session per username.
    Login upserts by username; logout and user deletion remove the row.
    """
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
