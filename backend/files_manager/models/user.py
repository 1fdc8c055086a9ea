"""User model.

Users are created out of band (see ``scripts/create_user.py``) and are only
read by the API: the credential verifier looks them up by email.
"""

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from ..database import Base
from .ids import new_id


class User(Base):
    """Account identified by a unique email address."""

    __tablename__ = "users"

    user_id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False)
    # bcrypt hash, never the plaintext password
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
