"""Credential verification and password hashing.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. Every failure raises the same
``AuthenticationError``, for an unknown email and a wrong password alike.
"""

import base64
import logging
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.orm import Session

from ..exceptions import AuthenticationError, ValidationError
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def parse_basic_auth(header: Optional[str]) -> tuple[str, str]:
    """Decode ``Basic base64(email:password)`` into its two parts.

    The ``Basic`` prefix is optional. Only the first colon separates email
    from password, so passwords may contain colons.

    Raises AuthenticationError if the header is missing, not valid base64,
    or either part is empty.
    """
    if not header:
        raise AuthenticationError()

    encoded = header.strip()
    if encoded[:6].lower() == "basic ":
        encoded = encoded[6:].strip()

    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except ValueError:
        # binascii.Error, UnicodeDecodeError and non-ASCII input
        raise AuthenticationError()

    email, sep, password = decoded.partition(":")
    if not sep or not email or not password:
        raise AuthenticationError()
    return email, password


def verify_credentials(db: Session, authorization: Optional[str]) -> User:
    """Validate a Basic credentials header and return the matching user."""
    email, password = parse_basic_auth(authorization)

    user = UserRepository(db).get_by_email(email)
    if user is None:
        logger.info("Login rejected: unknown email")
        raise AuthenticationError()

    if not bcrypt.verify(password, user.password_hash):
        logger.info("Login rejected: wrong password", extra={"user_id": user.user_id})
        raise AuthenticationError()

    return user


def create_user(db: Session, email: str, password: str) -> User:
    """Create a user account (management scripts and tests only).

    Raises ValidationError if the email is taken or inputs are invalid.
    """
    email = email.strip()
    if not email or "@" not in email:
        raise ValidationError("Valid email address required", field="email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password")

    users = UserRepository(db)
    if users.get_by_email(email) is not None:
        raise ValidationError("Email already registered", field="email")

    user = users.create(email, hash_password(password))
    logger.info("User created", extra={"user_id": user.user_id})
    return user
