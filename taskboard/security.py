"""Password hashing and session tokens.

Tokens are signed with itsdangerous and carry the user id and role name.
A user holds at most one live token; logging in again while it is still
valid hands back the same token.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from taskboard.config import Settings
from taskboard.errors import NotFound, Unauthenticated
from taskboard.models import User
from taskboard.repository import get_user_by_email
from taskboard.utils import utcnow

logger = logging.getLogger(__name__)

TOKEN_SALT = "taskboard-session"

# -------------------------
# PASSWORD HASHING
# -------------------------
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# -------------------------
# TOKENS
# -------------------------
class TokenExpired(Unauthenticated):
    default_message = "Token has expired."


class TokenInvalid(Unauthenticated):
    default_message = "Invalid or expired token."


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt=TOKEN_SALT)


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email.strip().lower())
    if user is None:
        logger.info("Login rejected: unknown email %s", email)
        raise NotFound("Invalid email or User not found")

    if not verify_password(password, user.password):
        logger.info("Login rejected: bad password for user %s", user.id)
        raise Unauthenticated("Invalid password")

    return user


def issue_or_reuse_token(db: Session, user: User, settings: Settings) -> tuple[str, datetime]:
    """Return the user's live token, or mint, store and return a new one."""
    now = utcnow()
    if user.token and user.token_expires_at and user.token_expires_at > now:
        logger.debug("Reusing token for user %s", user.id)
        return user.token, user.token_expires_at

    payload = {
        "id": user.id,
        "role": user.role.name if user.role else None,
        "nonce": secrets.token_hex(8),
    }
    token = _serializer(settings).dumps(payload)
    expires_at = now + timedelta(seconds=settings.token_expires_in)

    user.token = token
    user.token_expires_at = expires_at
    db.commit()
    logger.info("Issued new token for user %s (expires %s)", user.id, expires_at.isoformat())
    return token, expires_at


def verify_token(token: str, settings: Settings) -> str:
    """Decode a token and return the user id it was issued to."""
    try:
        payload = _serializer(settings).loads(token, max_age=settings.token_expires_in)
    except SignatureExpired as exc:
        raise TokenExpired() from exc
    except BadData as exc:
        raise TokenInvalid() from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("id"), str):
        raise TokenInvalid()
    return payload["id"]
