from __future__ import annotations

from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from taskboard.config import Settings
from taskboard.errors import Forbidden, Unauthenticated
from taskboard.models import User
from taskboard.repository import get_user
from taskboard.security import verify_token


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_request(db: Session, settings: Settings, token: str | None) -> User:
    if not token:
        raise Unauthenticated()

    user_id = verify_token(token, settings)

    # The stored token must still match; issuing a new one retires the old.
    user = get_user(db, user_id, joined=True)
    if user is None or user.token != token:
        raise Forbidden("User not found or token is invalid.")
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    return authenticate_request(db, settings, bearer_token(request))
