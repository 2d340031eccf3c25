from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_ROLES = ("Admin", "User")


def make_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite lives inside one connection; share it across threads.
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine: Engine) -> None:
    from taskboard import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def seed_roles(session_factory: sessionmaker) -> None:
    from taskboard.models import Role

    db: Session = session_factory()
    try:
        existing = {
            name for (name,) in db.query(Role.name).filter(Role.is_deleted.is_(False)).all()
        }
        missing = [name for name in DEFAULT_ROLES if name not in existing]
        for name in missing:
            db.add(Role(name=name))
        if missing:
            db.commit()
            logger.info("Seeded roles: %s", ", ".join(missing))
    finally:
        db.close()
