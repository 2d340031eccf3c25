"""Query helpers over the ORM models.

Every read composes ``not_deleted(model)`` explicitly; soft-deleted rows are
only reachable when a caller asks for them. Plain lookups return bare rows,
the ``joined`` variants eagerly load the referenced Role / Status / User.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from taskboard.models import Role, Status, Task, User

logger = logging.getLogger(__name__)


def not_deleted(model):
    """Default predicate for every read: the row has not been soft-deleted."""
    return model.is_deleted.is_(False)


def soft_delete(db: Session, row) -> None:
    row.is_deleted = True
    db.commit()
    logger.info("Soft-deleted %s %s", type(row).__name__, row.id)


# -------------------------
# USERS
# -------------------------
def get_user(db: Session, user_id: str, *, joined: bool = False) -> User | None:
    query = db.query(User)
    if joined:
        query = query.options(joinedload(User.role))
    return query.filter(User.id == user_id, not_deleted(User)).first()


def get_user_by_email(db: Session, email: str, *, include_deleted: bool = False) -> User | None:
    query = db.query(User).options(joinedload(User.role)).filter(User.email == email)
    if not include_deleted:
        query = query.filter(not_deleted(User))
    return query.first()


def list_users(db: Session, only_id: str | None = None) -> list[User]:
    query = db.query(User).options(joinedload(User.role)).filter(not_deleted(User))
    if only_id is not None:
        query = query.filter(User.id == only_id)
    return query.order_by(User.created_at.asc()).all()


# -------------------------
# ROLES
# -------------------------
def get_role(db: Session, role_id: str) -> Role | None:
    return db.query(Role).filter(Role.id == role_id, not_deleted(Role)).first()


def find_role_by_name(db: Session, name: str, exclude_id: str | None = None) -> Role | None:
    query = db.query(Role).filter(func.lower(Role.name) == name.lower(), not_deleted(Role))
    if exclude_id is not None:
        query = query.filter(Role.id != exclude_id)
    return query.first()


def list_roles(db: Session) -> list[Role]:
    return db.query(Role).filter(not_deleted(Role)).order_by(Role.created_at.asc()).all()


# -------------------------
# STATUSES
# -------------------------
def get_status(db: Session, status_id: str) -> Status | None:
    return db.query(Status).filter(Status.id == status_id, not_deleted(Status)).first()


def find_status_by_name(db: Session, name: str, exclude_id: str | None = None) -> Status | None:
    query = db.query(Status).filter(func.lower(Status.name) == name.lower(), not_deleted(Status))
    if exclude_id is not None:
        query = query.filter(Status.id != exclude_id)
    return query.first()


def find_status_by_order(db: Session, order: int, exclude_id: str | None = None) -> Status | None:
    query = db.query(Status).filter(Status.order == order, not_deleted(Status))
    if exclude_id is not None:
        query = query.filter(Status.id != exclude_id)
    return query.first()


def next_status_order(db: Session) -> int:
    current = db.query(func.max(Status.order)).filter(not_deleted(Status)).scalar()
    return 1 if current is None else current + 1


def list_statuses(db: Session) -> list[Status]:
    return db.query(Status).filter(not_deleted(Status)).order_by(Status.order.asc()).all()


# -------------------------
# TASKS
# -------------------------
def task_query(db: Session, *, joined: bool = False) -> Query:
    """Base query over live tasks; the caller adds scope, search and paging."""
    query = db.query(Task)
    if joined:
        query = query.options(
            joinedload(Task.status),
            joinedload(Task.assignee).joinedload(User.role),
        )
    return query.filter(not_deleted(Task))


def get_task(db: Session, task_id: str, *, joined: bool = False) -> Task | None:
    return task_query(db, joined=joined).filter(Task.id == task_id).first()


def list_tasks(db: Session, assignee_id: str | None = None) -> list[Task]:
    query = task_query(db, joined=True)
    if assignee_id is not None:
        query = query.filter(Task.assignee_id == assignee_id)
    return query.order_by(Task.created_at.desc()).all()
