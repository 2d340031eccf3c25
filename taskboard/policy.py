"""Who may do what.

Every decision reduces to two facts: whether the caller holds the Admin role
and whether the caller is the task's assignee. Statuses do not form a
workflow graph; any live status can be set directly by an authorized caller.
"""

from __future__ import annotations

from typing import Any

from taskboard.errors import Forbidden
from taskboard.models import Task, User

ADMIN_ROLE = "Admin"

# Fields only an Admin may change; silently dropped from other callers' payloads.
ADMIN_ONLY_TASK_FIELDS = frozenset({"assignee_id"})
ADMIN_ONLY_USER_FIELDS = frozenset({"role_id"})


def is_admin(user: User) -> bool:
    return user.role is not None and user.role.name == ADMIN_ROLE


def owns_task(user: User, task: Task) -> bool:
    return task.assignee_id is not None and task.assignee_id == user.id


def can_access_task(user: User, task: Task) -> bool:
    return is_admin(user) or owns_task(user, task)


def ensure_task_access(user: User, task: Task, action: str) -> None:
    if not can_access_task(user, task):
        raise Forbidden(f"Not authorized to {action} this task")


def ensure_admin(user: User, message: str) -> None:
    if not is_admin(user):
        raise Forbidden(message)


def ensure_self_or_admin(user: User, target_id: str, message: str) -> None:
    if not is_admin(user) and user.id != target_id:
        raise Forbidden(message)


def task_scope(user: User) -> str | None:
    """Assignee id a listing must be restricted to, or None for Admins."""
    return None if is_admin(user) else user.id


def resolve_assignee(user: User, requested: str | None) -> str:
    if is_admin(user) and requested:
        return requested
    return user.id


def strip_admin_only(user: User, changes: dict[str, Any], admin_only: frozenset[str]) -> dict[str, Any]:
    if is_admin(user):
        return dict(changes)
    return {key: value for key, value in changes.items() if key not in admin_only}
