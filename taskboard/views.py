"""Response shapes for each resource."""

from __future__ import annotations

from typing import Any

from taskboard.models import Role, Status, Task, User
from taskboard.utils import get_asset_url


def role_view(role: Role) -> dict[str, Any]:
    return {"id": role.id, "name": role.name}


def status_view(status: Status) -> dict[str, Any]:
    return {"id": status.id, "name": status.name, "order": status.order}


def user_view(user: User, asset_base_url: str) -> dict[str, Any]:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "mobile": user.mobile,
        "role_id": user.role_id,
        "role": user.role.name if user.role else None,
        "profile_picture": get_asset_url(asset_base_url, user.profile_picture),
    }


def assignee_summary(user: User | None, asset_base_url: str) -> dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "profile_picture": get_asset_url(asset_base_url, user.profile_picture),
    }


def task_view(task: Task, asset_base_url: str) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": task.due_date,
        "priority": task.priority.value if task.priority else None,
        "status": {"id": task.status.id, "name": task.status.name} if task.status else None,
        "assignee": assignee_summary(task.assignee, asset_base_url),
        "createdAt": task.created_at,
        "updatedAt": task.updated_at,
    }
