"""Task endpoints.

Non-admins are confined to tasks assigned to them: they create tasks for
themselves, list and read only their own, and can never reassign.
"""

from fastapi import APIRouter, Body, Depends, Path, Request
from sqlalchemy.orm import Session

from taskboard.config import Settings
from taskboard.dependencies import authenticate_request, bearer_token, get_current_user, get_db, get_settings
from taskboard.errors import NotFound
from taskboard.models import Task, User
from taskboard.pagination import get_params, paginate
from taskboard.policy import (
    ADMIN_ONLY_TASK_FIELDS,
    ensure_task_access,
    resolve_assignee,
    strip_admin_only,
    task_scope,
)
from taskboard.repository import get_status, get_task, get_user, list_tasks, soft_delete, task_query
from taskboard.responses import envelope
from taskboard.schemas import IdRequest, TaskCreate, TaskMove, TaskUpdate
from taskboard.utils import OBJECT_ID_PATTERN
from taskboard.views import task_view

router = APIRouter()


def _require_status(db: Session, status_id: str) -> None:
    if get_status(db, status_id) is None:
        raise NotFound("Invalid status")


def _require_assignee(db: Session, user_id: str | None) -> None:
    if user_id is not None and get_user(db, user_id) is None:
        raise NotFound("Invalid assignee")


def _load_task(db: Session, task_id: str) -> Task:
    task = get_task(db, task_id)
    if task is None:
        raise NotFound("Task not found")
    return task


def _joined_view(db: Session, task_id: str, settings: Settings) -> dict:
    return task_view(get_task(db, task_id, joined=True), settings.asset_base_url)


# -------------------------
# CREATE
# -------------------------
@router.post("/create")
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    _require_status(db, payload.status)

    assignee_id = resolve_assignee(current_user, payload.assignee)
    if assignee_id != current_user.id:
        _require_assignee(db, assignee_id)

    task = Task(
        title=payload.title,
        description=payload.description,
        status_id=payload.status,
        assignee_id=assignee_id,
        due_date=payload.dueDate,
        priority=payload.priority,
    )
    db.add(task)
    db.commit()

    return envelope("Task created successfully", _joined_view(db, task.id, settings), status_code=201)


# -------------------------
# LISTS
# -------------------------
@router.post("/pagination")
def task_pagination(
    request: Request,
    body: dict | None = Body(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    params = get_params(request.query_params, body)

    query = task_query(db, joined=True)
    scope = task_scope(current_user)
    if scope is not None:
        query = query.filter(Task.assignee_id == scope)

    tasks, pagination = paginate(query, params)

    return envelope(
        "Tasks fetched successfully" if tasks else "No tasks found",
        [task_view(t, settings.asset_base_url) for t in tasks],
        pagination=pagination,
    )


@router.get("/getall")
def get_all_tasks(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    tasks = list_tasks(db, assignee_id=task_scope(current_user))
    return envelope(
        "Tasks fetched successfully" if tasks else "No tasks found",
        [task_view(t, settings.asset_base_url) for t in tasks],
    )


@router.get("/get")
def get_board(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Every live task, unauthenticated, when the public board is enabled.

    With ``public_board`` off this behaves like ``/task/getall``.
    """
    assignee_id = None
    if not settings.public_board:
        current_user = authenticate_request(db, settings, bearer_token(request))
        assignee_id = task_scope(current_user)

    tasks = list_tasks(db, assignee_id=assignee_id)
    return envelope(
        "Tasks fetched successfully" if tasks else "No tasks found",
        [task_view(t, settings.asset_base_url) for t in tasks],
    )


@router.get("/get/{task_id}")
def get_task_by_id(
    task_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    task = get_task(db, task_id, joined=True)
    if task is None:
        raise NotFound("Task not found")

    ensure_task_access(current_user, task, "view")

    return envelope("Task fetched successfully", task_view(task, settings.asset_base_url))


# -------------------------
# MUTATIONS
# -------------------------
@router.put("/update")
def update_task(
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    task = _load_task(db, payload.id)
    ensure_task_access(current_user, task, "update")

    changes = strip_admin_only(current_user, payload.changes(), ADMIN_ONLY_TASK_FIELDS)
    if "status_id" in changes:
        _require_status(db, changes["status_id"])
    if "assignee_id" in changes:
        _require_assignee(db, changes["assignee_id"])

    for key, value in changes.items():
        setattr(task, key, value)
    db.commit()

    return envelope("Task updated successfully", _joined_view(db, task.id, settings))


@router.put("/move")
def move_task_status(
    payload: TaskMove,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    task = _load_task(db, payload.id)
    ensure_task_access(current_user, task, "move")
    _require_status(db, payload.status)

    task.status_id = payload.status
    db.commit()

    return envelope("Task moved successfully", _joined_view(db, task.id, settings))


@router.delete("/delete")
def delete_task(
    payload: IdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = _load_task(db, payload.id)
    ensure_task_access(current_user, task, "delete")

    soft_delete(db, task)
    return envelope("Task deleted successfully")
