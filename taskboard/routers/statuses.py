from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from taskboard.dependencies import get_current_user, get_db
from taskboard.errors import Conflict, NotFound, ValidationError
from taskboard.models import Status, User
from taskboard.policy import ensure_admin
from taskboard.repository import (
    find_status_by_name,
    find_status_by_order,
    get_status,
    list_statuses,
    next_status_order,
    soft_delete,
)
from taskboard.responses import envelope
from taskboard.schemas import IdRequest, StatusCreate, StatusUpdate
from taskboard.utils import INT64_MAX, OBJECT_ID_PATTERN
from taskboard.views import status_view

router = APIRouter()


def _ensure_unique(db: Session, name: str | None, order: int | None, exclude_id: str | None = None) -> None:
    # Check-then-write: concurrent creators can both pass this.
    if name is not None and find_status_by_name(db, name, exclude_id) is not None:
        raise Conflict("Status already exists")
    if order is not None and find_status_by_order(db, order, exclude_id) is not None:
        raise Conflict("Status order number already exists")


@router.post("/create")
def create_status(
    payload: StatusCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can create statuses")

    _ensure_unique(db, payload.name, payload.order)
    order = payload.order if payload.order is not None else next_status_order(db)
    if order > INT64_MAX:
        raise ValidationError("No status order numbers left")

    status = Status(name=payload.name, order=order)
    db.add(status)
    db.commit()

    return envelope("Status created successfully", status_view(status), status_code=201)


@router.get("/getall")
def get_all_statuses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    statuses = list_statuses(db)
    return envelope(
        "Statuses fetched successfully" if statuses else "No statuses found",
        [status_view(s) for s in statuses],
    )


@router.get("/get/{status_id}")
def get_status_by_id(
    status_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    status = get_status(db, status_id)
    if status is None:
        raise NotFound("Status not found")
    return envelope("Status fetched successfully", status_view(status))


@router.put("/update")
def update_status(
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can update statuses")

    status = get_status(db, payload.id)
    if status is None:
        raise NotFound("Status not found or has been deleted")

    _ensure_unique(db, payload.name, payload.order, exclude_id=status.id)

    if payload.name is not None:
        status.name = payload.name
    if payload.order is not None:
        status.order = payload.order
    db.commit()

    return envelope("Status updated successfully", status_view(status))


@router.delete("/delete")
def delete_status(
    payload: IdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can delete statuses")

    status = get_status(db, payload.id)
    if status is None:
        raise NotFound("Status not found or already deleted")

    soft_delete(db, status)
    return envelope("Status deleted successfully")
