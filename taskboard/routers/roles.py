from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from taskboard.dependencies import get_current_user, get_db
from taskboard.errors import Conflict, NotFound
from taskboard.models import Role, User
from taskboard.policy import ensure_admin
from taskboard.repository import find_role_by_name, get_role, list_roles, soft_delete
from taskboard.responses import envelope
from taskboard.schemas import IdRequest, RoleCreate, RoleUpdate
from taskboard.utils import OBJECT_ID_PATTERN
from taskboard.views import role_view

router = APIRouter()


@router.post("/create")
def create_role(
    payload: RoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can create roles")

    if find_role_by_name(db, payload.name) is not None:
        raise Conflict("Role already exists")

    role = Role(name=payload.name)
    db.add(role)
    db.commit()

    return envelope("Role created successfully", role_view(role), status_code=201)


@router.get("/getall")
def get_all_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    roles = list_roles(db)
    return envelope(
        "Roles fetched successfully" if roles else "No roles found",
        [role_view(r) for r in roles],
    )


@router.get("/get/{role_id}")
def get_role_by_id(
    role_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    role = get_role(db, role_id)
    if role is None:
        raise NotFound("Role not found")
    return envelope("Role fetched successfully", role_view(role))


@router.put("/update")
def update_role(
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can update roles")

    role = get_role(db, payload.id)
    if role is None:
        raise NotFound("Role not found or has been deleted")

    if payload.name is not None:
        if find_role_by_name(db, payload.name, exclude_id=role.id) is not None:
            raise Conflict("Role already exists")
        role.name = payload.name
        db.commit()

    return envelope("Role updated successfully", role_view(role))


@router.delete("/delete")
def delete_role(
    payload: IdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin(current_user, "Only admin can delete roles")

    role = get_role(db, payload.id)
    if role is None:
        raise NotFound("Role not found or already deleted")

    soft_delete(db, role)
    return envelope("Role deleted successfully")
