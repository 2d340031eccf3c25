import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.config import Settings
from taskboard.dependencies import get_current_user, get_db, get_settings
from taskboard.errors import Conflict, NotFound
from taskboard.models import User
from taskboard.policy import (
    ADMIN_ONLY_USER_FIELDS,
    ensure_self_or_admin,
    is_admin,
    strip_admin_only,
)
from taskboard.repository import (
    find_role_by_name,
    get_role,
    get_user,
    get_user_by_email,
    list_users,
    soft_delete,
)
from taskboard.responses import envelope
from taskboard.schemas import IdRequest, UserLogin, UserRegister, UserUpdate
from taskboard.security import authenticate, hash_password, issue_or_reuse_token
from taskboard.uploads import store_inline_files
from taskboard.utils import OBJECT_ID_PATTERN, get_asset_url
from taskboard.views import user_view

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGE_FIELDS = ("profile_picture",)


def _default_role_id(db: Session, settings: Settings) -> str:
    if settings.default_role_id:
        return settings.default_role_id
    role = find_role_by_name(db, "User")
    if role is None:
        raise NotFound("Default role is not configured")
    return role.id


def _commit_user(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Two writers can both pass the email pre-check; the unique index decides.
        raise Conflict("Email already exists") from exc


# -------------------------
# REGISTER / LOGIN
# -------------------------
@router.post("/register")
def register_user(
    payload: UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    data = payload.model_dump()
    email = data["email"].strip().lower()

    role_id = data["role"] or _default_role_id(db, settings)
    if get_role(db, role_id) is None:
        raise NotFound("Role not found")

    if get_user_by_email(db, email, include_deleted=True) is not None:
        raise Conflict("Email already exists")

    data = store_inline_files(data, IMAGE_FIELDS, settings.upload_dir, folder="users")

    user = User(
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=email,
        mobile=data["mobile"],
        password=hash_password(data["password"]),
        profile_picture=data["profile_picture"],
        role_id=role_id,
    )
    db.add(user)
    _commit_user(db)
    logger.info("Registered user %s", user.id)

    return envelope(
        "User created successfully",
        user_view(get_user(db, user.id, joined=True), settings.asset_base_url),
        status_code=201,
    )


@router.post("/login")
def login(
    payload: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticate(db, payload.email, payload.password)
    token, _ = issue_or_reuse_token(db, user, settings)

    user = get_user(db, user.id, joined=True)
    return envelope(
        "Login successful",
        {"token": token, "user": user_view(user, settings.asset_base_url)},
    )


# -------------------------
# USERS
# -------------------------
@router.get("/getall")
def get_all_users(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    only_id = None if is_admin(current_user) else current_user.id
    users = list_users(db, only_id=only_id)

    return envelope(
        "Users fetched successfully" if users else "No users found",
        [user_view(u, settings.asset_base_url) for u in users],
    )


@router.get("/get/{user_id}")
def get_user_by_id(
    user_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    user = get_user(db, user_id, joined=True)
    if user is None:
        raise NotFound("User not found")

    ensure_self_or_admin(current_user, user.id, "Forbidden: You can only access your own profile")

    return envelope("User fetched successfully", user_view(user, settings.asset_base_url))


@router.put("/update")
def update_user(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    user = get_user(db, payload.id, joined=True)
    if user is None:
        raise NotFound("User not found or has been deleted")

    ensure_self_or_admin(current_user, user.id, "You are not authorized to update this user")

    changes = payload.model_dump(exclude_unset=True, exclude={"id"})
    if "role" in changes:
        changes["role_id"] = changes.pop("role")
    changes = strip_admin_only(current_user, changes, ADMIN_ONLY_USER_FIELDS)
    # Columns that cannot be cleared.
    changes = {
        key: value
        for key, value in changes.items()
        if value is not None or key in ("mobile", "profile_picture")
    }

    if "role_id" in changes and get_role(db, changes["role_id"]) is None:
        raise NotFound("Role not found")

    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
        other = get_user_by_email(db, changes["email"], include_deleted=True)
        if other is not None and other.id != user.id:
            raise Conflict("Email already exists")

    if "password" in changes:
        changes["password"] = hash_password(changes["password"])

    if "profile_picture" in changes:
        picture = changes["profile_picture"]
        if not picture or picture == get_asset_url(settings.asset_base_url, user.profile_picture):
            del changes["profile_picture"]
        else:
            changes = store_inline_files(changes, IMAGE_FIELDS, settings.upload_dir, folder="users")

    for key, value in changes.items():
        setattr(user, key, value)
    _commit_user(db)

    return envelope(
        "User updated successfully",
        user_view(get_user(db, user.id, joined=True), settings.asset_base_url),
    )


@router.delete("/delete")
def delete_user(
    payload: IdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = get_user(db, payload.id)
    if user is None:
        raise NotFound("User not found or already deleted")

    ensure_self_or_admin(current_user, user.id, "You are not authorized to delete this user")

    soft_delete(db, user)
    return envelope("User deleted successfully")
