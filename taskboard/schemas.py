"""Request bodies. Field names follow the public JSON API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator

from taskboard.models import Priority
from taskboard.utils import INT64_MAX, INT64_MIN, OBJECT_ID_PATTERN

ObjectId = Annotated[str, StringConstraints(pattern=OBJECT_ID_PATTERN)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=20)]
Mobile = Annotated[str, StringConstraints(pattern=r"^[0-9]{10}$")]
Password = Annotated[str, StringConstraints(min_length=6, max_length=32)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Order = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]

MAX_PAGE = 1_000_000
MAX_PAGE_SIZE = 100


class IdRequest(BaseModel):
    id: ObjectId


# -------------------------
# USERS
# -------------------------
class UserRegister(BaseModel):
    first_name: PersonName
    last_name: PersonName
    mobile: Optional[Mobile] = None
    email: EmailStr
    password: Password
    role: Optional[ObjectId] = None
    profile_picture: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: Password


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: ObjectId
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    mobile: Optional[Mobile] = None
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    role: Optional[ObjectId] = None
    profile_picture: Optional[str] = None

    @model_validator(mode="after")
    def _has_changes(self) -> "UserUpdate":
        if not self.model_fields_set - {"id"}:
            raise ValueError("At least one updatable field (besides id) must be provided")
        return self


# -------------------------
# ROLES
# -------------------------
class RoleCreate(BaseModel):
    name: Name


class RoleUpdate(BaseModel):
    id: ObjectId
    name: Optional[Name] = None


# -------------------------
# STATUSES
# -------------------------
class StatusCreate(BaseModel):
    name: Name
    order: Optional[Order] = None


class StatusUpdate(BaseModel):
    id: ObjectId
    name: Optional[Name] = None
    order: Optional[Order] = None


# -------------------------
# TASKS
# -------------------------
class TaskCreate(BaseModel):
    title: Name
    description: Optional[str] = None
    status: ObjectId
    assignee: Optional[ObjectId] = None
    dueDate: Optional[datetime] = None
    priority: Priority = Priority.medium


class TaskUpdate(BaseModel):
    id: ObjectId
    title: Optional[Name] = None
    description: Optional[str] = None
    status: Optional[ObjectId] = None
    assignee: Optional[ObjectId] = None
    dueDate: Optional[datetime] = None
    priority: Optional[Priority] = None

    def changes(self) -> dict[str, Any]:
        """Column values for the fields the client actually sent."""
        columns = {
            "title": "title",
            "description": "description",
            "status": "status_id",
            "assignee": "assignee_id",
            "dueDate": "due_date",
            "priority": "priority",
        }
        required = {"title", "status", "priority"}

        out: dict[str, Any] = {}
        for name in self.model_fields_set - {"id"}:
            value = getattr(self, name)
            if value is None and name in required:
                continue
            out[columns[name]] = value
        return out


class TaskMove(BaseModel):
    id: ObjectId
    status: ObjectId


class TaskPageRequest(BaseModel):
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    pageSize: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)
    search: Optional[str] = None
    filter: Optional[dict[str, Any]] = None
    sort: Optional[dict[str, Any]] = None
