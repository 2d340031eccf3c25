import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.utils import new_object_id, utcnow


class Priority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class RecordMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)


class Role(RecordMixin, Base):
    __tablename__ = "roles"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String, nullable=False)


class User(RecordMixin, Base):
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_object_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    mobile = Column(String)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)  # argon2 hash
    role_id = Column(String(24), ForeignKey("roles.id"), nullable=False)
    profile_picture = Column(String)
    token = Column(String)
    token_expires_at = Column(DateTime)

    role = relationship("Role")


class Status(RecordMixin, Base):
    __tablename__ = "statuses"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)


class Task(RecordMixin, Base):
    __tablename__ = "tasks"

    id = Column(String(24), primary_key=True, default=new_object_id)
    title = Column(String, nullable=False)
    description = Column(String)
    status_id = Column(String(24), ForeignKey("statuses.id"), nullable=False)
    assignee_id = Column(String(24), ForeignKey("users.id"))
    due_date = Column(DateTime)
    priority = Column(Enum(Priority), default=Priority.medium, nullable=False)

    status = relationship("Status")
    assignee = relationship("User")
