import pytest

from taskboard.errors import Forbidden
from taskboard.models import Role, Task, User
from taskboard.policy import (
    ADMIN_ONLY_TASK_FIELDS,
    can_access_task,
    ensure_task_access,
    is_admin,
    resolve_assignee,
    strip_admin_only,
    task_scope,
)


def make_user(user_id: str, role_name: str) -> User:
    return User(id=user_id, role=Role(name=role_name))


ADMIN = make_user("a" * 24, "Admin")
OWNER = make_user("b" * 24, "User")
OTHER = make_user("c" * 24, "Manager")
TASK = Task(id="d" * 24, assignee_id=OWNER.id)


def test_only_admin_role_is_privileged():
    assert is_admin(ADMIN)
    assert not is_admin(OWNER)
    assert not is_admin(OTHER)
    assert not is_admin(User(id="e" * 24))


@pytest.mark.parametrize(
    "user, allowed",
    [(ADMIN, True), (OWNER, True), (OTHER, False)],
)
def test_task_access(user, allowed):
    assert can_access_task(user, TASK) is allowed


def test_ensure_task_access_names_the_action():
    with pytest.raises(Forbidden, match="move"):
        ensure_task_access(OTHER, TASK, "move")


def test_resolve_assignee():
    assert resolve_assignee(ADMIN, OWNER.id) == OWNER.id
    assert resolve_assignee(ADMIN, None) == ADMIN.id
    assert resolve_assignee(OWNER, OTHER.id) == OWNER.id


def test_task_scope():
    assert task_scope(ADMIN) is None
    assert task_scope(OWNER) == OWNER.id


def test_strip_admin_only():
    changes = {"title": "t", "assignee_id": OTHER.id}

    assert strip_admin_only(OWNER, changes, ADMIN_ONLY_TASK_FIELDS) == {"title": "t"}
    assert strip_admin_only(ADMIN, changes, ADMIN_ONLY_TASK_FIELDS) == changes
