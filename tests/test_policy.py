import pytest

from tutoring_service.domain.entities import Actor, completion_rate
from tutoring_service.domain.errors import Forbidden
from tutoring_service.domain.policy import Action, GroupResource, authorize, require

teacher = Actor(id=1, role="teacher")
other_teacher = Actor(id=2, role="teacher")
student = Actor(id=3, role="student")


@pytest.mark.parametrize("actor, allowed", [
    (teacher, True),
    (student, False),
    (None, False),
])
def test_create_group_only_teachers(actor, allowed):
    assert authorize(actor, Action.CREATE_GROUP) is allowed


@pytest.mark.parametrize("actor, allowed", [
    (student, True),
    (teacher, False),
    (None, False),
])
def test_join_group_only_students(actor, allowed):
    assert authorize(actor, Action.JOIN_GROUP) is allowed


def test_view_group_rules():
    owned = GroupResource(teacher_id=teacher.id)
    assert authorize(None, Action.VIEW_GROUP, owned)
    assert authorize(teacher, Action.VIEW_GROUP, owned)
    assert not authorize(other_teacher, Action.VIEW_GROUP, owned)
    assert not authorize(student, Action.VIEW_GROUP, owned)
    assert authorize(student, Action.VIEW_GROUP, GroupResource(teacher_id=teacher.id, actor_is_member=True))


def test_view_group_unknown_role_denied():
    assert not authorize(Actor(id=9, role="admin"), Action.VIEW_GROUP, GroupResource(teacher_id=9))


def test_require_raises_forbidden_with_message():
    with pytest.raises(Forbidden) as exc:
        require(student, Action.CREATE_GROUP, message="Only teachers can create groups")
    assert exc.value.status_code == 403
    assert exc.value.message == "Only teachers can create groups"


@pytest.mark.parametrize("done, total, expected", [
    (3, 4, 75.0),
    (0, 4, 0.0),
    (2, 2, 100.0),
    (0, 0, 0.0),
    (5, 0, 0.0),
])
def test_completion_rate(done, total, expected):
    assert completion_rate(done, total) == expected
