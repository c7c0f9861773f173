"""Access rules for groups.

Handlers describe *who* wants to do *what* to *which* group and let
:func:`authorize` decide, instead of comparing role strings inline.
"""
from dataclasses import dataclass
from enum import Enum

from .entities import Actor, STUDENT, TEACHER
from .errors import Forbidden


class Action(str, Enum):
    CREATE_GROUP = "create_group"
    VIEW_GROUP = "view_group"
    JOIN_GROUP = "join_group"


@dataclass(frozen=True)
class GroupResource:
    teacher_id: int
    # whether the acting user already belongs to the group
    actor_is_member: bool = False


def authorize(actor: Actor | None, action: Action, resource: GroupResource | None = None) -> bool:
    if action is Action.CREATE_GROUP:
        return actor is not None and actor.role == TEACHER

    if action is Action.JOIN_GROUP:
        return actor is not None and actor.role == STUDENT

    if action is Action.VIEW_GROUP:
        if actor is None:
            # anonymous view: group and plain assignments only
            return True
        if resource is None:
            return False
        if actor.role == STUDENT:
            return resource.actor_is_member
        if actor.role == TEACHER:
            return resource.teacher_id == actor.id
        return False

    return False


def require(actor: Actor | None, action: Action, resource: GroupResource | None = None,
            message: str | None = None) -> None:
    if not authorize(actor, action, resource):
        raise Forbidden(message)
