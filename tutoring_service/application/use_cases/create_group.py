import structlog

from ...domain.policy import Action, require
from ...infrastructure.models import GroupORM
from ...infrastructure.repositories import GroupRepository, UserRepository

logger = structlog.get_logger()

class CreateGroup:
    def __init__(self, users: UserRepository, groups: GroupRepository):
        self.users = users
        self.groups = groups

    def execute(self, user_id: int, name: str, description: str | None) -> GroupORM:
        actor = self.users.get_actor(user_id)
        require(actor, Action.CREATE_GROUP, message="Only teachers can create groups")
        group = self.groups.create(name, description, teacher_id=actor.id)
        logger.info("group_created", group_id=group.id, teacher_id=actor.id)
        return group
