import structlog
from sqlalchemy.exc import IntegrityError

from ...domain.errors import DuplicateKey, NotFound
from ...domain.policy import Action, require
from ...infrastructure.repositories import GroupRepository, MembershipRepository, UserRepository

logger = structlog.get_logger()

ALREADY_MEMBER = "Already a member of this group"

class JoinGroup:
    def __init__(self, users: UserRepository, groups: GroupRepository,
                 memberships: MembershipRepository):
        self.users = users
        self.groups = groups
        self.memberships = memberships

    def execute(self, user_id: int, group_id: int) -> None:
        actor = self.users.get_actor(user_id)
        require(actor, Action.JOIN_GROUP, message="Only students can join groups")

        if self.groups.get(group_id) is None:
            raise NotFound("Group not found")
        if self.memberships.is_member(group_id, actor.id):
            raise DuplicateKey(ALREADY_MEMBER)

        # уникальный индекс (group_id, student_id) решает гонку двух одновременных join
        try:
            self.memberships.add(group_id, actor.id)
        except IntegrityError as e:
            raise DuplicateKey(ALREADY_MEMBER) from e
        logger.info("group_joined", group_id=group_id, student_id=actor.id)
