from ...domain.entities import TEACHER, completion_rate
from ...domain.errors import NotFound
from ...infrastructure.repositories import GroupRepository, UserRepository

class ListMyGroups:
    def __init__(self, users: UserRepository, groups: GroupRepository):
        self.users = users
        self.groups = groups

    def execute(self, user_id: int) -> list[dict]:
        actor = self.users.get_actor(user_id)
        if actor is None:
            raise NotFound("User not found")

        if actor.role == TEACHER:
            return self.groups.list_taught_by(actor.id)

        rows = self.groups.list_joined_by(actor.id)
        for row in rows:
            row["completion_rate"] = completion_rate(row["completed_assignments"], row["assignment_count"])
        return rows
