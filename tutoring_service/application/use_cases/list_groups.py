from ...domain.entities import STUDENT, TEACHER
from ...infrastructure.repositories import GroupFilter, GroupRepository, UserRepository
from ..dto import GroupPage

class ListGroups:
    """Paginated group catalogue.

    Teachers only see the groups they run; students see everything, each row
    flagged with ``is_member``; anonymous callers (or unknown ids) see
    everything unflagged. ``total`` is computed with the same filter.
    """

    def __init__(self, users: UserRepository, groups: GroupRepository):
        self.users = users
        self.groups = groups

    def execute(self, page: int, limit: int, search: str | None = None,
                user_id: int | None = None) -> GroupPage:
        actor = self.users.get_actor(user_id) if user_id is not None else None
        flt = GroupFilter(search=search)
        member_id = None
        if actor is not None and actor.role == TEACHER:
            flt.teacher_id = actor.id
        elif actor is not None and actor.role == STUDENT:
            member_id = actor.id

        rows = self.groups.list_page(flt, limit=limit, offset=page * limit, member_id=member_id)
        total = self.groups.count(flt)
        return GroupPage(groups=rows, total=total)
