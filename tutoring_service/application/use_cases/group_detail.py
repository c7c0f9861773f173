from ...domain.entities import STUDENT, TEACHER, completion_rate
from ...domain.errors import NotFound
from ...domain.policy import Action, GroupResource, require
from ...infrastructure.repositories import (
    AssignmentRepository,
    GroupRepository,
    MembershipRepository,
    UserRepository,
)
from ..dto import GroupDetailView

class GetGroupDetail:
    """Group card scoped to the caller.

    * owning teacher: assignments with completion stats plus the roster;
    * member student: assignments flagged with ``is_completed``;
    * no (known) caller: plain assignment list.

    Students outside the group and teachers who don't own it get 403.
    """

    def __init__(self, users: UserRepository, groups: GroupRepository,
                 memberships: MembershipRepository, assignments: AssignmentRepository):
        self.users = users
        self.groups = groups
        self.memberships = memberships
        self.assignments = assignments

    def execute(self, group_id: int, user_id: int | None = None) -> GroupDetailView:
        group = self.groups.get_summary(group_id)
        if group is None:
            raise NotFound("Group not found")

        actor = self.users.get_actor(user_id) if user_id is not None else None
        if actor is not None:
            is_member = actor.role == STUDENT and self.memberships.is_member(group_id, actor.id)
            resource = GroupResource(teacher_id=group["teacher_id"], actor_is_member=is_member)
            require(actor, Action.VIEW_GROUP, resource, message="Access denied")

        if actor is not None and actor.role == TEACHER:
            return self._teacher_view(group)
        if actor is not None and actor.role == STUDENT:
            assignments = self.assignments.list_for_student(group_id, actor.id)
            for a in assignments:
                a["is_completed"] = bool(a["is_completed"])
            return GroupDetailView(group=group, assignments=assignments)
        return GroupDetailView(group=group, assignments=self.assignments.list_for_group(group_id))

    def _teacher_view(self, group: dict) -> GroupDetailView:
        total_students = group["student_count"]
        total_assignments = group["assignment_count"]

        assignments = self.assignments.list_with_completions(group["id"])
        for a in assignments:
            a["total_students"] = total_students
            a["completion_rate"] = completion_rate(a["completed_students"], total_students)

        students = self.memberships.roster(group["id"])
        for s in students:
            s["total_assignments"] = total_assignments
            s["completion_rate"] = completion_rate(s["completed_assignments"], total_assignments)

        return GroupDetailView(group=group, assignments=assignments, students=students)
