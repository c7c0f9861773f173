from dataclasses import dataclass
from typing import Any

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session

from ..domain.entities import Actor
from .models import (
    AssignmentCompletionORM,
    AssignmentORM,
    GroupORM,
    GroupStudentORM,
    UserORM,
)


def _save(db: Session, row):
    db.add(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return row


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> UserORM | None:
        return self.db.get(UserORM, user_id)

    def get_by_email(self, email: str) -> UserORM | None:
        return self.db.execute(select(UserORM).where(UserORM.email == email)).scalar_one_or_none()

    def exists(self, email: str, username: str) -> bool:
        q = select(UserORM.id).where((UserORM.email == email) | (UserORM.username == username))
        return self.db.execute(q.limit(1)).first() is not None

    def get_actor(self, user_id: int) -> Actor | None:
        role = self.db.execute(select(UserORM.role).where(UserORM.id == user_id)).scalar_one_or_none()
        return Actor(id=user_id, role=role) if role else None

    def create(self, email: str, username: str, password_hash: str, name: str | None, role: str) -> UserORM:
        row = UserORM(email=email, username=username, password_hash=password_hash, name=name, role=role)
        return _save(self.db, row)


@dataclass
class GroupFilter:
    """Predicate fragments for group listing; the count query reuses them verbatim."""
    teacher_id: int | None = None
    search: str | None = None

    def predicates(self) -> list:
        preds = []
        if self.teacher_id is not None:
            preds.append(GroupORM.teacher_id == self.teacher_id)
        if self.search:
            needle = self.search.lower()
            preds.append(
                func.lower(GroupORM.name).contains(needle, autoescape=True)
                | func.lower(func.coalesce(GroupORM.description, "")).contains(needle, autoescape=True)
            )
        return preds


def _student_count():
    return (
        select(func.count(GroupStudentORM.id))
        .where(GroupStudentORM.group_id == GroupORM.id)
        .correlate(GroupORM)
        .scalar_subquery()
    )


def _assignment_count():
    return (
        select(func.count(AssignmentORM.id))
        .where(AssignmentORM.group_id == GroupORM.id)
        .correlate(GroupORM)
        .scalar_subquery()
    )


def _group_summary():
    return select(
        GroupORM.id,
        GroupORM.name,
        GroupORM.description,
        GroupORM.teacher_id,
        GroupORM.created_at,
        GroupORM.updated_at,
        UserORM.name.label("teacher_name"),
        _student_count().label("student_count"),
        _assignment_count().label("assignment_count"),
    ).select_from(GroupORM).outerjoin(UserORM, GroupORM.teacher_id == UserORM.id)


def _rows(result) -> list[dict[str, Any]]:
    return [dict(r._mapping) for r in result]


class GroupRepository:
    def __init__(self, db: Session): self.db = db

    def get(self, group_id: int) -> GroupORM | None:
        return self.db.get(GroupORM, group_id)

    def create(self, name: str, description: str | None, teacher_id: int) -> GroupORM:
        return _save(self.db, GroupORM(name=name, description=description, teacher_id=teacher_id))

    def get_summary(self, group_id: int) -> dict[str, Any] | None:
        row = self.db.execute(_group_summary().where(GroupORM.id == group_id)).first()
        return dict(row._mapping) if row else None

    def list_page(self, flt: GroupFilter, limit: int, offset: int,
                  member_id: int | None = None) -> list[dict[str, Any]]:
        q = _group_summary()
        if member_id is not None:
            is_member = (
                select(GroupStudentORM.id)
                .where(GroupStudentORM.group_id == GroupORM.id,
                       GroupStudentORM.student_id == member_id)
                .correlate(GroupORM)
                .exists()
            )
            q = q.add_columns(is_member.label("is_member"))
        q = q.where(*flt.predicates()).order_by(GroupORM.id).limit(limit).offset(offset)
        return _rows(self.db.execute(q))

    def count(self, flt: GroupFilter) -> int:
        q = select(func.count(GroupORM.id)).where(*flt.predicates())
        return self.db.execute(q).scalar_one()

    def list_taught_by(self, teacher_id: int) -> list[dict[str, Any]]:
        q = (_group_summary()
             .where(GroupORM.teacher_id == teacher_id)
             .order_by(GroupORM.created_at.desc(), GroupORM.id.desc()))
        return _rows(self.db.execute(q))

    def list_joined_by(self, student_id: int) -> list[dict[str, Any]]:
        completed = (
            select(func.count(AssignmentCompletionORM.id))
            .join(AssignmentORM, AssignmentORM.id == AssignmentCompletionORM.assignment_id)
            .where(AssignmentORM.group_id == GroupORM.id,
                   AssignmentCompletionORM.student_id == student_id)
            .correlate(GroupORM)
            .scalar_subquery()
        )
        q = (_group_summary()
             .add_columns(completed.label("completed_assignments"))
             .join(GroupStudentORM, GroupStudentORM.group_id == GroupORM.id)
             .where(GroupStudentORM.student_id == student_id)
             .order_by(GroupStudentORM.joined_at.desc(), GroupStudentORM.id.desc()))
        return _rows(self.db.execute(q))


class MembershipRepository:
    def __init__(self, db: Session): self.db = db

    def is_member(self, group_id: int, student_id: int) -> bool:
        q = select(GroupStudentORM.id).where(
            GroupStudentORM.group_id == group_id, GroupStudentORM.student_id == student_id
        )
        return self.db.execute(q).first() is not None

    def add(self, group_id: int, student_id: int) -> GroupStudentORM:
        """Insert the membership row; raises IntegrityError when it already exists."""
        return _save(self.db, GroupStudentORM(group_id=group_id, student_id=student_id))

    def roster(self, group_id: int) -> list[dict[str, Any]]:
        """Members of the group with how many of *this group's* assignments each completed."""
        completed = (
            select(func.count(distinct(AssignmentCompletionORM.assignment_id)))
            .join(AssignmentORM, AssignmentORM.id == AssignmentCompletionORM.assignment_id)
            .where(AssignmentORM.group_id == group_id,
                   AssignmentCompletionORM.student_id == UserORM.id)
            .correlate(UserORM)
            .scalar_subquery()
        )
        q = (select(UserORM.id, UserORM.email, UserORM.username, UserORM.name,
                    UserORM.role, UserORM.created_at, UserORM.updated_at,
                    GroupStudentORM.joined_at,
                    completed.label("completed_assignments"))
             .select_from(UserORM)
             .join(GroupStudentORM, GroupStudentORM.student_id == UserORM.id)
             .where(GroupStudentORM.group_id == group_id)
             .order_by(GroupStudentORM.joined_at, UserORM.id))
        return _rows(self.db.execute(q))


class AssignmentRepository:
    def __init__(self, db: Session): self.db = db

    def _base(self, group_id: int):
        return (select(AssignmentORM.id, AssignmentORM.group_id, AssignmentORM.title,
                       AssignmentORM.description, AssignmentORM.due_date,
                       AssignmentORM.created_at)
                .where(AssignmentORM.group_id == group_id)
                .order_by(AssignmentORM.created_at.desc(), AssignmentORM.id.desc()))

    def list_for_group(self, group_id: int) -> list[dict[str, Any]]:
        return _rows(self.db.execute(self._base(group_id)))

    def list_with_completions(self, group_id: int) -> list[dict[str, Any]]:
        """Assignments with the number of distinct current members who completed each."""
        members = select(GroupStudentORM.student_id).where(GroupStudentORM.group_id == group_id)
        completed = (
            select(func.count(distinct(AssignmentCompletionORM.student_id)))
            .where(AssignmentCompletionORM.assignment_id == AssignmentORM.id,
                   AssignmentCompletionORM.student_id.in_(members))
            .correlate(AssignmentORM)
            .scalar_subquery()
        )
        q = self._base(group_id).add_columns(completed.label("completed_students"))
        return _rows(self.db.execute(q))

    def list_for_student(self, group_id: int, student_id: int) -> list[dict[str, Any]]:
        done = (
            select(AssignmentCompletionORM.id)
            .where(AssignmentCompletionORM.assignment_id == AssignmentORM.id,
                   AssignmentCompletionORM.student_id == student_id)
            .correlate(AssignmentORM)
            .exists()
        )
        q = self._base(group_id).add_columns(done.label("is_completed"))
        return _rows(self.db.execute(q))
