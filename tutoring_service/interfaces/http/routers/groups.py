from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ....application.use_cases.create_group import CreateGroup
from ....application.use_cases.group_detail import GetGroupDetail
from ....application.use_cases.join_group import JoinGroup
from ....application.use_cases.list_groups import ListGroups
from ....application.use_cases.list_my_groups import ListMyGroups
from ....domain.errors import ValidationError
from ....infrastructure.db import get_db
from ....infrastructure.metrics import group_joins_total, groups_created_total
from ....infrastructure.repositories import (
    AssignmentRepository,
    GroupRepository,
    MembershipRepository,
    UserRepository,
)
from ..authz import get_user_id
from ..errors import persistence_guard
from ..schemas import (
    DB_INT_MAX,
    AssignmentOut,
    GroupCreate,
    GroupDetailResp,
    GroupDetailResult,
    GroupListResp,
    GroupListResult,
    GroupOut,
    GroupResp,
    GroupResult,
    GroupSummary,
    MessageResp,
    MyGroupsResp,
    MyGroupsResult,
    StudentProgress,
)

router = APIRouter(prefix="/api/groups", tags=["groups"])

def _create_group_impl(payload: GroupCreate, path_user_id: int | None, db: Session) -> GroupResp:
    user_id = payload.user_id if payload.user_id is not None else path_user_id
    if user_id is None:
        raise ValidationError("user_id is required")
    uc = CreateGroup(users=UserRepository(db), groups=GroupRepository(db))
    with persistence_guard("Failed to create group", "group_create"):
        group = uc.execute(user_id, payload.name, payload.description)
    groups_created_total.inc()
    return GroupResp(result=GroupResult(group=GroupOut.model_validate(group)))

@router.post("", response_model=GroupResp, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate, db: Session = Depends(get_db)):
    return _create_group_impl(payload, None, db)

@router.post("/{user_id}", response_model=GroupResp, status_code=status.HTTP_201_CREATED)
def create_group_for_user(payload: GroupCreate, user_id: int = Path(le=DB_INT_MAX),
                          db: Session = Depends(get_db)):
    return _create_group_impl(payload, user_id, db)

@router.get("", response_model=GroupListResp, response_model_exclude_unset=True)
def list_groups(db: Session = Depends(get_db),
                page: int = Query(0, ge=0, le=DB_INT_MAX // 100),
                limit: int = Query(10, ge=1, le=100),
                search: str | None = Query(None, max_length=100),
                user_id: int | None = Query(None, le=DB_INT_MAX)):
    uc = ListGroups(users=UserRepository(db), groups=GroupRepository(db))
    with persistence_guard("Failed to fetch groups", "group_list"):
        listing = uc.execute(page=page, limit=limit, search=search, user_id=user_id)
    return GroupListResp(success=True, result=GroupListResult(
        groups=[GroupSummary.model_validate(g) for g in listing.groups],
        total=listing.total,
    ))

# /my/{user_id} объявлен до /{group_id}
@router.get("/my/{user_id}", response_model=MyGroupsResp, response_model_exclude_unset=True)
def list_my_groups(user_id: int = Path(le=DB_INT_MAX), db: Session = Depends(get_db)):
    uc = ListMyGroups(users=UserRepository(db), groups=GroupRepository(db))
    with persistence_guard("Failed to fetch my groups", "group_list_mine"):
        rows = uc.execute(user_id)
    return MyGroupsResp(success=True, result=MyGroupsResult(
        groups=[GroupSummary.model_validate(g) for g in rows],
    ))

@router.get("/{group_id}", response_model=GroupDetailResp, response_model_exclude_unset=True)
def group_detail(group_id: int = Path(le=DB_INT_MAX),
                 user_id: int | None = Query(None, le=DB_INT_MAX),
                 db: Session = Depends(get_db)):
    uc = GetGroupDetail(
        users=UserRepository(db),
        groups=GroupRepository(db),
        memberships=MembershipRepository(db),
        assignments=AssignmentRepository(db),
    )
    with persistence_guard("Failed to fetch group details", "group_detail"):
        view = uc.execute(group_id, user_id)

    result = GroupDetailResult(
        group=GroupSummary.model_validate(view.group),
        assignments=[AssignmentOut.model_validate(a) for a in view.assignments],
    )
    if view.students is not None:
        result.students = [StudentProgress.model_validate(s) for s in view.students]
    return GroupDetailResp(success=True, result=result)

@router.post("/{group_id}/join", response_model=MessageResp)
def join_group(group_id: int = Path(le=DB_INT_MAX), user_id: int = Depends(get_user_id),
               db: Session = Depends(get_db)):
    uc = JoinGroup(
        users=UserRepository(db),
        groups=GroupRepository(db),
        memberships=MembershipRepository(db),
    )
    with persistence_guard("Failed to join group", "group_join"):
        uc.execute(user_id, group_id)
    group_joins_total.inc()
    return MessageResp(message="Successfully joined the group")
