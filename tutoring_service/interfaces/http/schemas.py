from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["teacher", "student"]

# BIGINT: ids and offsets above this would overflow the driver
DB_INT_MAX = 2**63 - 1

# --- users

class RegisterReq(BaseModel):
    email: EmailStr
    username: str = Field(max_length=50)
    password: str = Field(max_length=128)
    name: str | None = Field(default=None, max_length=100)
    role: Role

class LoginReq(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    email: EmailStr
    username: str
    name: str | None = None
    role: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)

class UserResult(BaseModel):
    user: UserOut

class UserResp(BaseModel):
    success: bool = True
    result: UserResult

class LoginResult(BaseModel):
    user: UserOut
    user_id: int
    role: str
    access_token: str
    token_type: str = "bearer"

class LoginResp(BaseModel):
    success: bool = True
    result: LoginResult

# --- groups

class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    user_id: int | None = Field(default=None, le=DB_INT_MAX)

class GroupOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    teacher_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)

class GroupResult(BaseModel):
    group: GroupOut

class GroupResp(BaseModel):
    success: bool = True
    result: GroupResult

class GroupSummary(GroupOut):
    teacher_name: str | None = None
    student_count: int = 0
    assignment_count: int = 0
    # present only in the views that compute them
    is_member: bool | None = None
    completed_assignments: int | None = None
    completion_rate: float | None = None

class GroupListResult(BaseModel):
    groups: list[GroupSummary]
    total: int

class GroupListResp(BaseModel):
    success: bool = True
    result: GroupListResult

class MyGroupsResult(BaseModel):
    groups: list[GroupSummary]

class MyGroupsResp(BaseModel):
    success: bool = True
    result: MyGroupsResult

class AssignmentOut(BaseModel):
    id: int
    group_id: int
    title: str
    description: str | None = None
    due_date: datetime | None = None
    created_at: datetime | None = None
    completed_students: int | None = None
    total_students: int | None = None
    completion_rate: float | None = None
    is_completed: bool | None = None

class StudentProgress(BaseModel):
    id: int
    email: EmailStr
    username: str
    name: str | None = None
    joined_at: datetime | None = None
    completed_assignments: int
    total_assignments: int
    completion_rate: float

class GroupDetailResult(BaseModel):
    group: GroupSummary
    students: list[StudentProgress] | None = None
    assignments: list[AssignmentOut]

class GroupDetailResp(BaseModel):
    success: bool = True
    result: GroupDetailResult

class MessageResp(BaseModel):
    success: bool = True
    message: str