from dataclasses import dataclass
from typing import Any

@dataclass
class GroupPage:
    groups: list[dict[str, Any]]
    total: int

@dataclass
class GroupDetailView:
    group: dict[str, Any]
    assignments: list[dict[str, Any]]
    # only the owning teacher gets the roster
    students: list[dict[str, Any]] | None = None
