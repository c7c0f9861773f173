from dataclasses import dataclass

TEACHER = "teacher"
STUDENT = "student"
ROLES = (TEACHER, STUDENT)


@dataclass(frozen=True)
class Actor:
    """Who is making the request, as far as authorization cares."""
    id: int
    role: str


def completion_rate(completed: int, total: int) -> float:
    """Percentage of ``total`` that is ``completed``; 0 when there is nothing to complete."""
    if not total:
        return 0.0
    return completed / total * 100
