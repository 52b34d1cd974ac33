"""Project, task and dependency data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..estimation import Estimate, estimate


class TaskStatus(str, Enum):
    """Task progress status."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


@dataclass
class Project:
    """Container for a set of tasks; the unit of acyclicity checking."""

    project_id: str
    name: str
    description: str = ""
    start_date: Optional[datetime] = None


@dataclass
class Task:
    """Represents a task with a three-point duration estimate in hours."""

    task_id: str
    project_id: str
    name: str
    optimistic_hours: float
    most_likely_hours: float
    pessimistic_hours: float
    priority: int = 1
    start_date: Optional[datetime] = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    description: str = ""
    percent_complete: float = 0.0

    @property
    def estimate(self) -> Estimate:
        """PERT statistics, recomputed from the current durations."""
        return estimate(self.optimistic_hours, self.most_likely_hours, self.pessimistic_hours)

    @property
    def expected_hours(self) -> float:
        return self.estimate.expected

    @property
    def variance(self) -> float:
        return self.estimate.variance

    def to_dict(self) -> dict:
        """Convert task to dictionary for JSON export."""
        return {
            'task_id': self.task_id,
            'project_id': self.project_id,
            'name': self.name,
            'optimistic_hours': self.optimistic_hours,
            'most_likely_hours': self.most_likely_hours,
            'pessimistic_hours': self.pessimistic_hours,
            'priority': self.priority,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'status': self.status.value,
            'description': self.description,
            'percent_complete': self.percent_complete,
        }


@dataclass(frozen=True)
class Dependency:
    """Edge meaning task_id cannot start before depends_on finishes."""

    task_id: str
    depends_on: str


def new_id() -> str:
    """Generate an opaque identifier."""
    return uuid4().hex
