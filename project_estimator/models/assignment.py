"""Personnel and task assignment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """Role a person plays in the project."""

    DEVELOPER = "developer"
    DESIGNER = "designer"
    PROJECT_MANAGER = "project_manager"
    QUALITY_ASSURANCE = "quality_assurance"
    DEVOPS = "devops"
    ANALYST = "analyst"
    ARCHITECT = "architect"


@dataclass
class User:
    """A person who can be assigned to tasks."""

    user_id: str
    name: str
    role: UserRole = UserRole.DEVELOPER
    email: str = ""
    department: str = ""
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class TaskAssignment:
    """Links a user to a task, optionally as the task leader."""

    assignment_id: str
    user_id: str
    task_id: str
    is_leader: bool = False
    allocation_percentage: int = 100
    assigned_at: datetime = field(default_factory=datetime.now)
    unassigned_at: Optional[datetime] = None
    notes: str = ""

    @property
    def is_active(self) -> bool:
        return self.unassigned_at is None

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        """Time between assignment and unassignment (or now, while active)."""
        end = self.unassigned_at or now or datetime.now()
        return end - self.assigned_at

    def to_dict(self) -> dict:
        """Convert assignment to dictionary for JSON export."""
        return {
            'assignment_id': self.assignment_id,
            'user_id': self.user_id,
            'task_id': self.task_id,
            'is_leader': self.is_leader,
            'allocation_percentage': self.allocation_percentage,
            'assigned_at': self.assigned_at.isoformat(),
            'unassigned_at': self.unassigned_at.isoformat() if self.unassigned_at else None,
            'notes': self.notes,
        }
