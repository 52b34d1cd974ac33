"""Data models."""

from .assignment import TaskAssignment, User, UserRole
from .schedule import ScheduleResult, TaskSchedule
from .task import Dependency, Project, Task, TaskStatus

__all__ = [
    'Dependency',
    'Project',
    'ScheduleResult',
    'Task',
    'TaskAssignment',
    'TaskSchedule',
    'TaskStatus',
    'User',
    'UserRole',
]
