"""Scheduling engine components."""

from .assignments import AssignmentManager
from .calendar import WorkingCalendar
from .critical_path import CriticalPathEngine
from .graph import DependencyGraph, GraphSnapshot, topological_sort
from .session import ProjectSession

__all__ = [
    'AssignmentManager',
    'CriticalPathEngine',
    'DependencyGraph',
    'GraphSnapshot',
    'ProjectSession',
    'WorkingCalendar',
    'topological_sort',
]
