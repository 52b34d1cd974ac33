"""Error types raised by the scheduling engine."""

from typing import Any, Iterable


class ProjectEstimatorError(Exception):
    """Base class for all engine errors."""


class ValidationError(ProjectEstimatorError):
    """Input values violate a documented constraint."""


class StructuralError(ProjectEstimatorError):
    """Operation would break the project structure; nothing was changed."""


class ConflictError(ProjectEstimatorError):
    """Operation conflicts with concurrent or existing state."""


class ConsistencyError(ProjectEstimatorError):
    """Internal invariant breach; the operation was aborted."""


class InvalidDurationError(ValidationError):
    """Three-point estimate is non-positive or not weakly increasing."""

    def __init__(self, optimistic: float, most_likely: float, pessimistic: float, reason: str):
        self.optimistic = optimistic
        self.most_likely = most_likely
        self.pessimistic = pessimistic
        self.reason = reason
        super().__init__(
            f"Invalid duration ({optimistic}, {most_likely}, {pessimistic}): {reason}"
        )


class InvalidAllocationError(ValidationError):
    """Allocation percentage outside [0, 100]."""

    def __init__(self, allocation_percentage: Any):
        self.allocation_percentage = allocation_percentage
        super().__init__(
            f"Allocation percentage must be between 0 and 100, got {allocation_percentage}"
        )


class InvalidProgressError(ValidationError):
    """Percent complete outside [0, 100]."""

    def __init__(self, task_id: str, percent_complete: Any):
        self.task_id = task_id
        self.percent_complete = percent_complete
        super().__init__(
            f"Percent complete of task {task_id} must be between 0 and 100, got {percent_complete}"
        )


class InvalidNoteError(ValidationError):
    """Assignment note exceeds the configured length."""

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(f"Note is {length} characters long, maximum is {max_length}")


class DuplicateTaskError(StructuralError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task already exists: {task_id}")


class UnknownTaskError(StructuralError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class SelfDependencyError(StructuralError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task cannot depend on itself: {task_id}")


class CycleError(StructuralError):
    """Dependency edges would form (or already form) a cycle."""

    def __init__(self, task_ids: Iterable[str], message: str = None):
        self.task_ids = list(task_ids)
        if message is None:
            message = f"Dependency cycle through tasks: {' -> '.join(self.task_ids)}"
        super().__init__(message)


class HasDependentsError(StructuralError):
    def __init__(self, task_id: str, dependents: Iterable[str]):
        self.task_id = task_id
        self.dependents = sorted(dependents)
        super().__init__(
            f"Task {task_id} cannot be removed, still required by: {', '.join(self.dependents)}"
        )


class AssignmentNotFoundError(StructuralError):
    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment not found: {assignment_id}")


class ProjectNotFoundError(StructuralError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class LeaderConflictError(ConflictError):
    """Task already has an active leader."""

    def __init__(self, task_id: str, leader_id: str):
        self.task_id = task_id
        self.leader_id = leader_id
        super().__init__(f"Task {task_id} already has an active leader: {leader_id}")


class EmptyProjectError(ConsistencyError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project {project_id} has no tasks to schedule")


class InternalCycleError(CycleError, ConsistencyError):
    """A graph that should be acyclic turned out to contain a cycle."""
