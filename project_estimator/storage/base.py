"""Base repository interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.assignment import TaskAssignment, User
from ..models.task import Dependency, Project, Task


@dataclass
class ProjectData:
    """Everything stored for one project's dependency graph."""

    project: Project
    tasks: List[Task] = field(default_factory=list)
    edges: List[Dependency] = field(default_factory=list)


class Repository(ABC):
    """Abstract storage for projects, tasks, edges and assignments.

    Implementations enforce the project invariants at commit time, the way a
    database enforces foreign keys and unique indexes. Separate sessions on
    the same project each hold their own in-memory graph, so storage is the
    one place where their writes meet.
    """

    @abstractmethod
    def load_project(self, project_id: str) -> ProjectData:
        """Load a project with its tasks and edges."""
        pass

    @abstractmethod
    def load_assignments(self, project_id: str) -> List[TaskAssignment]:
        """Load all assignments on tasks of a project."""
        pass

    @abstractmethod
    def save_project(self, project: Project) -> None:
        pass

    @abstractmethod
    def save_task(self, task: Task) -> None:
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Delete a task and its assignments.

        Raises:
            HasDependentsError: If a stored edge still depends on the task
        """
        pass

    @abstractmethod
    def save_edge(self, edge: Dependency) -> None:
        """Store an edge; storing an existing edge is a no-op.

        Raises:
            UnknownTaskError: If either endpoint is not stored
            CycleError: If the stored edges would form a cycle
        """
        pass

    @abstractmethod
    def delete_edge(self, edge: Dependency) -> None:
        pass

    @abstractmethod
    def save_assignment(self, assignment: TaskAssignment) -> None:
        """Insert or update an assignment.

        Raises:
            UnknownTaskError: If the task is not stored
            LeaderConflictError: If another active leader is stored for the task
        """
        pass

    @abstractmethod
    def delete_assignment(self, assignment_id: str) -> None:
        pass

    @abstractmethod
    def save_user(self, user: User) -> None:
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Delete a user and, by cascade, every assignment referencing them."""
        pass
