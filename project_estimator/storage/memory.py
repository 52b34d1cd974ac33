"""In-memory repository implementation."""

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from typing import Dict, List, Optional, Set

from ..engine.graph import find_path
from ..errors import (
    CycleError,
    HasDependentsError,
    LeaderConflictError,
    ProjectNotFoundError,
    SelfDependencyError,
    UnknownTaskError,
)
from ..models.assignment import TaskAssignment, User
from ..models.task import Dependency, Project, Task
from .base import ProjectData, Repository

logger = logging.getLogger(__name__)


class InMemoryRepository(Repository):
    """Dictionary-backed repository; stores copies, never live objects.

    Every check and the write it guards run under one lock, so concurrent
    sessions cannot commit a second active leader or a cycle.
    """

    def __init__(self):
        self.projects: Dict[str, Project] = {}
        self.tasks: Dict[str, Task] = {}
        self.edges: Set[Dependency] = set()
        self.assignments: Dict[str, TaskAssignment] = {}
        self.users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def load_project(self, project_id: str) -> ProjectData:
        with self._lock:
            project = self.projects.get(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)

            tasks = [replace(t) for t in self.tasks.values() if t.project_id == project_id]
            task_ids = {t.task_id for t in tasks}
            edges = [e for e in self.edges if e.task_id in task_ids]

        return ProjectData(
            project=replace(project),
            tasks=sorted(tasks, key=lambda t: t.task_id),
            edges=sorted(edges, key=lambda e: (e.task_id, e.depends_on)),
        )

    def load_assignments(self, project_id: str) -> List[TaskAssignment]:
        with self._lock:
            task_ids = {t.task_id for t in self.tasks.values() if t.project_id == project_id}
            return [replace(a) for a in self.assignments.values() if a.task_id in task_ids]

    def save_project(self, project: Project) -> None:
        with self._lock:
            self.projects[project.project_id] = replace(project)

    def save_task(self, task: Task) -> None:
        with self._lock:
            self.tasks[task.task_id] = replace(task)

    def delete_task(self, task_id: str) -> None:
        """Delete a task with its own edges and, by cascade, its assignments."""
        with self._lock:
            dependents = [e.task_id for e in self.edges if e.depends_on == task_id]
            if dependents:
                raise HasDependentsError(task_id, dependents)

            self.tasks.pop(task_id, None)
            self.edges = {
                e for e in self.edges if task_id not in (e.task_id, e.depends_on)
            }
            self.assignments = {
                aid: a for aid, a in self.assignments.items() if a.task_id != task_id
            }

    def save_edge(self, edge: Dependency) -> None:
        with self._lock:
            for tid in (edge.task_id, edge.depends_on):
                if tid not in self.tasks:
                    raise UnknownTaskError(tid)
            if edge.task_id == edge.depends_on:
                raise SelfDependencyError(edge.task_id)
            if edge in self.edges:
                return

            dependencies = defaultdict(set)
            for e in self.edges:
                dependencies[e.task_id].add(e.depends_on)
            path = find_path(dependencies, edge.depends_on, edge.task_id)
            if path is not None:
                logger.warning(f"Rejected stored edge {edge.task_id} -> {edge.depends_on}: cycle {path}")
                raise CycleError(path + [edge.depends_on])

            self.edges.add(edge)

    def delete_edge(self, edge: Dependency) -> None:
        with self._lock:
            self.edges.discard(edge)

    def save_assignment(self, assignment: TaskAssignment) -> None:
        with self._lock:
            if assignment.task_id not in self.tasks:
                raise UnknownTaskError(assignment.task_id)

            if assignment.is_leader and assignment.is_active:
                for other in self.assignments.values():
                    if (
                        other.assignment_id != assignment.assignment_id
                        and other.task_id == assignment.task_id
                        and other.is_leader
                        and other.is_active
                    ):
                        raise LeaderConflictError(assignment.task_id, other.user_id)

            self.assignments[assignment.assignment_id] = replace(assignment)

    def delete_assignment(self, assignment_id: str) -> None:
        with self._lock:
            self.assignments.pop(assignment_id, None)

    def save_user(self, user: User) -> None:
        with self._lock:
            self.users[user.user_id] = replace(user)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self.users.get(user_id)
            return replace(user) if user else None

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            self.users.pop(user_id, None)
            before = len(self.assignments)
            self.assignments = {
                aid: a for aid, a in self.assignments.items() if a.user_id != user_id
            }
            removed = before - len(self.assignments)

        logger.debug(f"Deleted user {user_id} and {removed} stored assignment(s)")
