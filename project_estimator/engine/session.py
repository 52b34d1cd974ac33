"""Project session: graph, assignments and repository wired together."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..errors import ProjectEstimatorError
from ..models.schedule import ScheduleResult
from ..models.task import Dependency, Task, TaskStatus
from ..storage.base import Repository
from .assignments import AssignmentManager
from .calendar import WorkingCalendar
from .critical_path import CriticalPathEngine
from .graph import DependencyGraph

logger = logging.getLogger(__name__)


class ProjectSession:
    """Loads one project and applies mutations write-through.

    Each mutation is applied to the in-memory graph first (under the graph's
    lock) and written to the repository only after it succeeded, so a
    rejected change never reaches storage and no I/O happens under the lock.
    The repository re-checks the same invariants on commit. When it rejects
    a change made from a stale view, the graph change is undone and the
    error propagates.
    """

    def __init__(self, repository: Repository, project_id: str, config: Optional[dict] = None):
        """Load the project's tasks, edges and assignments from the repository."""
        self.repository = repository
        self.config = config or {}

        data = repository.load_project(project_id)
        self.project = data.project
        self.graph = DependencyGraph(project_id)
        for task in data.tasks:
            self.graph.add_task(task)
        for edge in data.edges:
            self.graph.add_dependency(edge.task_id, edge.depends_on)

        self.assignments = AssignmentManager(self.config, repository=repository)
        self.assignments.load(repository.load_assignments(project_id))
        self.engine = CriticalPathEngine(self.config)
        self.calendar = WorkingCalendar(self.config.get('calendar', {}))

        logger.info(
            f"Loaded project {project_id}: {len(data.tasks)} task(s), {len(data.edges)} edge(s)"
        )

    @property
    def project_id(self) -> str:
        return self.project.project_id

    def add_task(self, task: Task) -> Task:
        if not task.project_id:
            task = replace(task, project_id=self.project_id)
        added = self.graph.add_task(task)
        self.repository.save_task(added)
        return added

    def add_dependency(self, task_id: str, depends_on: str) -> bool:
        added = self.graph.add_dependency(task_id, depends_on)
        if added:
            try:
                self.repository.save_edge(Dependency(task_id, depends_on))
            except ProjectEstimatorError:
                self.graph.remove_dependency(task_id, depends_on)
                logger.warning(f"Storage rejected dependency {task_id} -> {depends_on}; rolled back")
                raise
        return added

    def remove_dependency(self, task_id: str, depends_on: str) -> bool:
        removed = self.graph.remove_dependency(task_id, depends_on)
        if removed:
            self.repository.delete_edge(Dependency(task_id, depends_on))
        return removed

    def remove_task(self, task_id: str) -> Task:
        """Remove a task nothing depends on; its assignments are deleted too."""
        depends_on = self.graph.dependencies_of(task_id)
        removed = self.graph.remove_task(task_id)
        try:
            self.repository.delete_task(task_id)
        except ProjectEstimatorError:
            self.graph.add_task(removed)
            for dep_id in sorted(depends_on):
                self.graph.add_dependency(task_id, dep_id)
            logger.warning(f"Storage rejected removal of task {task_id}; rolled back")
            raise
        self.assignments.delete_task(task_id)
        return removed

    def update_estimate(
        self,
        task_id: str,
        optimistic: float,
        most_likely: float,
        pessimistic: float,
    ) -> Task:
        updated = self.graph.update_estimate(task_id, optimistic, most_likely, pessimistic)
        self.repository.save_task(updated)
        return updated

    def set_status(self, task_id: str, status: TaskStatus) -> Task:
        updated = self.graph.set_status(task_id, status)
        self.repository.save_task(updated)
        return updated

    def set_progress(self, task_id: str, percent_complete: float) -> Task:
        updated = self.graph.set_progress(task_id, percent_complete)
        self.repository.save_task(updated)
        return updated

    def delete_user(self, user_id: str) -> int:
        """Delete a user everywhere; returns how many assignments went with them."""
        removed = self.assignments.delete_user(user_id)
        self.repository.delete_user(user_id)
        return removed

    def schedule(self, start: Optional[datetime] = None) -> ScheduleResult:
        """Recompute the critical path, with calendar dates when a start is known."""
        result = self.engine.compute(self.graph)
        start = start or self.project.start_date
        if start is not None:
            result = result.with_calendar(self.calendar, start)
        return result
