"""Task dependency graph for a single project."""

import heapq
import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from ..errors import (
    CycleError,
    DuplicateTaskError,
    HasDependentsError,
    InternalCycleError,
    InvalidProgressError,
    SelfDependencyError,
    UnknownTaskError,
    ValidationError,
)
from ..estimation import validate_durations
from ..models.task import Dependency, Task, TaskStatus

logger = logging.getLogger(__name__)


def topological_sort(task_ids: Iterable[str], dependencies: Mapping[str, Iterable[str]]) -> List[str]:
    """Order tasks so every task follows everything it depends on.

    Uses Kahn's algorithm with a heap, so among tasks whose dependencies are
    all placed the lowest id comes first.

    Raises:
        InternalCycleError: If the edges contain a cycle.
    """
    ids = set(task_ids)
    in_degree: Dict[str, int] = {task_id: 0 for task_id in ids}
    dependents: Dict[str, List[str]] = {task_id: [] for task_id in ids}

    for task_id in ids:
        for dep_id in dependencies.get(task_id, ()):
            in_degree[task_id] += 1
            dependents[dep_id].append(task_id)

    ready = [task_id for task_id, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)
    order = []

    while ready:
        task_id = heapq.heappop(ready)
        order.append(task_id)
        for dependent_id in dependents[task_id]:
            in_degree[dependent_id] -= 1
            if in_degree[dependent_id] == 0:
                heapq.heappush(ready, dependent_id)

    if len(order) != len(ids):
        remaining = sorted(task_id for task_id, degree in in_degree.items() if degree > 0)
        logger.critical(f"Dependency cycle found in supposedly acyclic graph: {remaining}")
        raise InternalCycleError(
            remaining, f"Dependency graph is not acyclic; unresolved tasks: {remaining}"
        )

    return order


def find_path(
    dependencies: Mapping[str, Iterable[str]],
    source: str,
    target: str,
) -> Optional[List[str]]:
    """Depth-first search along depends-on edges; returns the path or None."""
    if source == target:
        return [source]

    parents: Dict[str, Optional[str]] = {source: None}
    stack = [source]

    while stack:
        current = stack.pop()
        for dep_id in dependencies.get(current, ()):
            if dep_id in parents:
                continue
            parents[dep_id] = current
            if dep_id == target:
                path = [dep_id]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                return list(reversed(path))
            stack.append(dep_id)

    return None


def validate_progress(task_id: str, percent_complete: float) -> None:
    if (
        isinstance(percent_complete, bool)
        or not isinstance(percent_complete, (int, float))
        or not 0 <= percent_complete <= 100
    ):
        raise InvalidProgressError(task_id, percent_complete)


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable copy of a project's tasks and edges."""

    project_id: str
    tasks: Mapping[str, Task]
    dependencies: Mapping[str, FrozenSet[str]]

    def dependencies_of(self, task_id: str) -> FrozenSet[str]:
        return self.dependencies.get(task_id, frozenset())

    def dependents_of(self, task_id: str) -> FrozenSet[str]:
        return frozenset(
            other for other, deps in self.dependencies.items() if task_id in deps
        )

    def edges(self) -> Set[Dependency]:
        return {
            Dependency(task_id, dep_id)
            for task_id, deps in self.dependencies.items()
            for dep_id in deps
        }

    def topological_order(self) -> List[str]:
        return topological_sort(self.tasks.keys(), self.dependencies)


class DependencyGraph:
    """Tasks and depends-on edges of one project, kept acyclic.

    Tasks live in a mapping keyed by id and edges in adjacency sets, so task
    objects never reference each other. Every public method runs under the
    graph's lock: writers are exclusive per project and readers never see a
    half-applied mutation. Failed mutations leave the graph unchanged.
    """

    def __init__(self, project_id: str):
        """Initialize an empty graph for a project."""
        self.project_id = project_id
        self._tasks: Dict[str, Task] = {}
        self._dependencies: Dict[str, Set[str]] = {}
        self._dependents: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._tasks

    def add_task(self, task: Task) -> Task:
        """Insert a new task node."""
        validate_durations(task.optimistic_hours, task.most_likely_hours, task.pessimistic_hours)
        validate_progress(task.task_id, task.percent_complete)
        if task.project_id != self.project_id:
            raise ValidationError(
                f"Task {task.task_id} belongs to project {task.project_id}, not {self.project_id}"
            )

        with self._lock:
            if task.task_id in self._tasks:
                raise DuplicateTaskError(task.task_id)

            self._tasks[task.task_id] = replace(task)
            self._dependencies[task.task_id] = set()
            self._dependents[task.task_id] = set()

        logger.info(f"Added task {task.task_id} ({task.name}) to project {self.project_id}")
        return replace(task)

    def add_dependency(self, task_id: str, depends_on: str) -> bool:
        """Record that task_id cannot start before depends_on finishes.

        Returns:
            True if the edge was added, False if it already existed

        Raises:
            UnknownTaskError: If either task is not in the graph
            SelfDependencyError: If both ids are the same
            CycleError: If depends_on already (transitively) depends on task_id
        """
        with self._lock:
            for tid in (task_id, depends_on):
                if tid not in self._tasks:
                    raise UnknownTaskError(tid)

            if task_id == depends_on:
                raise SelfDependencyError(task_id)

            if depends_on in self._dependencies[task_id]:
                return False

            path = find_path(self._dependencies, depends_on, task_id)
            if path is not None:
                logger.warning(
                    f"Rejected dependency {task_id} -> {depends_on}: would close cycle {path}"
                )
                raise CycleError(path + [depends_on])

            self._dependencies[task_id].add(depends_on)
            self._dependents[depends_on].add(task_id)

        logger.info(f"Added dependency {task_id} -> {depends_on} in project {self.project_id}")
        return True

    def remove_dependency(self, task_id: str, depends_on: str) -> bool:
        """Remove an edge; removing a missing edge is a no-op."""
        with self._lock:
            if depends_on not in self._dependencies.get(task_id, ()):
                return False

            self._dependencies[task_id].discard(depends_on)
            self._dependents[depends_on].discard(task_id)

        logger.info(f"Removed dependency {task_id} -> {depends_on} in project {self.project_id}")
        return True

    def remove_task(self, task_id: str) -> Task:
        """Remove a task nothing depends on, along with its own dependency edges."""
        with self._lock:
            if task_id not in self._tasks:
                raise UnknownTaskError(task_id)

            dependents = self._dependents[task_id]
            if dependents:
                raise HasDependentsError(task_id, dependents)

            for dep_id in self._dependencies.pop(task_id):
                self._dependents[dep_id].discard(task_id)
            del self._dependents[task_id]
            task = self._tasks.pop(task_id)

        logger.info(f"Removed task {task_id} from project {self.project_id}")
        return task

    def update_estimate(
        self,
        task_id: str,
        optimistic: float,
        most_likely: float,
        pessimistic: float,
    ) -> Task:
        """Replace a task's three-point estimate."""
        validate_durations(optimistic, most_likely, pessimistic)

        with self._lock:
            task = self._require(task_id)
            task.optimistic_hours = optimistic
            task.most_likely_hours = most_likely
            task.pessimistic_hours = pessimistic
            updated = replace(task)

        logger.debug(f"Updated estimate for {task_id}: ({optimistic}, {most_likely}, {pessimistic})")
        return updated

    def set_status(self, task_id: str, status: TaskStatus) -> Task:
        with self._lock:
            task = self._require(task_id)
            task.status = TaskStatus(status)
            return replace(task)

    def set_progress(self, task_id: str, percent_complete: float) -> Task:
        validate_progress(task_id, percent_complete)
        with self._lock:
            task = self._require(task_id)
            task.percent_complete = percent_complete
            return replace(task)

    def get_task(self, task_id: str) -> Task:
        """Return a copy of a task."""
        with self._lock:
            return replace(self._require(task_id))

    def tasks(self) -> List[Task]:
        with self._lock:
            return [replace(self._tasks[tid]) for tid in sorted(self._tasks)]

    def task_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._tasks)

    def dependencies_of(self, task_id: str) -> Set[str]:
        with self._lock:
            self._require(task_id)
            return set(self._dependencies[task_id])

    def dependents_of(self, task_id: str) -> Set[str]:
        with self._lock:
            self._require(task_id)
            return set(self._dependents[task_id])

    def edges(self) -> Set[Dependency]:
        with self._lock:
            return {
                Dependency(task_id, dep_id)
                for task_id, deps in self._dependencies.items()
                for dep_id in deps
            }

    def has_path(self, source: str, target: str) -> bool:
        """Check whether source transitively depends on target."""
        with self._lock:
            return find_path(self._dependencies, source, target) is not None

    def topological_order(self) -> List[str]:
        """Task ids in dependency order, ties broken by ascending id."""
        with self._lock:
            return topological_sort(self._tasks.keys(), self._dependencies)

    def snapshot(self) -> GraphSnapshot:
        """Take a consistent, immutable copy of the graph."""
        with self._lock:
            return GraphSnapshot(
                project_id=self.project_id,
                tasks={tid: replace(task) for tid, task in self._tasks.items()},
                dependencies={tid: frozenset(deps) for tid, deps in self._dependencies.items()},
            )

    def _require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownTaskError(task_id)
        return task

