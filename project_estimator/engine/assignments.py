"""Personnel-to-task assignment management."""

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..errors import (
    AssignmentNotFoundError,
    InvalidAllocationError,
    InvalidNoteError,
    LeaderConflictError,
)
from ..models.assignment import TaskAssignment
from ..models.task import new_id

logger = logging.getLogger(__name__)


class AssignmentManager:
    """Tracks who works on which task and who leads it.

    At most one active leader exists per task. The leader check, the
    repository write and the insert run under a lock keyed by task id, so two
    callers racing to lead the same task cannot both succeed, while
    assignments on different tasks proceed independently. The repository
    re-checks the leader on commit, which covers managers in other sessions.
    """

    def __init__(self, config: Optional[dict] = None, repository=None):
        """
        Initialize assignment manager.

        Args:
            config: Engine configuration (reads the 'assignments' section)
            repository: Optional repository that receives every change
        """
        self.config = config or {}
        assignment_config = self.config.get('assignments', {})
        self.max_note_length = assignment_config.get('max_note_length', 500)
        self.default_allocation = assignment_config.get('default_allocation_percentage', 100)
        self.repository = repository

        self._assignments: Dict[str, TaskAssignment] = {}
        self._store_lock = threading.RLock()
        self._task_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._task_locks_guard = threading.Lock()

    def load(self, assignments: Iterable[TaskAssignment]) -> None:
        """Populate the manager from stored assignments."""
        with self._store_lock:
            for assignment in assignments:
                self._assignments[assignment.assignment_id] = replace(assignment)

    def assign(
        self,
        user_id: str,
        task_id: str,
        is_leader: bool = False,
        allocation_percentage: Optional[int] = None,
        notes: str = "",
        assigned_at: Optional[datetime] = None,
    ) -> str:
        """
        Assign a user to a task.

        Returns:
            The new assignment id

        Raises:
            InvalidAllocationError: If allocation is outside [0, 100]
            InvalidNoteError: If notes exceed the configured length
            LeaderConflictError: If is_leader and the task already has an active leader
            UnknownTaskError: If the repository does not store the task
        """
        if allocation_percentage is None:
            allocation_percentage = self.default_allocation
        if (
            isinstance(allocation_percentage, bool)
            or not isinstance(allocation_percentage, (int, float))
            or not 0 <= allocation_percentage <= 100
        ):
            raise InvalidAllocationError(allocation_percentage)
        if len(notes) > self.max_note_length:
            raise InvalidNoteError(len(notes), self.max_note_length)

        assignment = TaskAssignment(
            assignment_id=new_id(),
            user_id=user_id,
            task_id=task_id,
            is_leader=is_leader,
            allocation_percentage=allocation_percentage,
            assigned_at=assigned_at or datetime.now(),
            notes=notes,
        )

        with self._task_lock(task_id):
            if is_leader:
                current = self._active_leader_assignment(task_id)
                if current is not None:
                    logger.warning(
                        f"Leader conflict on task {task_id}: {user_id} rejected, "
                        f"{current.user_id} already leads"
                    )
                    raise LeaderConflictError(task_id, current.user_id)

            if self.repository is not None:
                self.repository.save_assignment(replace(assignment))

            with self._store_lock:
                self._assignments[assignment.assignment_id] = assignment

        role = "leader" if is_leader else "member"
        logger.info(f"Assigned {user_id} to task {task_id} as {role} ({allocation_percentage}%)")
        return assignment.assignment_id

    def unassign(self, assignment_id: str, when: Optional[datetime] = None) -> TaskAssignment:
        """End an assignment; ending an already ended one changes nothing."""
        with self._store_lock:
            assignment = self._assignments.get(assignment_id)
            if assignment is None:
                raise AssignmentNotFoundError(assignment_id)
            if not assignment.is_active:
                return replace(assignment)
            assignment.unassigned_at = when or datetime.now()
            ended = replace(assignment)

        if self.repository is not None:
            self.repository.save_assignment(replace(ended))

        logger.info(f"Unassigned {ended.user_id} from task {ended.task_id}")
        return ended

    def get(self, assignment_id: str) -> TaskAssignment:
        with self._store_lock:
            assignment = self._assignments.get(assignment_id)
            if assignment is None:
                raise AssignmentNotFoundError(assignment_id)
            return replace(assignment)

    def active_leader(self, task_id: str) -> Optional[str]:
        """User id of the task's active leader, if any."""
        with self._store_lock:
            current = self._active_leader_assignment(task_id)
            return current.user_id if current else None

    def active_assignments_for_task(self, task_id: str) -> List[TaskAssignment]:
        return self._select(lambda a: a.task_id == task_id and a.is_active)

    def active_assignments_for_user(self, user_id: str) -> List[TaskAssignment]:
        return self._select(lambda a: a.user_id == user_id and a.is_active)

    def assignments_for_user(self, user_id: str) -> List[TaskAssignment]:
        """All assignments of a user, active or ended."""
        return self._select(lambda a: a.user_id == user_id)

    def assigned_users(self, task_id: str) -> List[str]:
        return sorted({a.user_id for a in self.active_assignments_for_task(task_id)})

    def leading_tasks(self, user_id: str) -> List[str]:
        return sorted({a.task_id for a in self.active_assignments_for_user(user_id) if a.is_leader})

    def delete_user(self, user_id: str) -> int:
        """Physically remove every assignment of a deleted user."""
        return self._delete_where(lambda a: a.user_id == user_id, f"user {user_id}")

    def delete_task(self, task_id: str) -> int:
        """Physically remove every assignment of a deleted task.

        Runs under the task's lock, so an assign racing the delete either
        lands before it (and is removed) or after it.
        """
        with self._task_lock(task_id):
            return self._delete_where(lambda a: a.task_id == task_id, f"task {task_id}")

    def _task_lock(self, task_id: str) -> threading.Lock:
        with self._task_locks_guard:
            return self._task_locks[task_id]

    def _active_leader_assignment(self, task_id: str) -> Optional[TaskAssignment]:
        with self._store_lock:
            for assignment in self._assignments.values():
                if assignment.task_id == task_id and assignment.is_leader and assignment.is_active:
                    return assignment
        return None

    def _select(self, predicate) -> List[TaskAssignment]:
        with self._store_lock:
            matches = [replace(a) for a in self._assignments.values() if predicate(a)]
        return sorted(matches, key=lambda a: (a.assigned_at, a.assignment_id))

    def _delete_where(self, predicate, label: str) -> int:
        with self._store_lock:
            doomed = [aid for aid, a in self._assignments.items() if predicate(a)]
            for aid in doomed:
                del self._assignments[aid]

        if self.repository is not None:
            for aid in doomed:
                self.repository.delete_assignment(aid)

        logger.info(f"Deleted {len(doomed)} assignment(s) of {label}")
        return len(doomed)
