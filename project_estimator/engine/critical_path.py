"""Critical Path Method over a project's dependency graph."""

import logging
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Union

from ..errors import EmptyProjectError
from ..models.schedule import ScheduleResult, TaskSchedule
from .graph import DependencyGraph, GraphSnapshot

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-9


class CriticalPathEngine:
    """Computes earliest/latest times, slack and the critical path.

    The engine keeps no state between calls: each call snapshots the graph
    under its lock and recomputes every pass from scratch.

    Project duration uncertainty sums the variances of the tasks on one
    critical chain and assumes task durations are independent. This is the
    classic PERT simplification: near-critical paths that could overtake the
    critical chain are ignored, so the interval understates real risk when
    several paths have similar length.
    """

    def __init__(self, config: Optional[dict] = None):
        """Initialize engine with configuration."""
        self.config = config or {}
        cpm_config = self.config.get('critical_path', {})
        self.epsilon = cpm_config.get('epsilon', DEFAULT_EPSILON)

    def compute(self, graph: Union[DependencyGraph, GraphSnapshot]) -> ScheduleResult:
        """Run forward and backward passes over the whole project."""
        snapshot = graph.snapshot() if isinstance(graph, DependencyGraph) else graph

        if not snapshot.tasks:
            logger.error(f"Cannot schedule project {snapshot.project_id}: no tasks")
            raise EmptyProjectError(snapshot.project_id)

        order = snapshot.topological_order()
        expected = {tid: snapshot.tasks[tid].expected_hours for tid in order}
        dependents: Dict[str, List[str]] = {tid: [] for tid in order}
        for tid in order:
            for dep_id in snapshot.dependencies_of(tid):
                dependents[dep_id].append(tid)

        # Forward pass
        earliest_start: Dict[str, float] = {}
        earliest_finish: Dict[str, float] = {}
        for tid in order:
            preds = snapshot.dependencies_of(tid)
            earliest_start[tid] = max((earliest_finish[d] for d in preds), default=0.0)
            earliest_finish[tid] = earliest_start[tid] + expected[tid]

        project_duration = max(
            earliest_finish[tid] for tid in order if not dependents[tid]
        )

        # Backward pass
        latest_start: Dict[str, float] = {}
        latest_finish: Dict[str, float] = {}
        for tid in reversed(order):
            latest_finish[tid] = min(
                (latest_start[s] for s in dependents[tid]), default=project_duration
            )
            latest_start[tid] = latest_finish[tid] - expected[tid]

        schedules: Dict[str, TaskSchedule] = {}
        for tid in order:
            slack = latest_start[tid] - earliest_start[tid]
            schedules[tid] = TaskSchedule(
                task_id=tid,
                expected_hours=expected[tid],
                variance=snapshot.tasks[tid].variance,
                earliest_start=earliest_start[tid],
                earliest_finish=earliest_finish[tid],
                latest_start=latest_start[tid],
                latest_finish=latest_finish[tid],
                slack=slack,
                is_critical=abs(slack) <= self.epsilon,
            )

        critical = frozenset(tid for tid, ts in schedules.items() if ts.is_critical)
        chain = self._longest_chain(order, snapshot, dependents, schedules)

        variance = sum(schedules[tid].variance for tid in chain)
        std_dev = math.sqrt(variance)

        logger.debug(
            f"Project {snapshot.project_id}: duration {project_duration:.2f}h, "
            f"{len(critical)} critical task(s), chain {chain}"
        )

        return ScheduleResult(
            run_id=str(uuid.uuid4())[:8],
            project_id=snapshot.project_id,
            timestamp=datetime.now(),
            order=order,
            tasks=schedules,
            project_duration=project_duration,
            critical_tasks=critical,
            critical_chain=chain,
            variance=variance,
            std_dev=std_dev,
            ci68=(project_duration - std_dev, project_duration + std_dev),
            ci95=(project_duration - 2 * std_dev, project_duration + 2 * std_dev),
            config={'epsilon': self.epsilon},
        )

    def critical_chain(self, graph: Union[DependencyGraph, GraphSnapshot]) -> List[str]:
        """One concrete longest chain from a source task to a terminal task."""
        return self.compute(graph).critical_chain

    def _longest_chain(
        self,
        order: List[str],
        snapshot: GraphSnapshot,
        dependents: Dict[str, List[str]],
        schedules: Dict[str, TaskSchedule],
    ) -> List[str]:
        """Walk zero-slack tasks from the lowest-id critical source.

        A critical task always has a critical dependent starting exactly at
        its earliest finish unless it is terminal, so the walk ends on a
        terminal task finishing at the project duration.
        """
        sources = sorted(
            tid for tid in order
            if schedules[tid].is_critical and not snapshot.dependencies_of(tid)
        )
        if not sources:
            return []

        chain = [sources[0]]
        while True:
            current = schedules[chain[-1]]
            candidates = sorted(
                s for s in dependents[current.task_id]
                if schedules[s].is_critical
                and abs(schedules[s].earliest_start - current.earliest_finish) <= self.epsilon
            )
            if not candidates:
                return chain
            chain.append(candidates[0])
