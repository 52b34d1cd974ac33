"""Critical path schedule models."""

from dataclasses import dataclass, asdict, field, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class TaskSchedule:
    """CPM timing for one task, in hours from project start."""

    task_id: str
    expected_hours: float
    variance: float
    earliest_start: float
    earliest_finish: float
    latest_start: float
    latest_finish: float
    slack: float
    is_critical: bool
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None


@dataclass(frozen=True)
class ScheduleResult:
    """Complete output of one critical path computation."""

    run_id: str
    project_id: str
    timestamp: datetime
    order: List[str]
    tasks: Dict[str, TaskSchedule]
    project_duration: float
    critical_tasks: FrozenSet[str]
    critical_chain: List[str]
    variance: float
    std_dev: float
    ci68: Tuple[float, float]
    ci95: Tuple[float, float]
    finish_date: Optional[datetime] = None
    working_days: Optional[int] = None
    config: Dict[str, Any] = field(default_factory=dict)

    def is_critical(self, task_id: str) -> bool:
        return task_id in self.critical_tasks

    def with_calendar(self, calendar, start: datetime) -> 'ScheduleResult':
        """Return a copy with calendar dates filled in from a project start."""
        dated = {
            task_id: replace(
                ts,
                start_date=calendar.add_hours(start, ts.earliest_start),
                finish_date=calendar.add_hours(start, ts.earliest_finish),
            )
            for task_id, ts in self.tasks.items()
        }
        finish = calendar.add_hours(start, self.project_duration)
        return replace(
            self,
            tasks=dated,
            finish_date=finish,
            working_days=len(calendar.working_days_between(start, finish)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON export."""
        data = asdict(self)
        data['critical_tasks'] = sorted(self.critical_tasks)
        data['ci68'] = list(self.ci68)
        data['ci95'] = list(self.ci95)
        return data

    def to_human_readable(self) -> str:
        """Generate human-readable log format."""
        lines = [
            f"=== Critical Path Run: {self.run_id} ===",
            f"Project: {self.project_id}",
            f"Timestamp: {self.timestamp}",
            "",
            "Task Schedule (hours):",
        ]

        for task_id in self.order:
            ts = self.tasks[task_id]
            marker = " *" if ts.is_critical else ""
            lines.append(f"  Task {task_id}{marker}:")
            lines.append(f"    Expected: {ts.expected_hours:.2f}")
            lines.append(f"    Earliest: {ts.earliest_start:.2f} -> {ts.earliest_finish:.2f}")
            lines.append(f"    Latest: {ts.latest_start:.2f} -> {ts.latest_finish:.2f}")
            lines.append(f"    Slack: {ts.slack:.2f}")
            if ts.start_date is not None:
                lines.append(f"    Dates: {ts.start_date} -> {ts.finish_date}")

        lines.extend([
            "",
            "Critical Chain:",
            f"  {' -> '.join(self.critical_chain)}",
            "",
            "Summary:",
            f"  Project duration: {self.project_duration:.2f} hours",
            f"  Standard deviation: {self.std_dev:.2f} hours",
            f"  68% interval: {self.ci68[0]:.2f} - {self.ci68[1]:.2f}",
            f"  95% interval: {self.ci95[0]:.2f} - {self.ci95[1]:.2f}",
        ])

        if self.finish_date is not None:
            lines.append(f"  Expected finish: {self.finish_date}")
            lines.append(f"  Working days: {self.working_days}")

        lines.append("=" * 50)

        return "\n".join(lines)
