"""Project definition files (YAML or JSON)."""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..engine.assignments import AssignmentManager
from ..engine.graph import DependencyGraph
from ..errors import ValidationError
from ..models.assignment import User, UserRole
from ..models.task import Project, Task, TaskStatus
from ..storage.base import Repository

logger = logging.getLogger(__name__)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return datetime.fromisoformat(str(value))


def read_project_file(project_path: str) -> Dict[str, Any]:
    """Read a raw project definition."""
    path = Path(project_path)

    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {project_path}")

    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f) or {}
        elif path.suffix.lower() == '.json':
            return json.load(f)
        else:
            raise ValueError(f"Unsupported project file format: {path.suffix}")


def load_project_definition(
    definition: Dict[str, Any],
    repository: Repository,
    config: Optional[dict] = None,
) -> str:
    """
    Validate a project definition and store it in a repository.

    The whole graph is built in memory first, so a bad estimate or a cycle
    aborts the load before anything is written.

    Returns:
        The project id
    """
    project_section = definition.get('project') or {}
    if 'id' not in project_section:
        raise ValidationError("Project definition needs a 'project.id'")

    project = Project(
        project_id=str(project_section['id']),
        name=project_section.get('name', str(project_section['id'])),
        description=project_section.get('description', ''),
        start_date=_to_datetime(project_section.get('start_date')),
    )

    graph = DependencyGraph(project.project_id)
    task_specs = definition.get('tasks') or []
    for spec in task_specs:
        graph.add_task(Task(
            task_id=str(spec['id']),
            project_id=project.project_id,
            name=spec.get('name', str(spec['id'])),
            optimistic_hours=spec['optimistic'],
            most_likely_hours=spec['most_likely'],
            pessimistic_hours=spec['pessimistic'],
            priority=spec.get('priority', 1),
            start_date=_to_datetime(spec.get('start_date')),
            status=TaskStatus(spec.get('status', TaskStatus.NOT_STARTED.value)),
            description=spec.get('description', ''),
            percent_complete=spec.get('percent_complete', 0.0),
        ))
    for spec in task_specs:
        for dep_id in spec.get('depends_on') or []:
            graph.add_dependency(str(spec['id']), str(dep_id))

    repository.save_project(project)
    for task in graph.tasks():
        repository.save_task(task)
    for edge in sorted(graph.edges(), key=lambda e: (e.task_id, e.depends_on)):
        repository.save_edge(edge)

    for spec in definition.get('users') or []:
        repository.save_user(User(
            user_id=str(spec['id']),
            name=spec.get('name', str(spec['id'])),
            role=UserRole(spec.get('role', UserRole.DEVELOPER.value)),
            email=spec.get('email', ''),
            department=spec.get('department', ''),
        ))

    manager = AssignmentManager(config, repository=repository)
    for spec in definition.get('assignments') or []:
        manager.assign(
            user_id=str(spec['user']),
            task_id=str(spec['task']),
            is_leader=spec.get('leader', False),
            allocation_percentage=spec.get('allocation'),
            notes=spec.get('notes', ''),
            assigned_at=_to_datetime(spec.get('assigned_at')),
        )

    logger.info(f"Loaded project definition {project.project_id} with {len(graph)} task(s)")
    return project.project_id


def load_project_file(project_path: str, repository: Repository, config: Optional[dict] = None) -> str:
    """Read a project file and store it in a repository."""
    return load_project_definition(read_project_file(project_path), repository, config)
