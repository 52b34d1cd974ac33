"""Shared fixtures for unit tests."""

import pytest

from project_estimator.engine.graph import DependencyGraph
from project_estimator.models.task import Task
from project_estimator.storage.memory import InMemoryRepository


def _make_task(task_id, optimistic=1.0, most_likely=None, pessimistic=None, project_id="proj"):
    most_likely = optimistic if most_likely is None else most_likely
    pessimistic = most_likely if pessimistic is None else pessimistic
    return Task(
        task_id=task_id,
        project_id=project_id,
        name=f"Task {task_id}",
        optimistic_hours=optimistic,
        most_likely_hours=most_likely,
        pessimistic_hours=pessimistic,
    )


@pytest.fixture
def make_task():
    """Factory for tasks; a single duration gives expected == that duration."""
    return _make_task


@pytest.fixture
def graph():
    return DependencyGraph("proj")


@pytest.fixture
def chain_graph():
    """A -> B -> C with expected durations 10, 20, 15."""
    g = DependencyGraph("proj")
    g.add_task(_make_task("A", 10))
    g.add_task(_make_task("B", 20))
    g.add_task(_make_task("C", 15))
    g.add_dependency("B", "A")
    g.add_dependency("C", "B")
    return g


@pytest.fixture
def repository():
    return InMemoryRepository()
