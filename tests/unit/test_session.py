"""Unit tests for project sessions and the in-memory repository."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from project_estimator.engine.session import ProjectSession
from project_estimator.errors import (
    CycleError,
    HasDependentsError,
    InvalidProgressError,
    LeaderConflictError,
    ProjectNotFoundError,
    SelfDependencyError,
    UnknownTaskError,
)
from project_estimator.models.assignment import TaskAssignment, User
from project_estimator.models.task import Dependency, Project, TaskStatus
from project_estimator.sample import SAMPLE_PROJECT_ID, build_sample_project


@pytest.fixture
def session(repository):
    repository.save_project(Project("proj", "Test project"))
    return ProjectSession(repository, "proj")


@pytest.fixture
def sample_session(repository):
    build_sample_project(repository, start_date=datetime(2026, 1, 5, 9))
    return ProjectSession(repository, SAMPLE_PROJECT_ID)


class TestRepository:
    """Tests for InMemoryRepository."""

    def test_unknown_project(self, repository):
        with pytest.raises(ProjectNotFoundError):
            repository.load_project("missing")

    def test_load_project_round_trip(self, repository, make_task):
        repository.save_project(Project("proj", "P"))
        repository.save_task(make_task("A"))
        repository.save_task(make_task("B"))
        repository.save_task(make_task("Z", project_id="other"))
        repository.save_edge(Dependency("B", "A"))

        data = repository.load_project("proj")
        assert [t.task_id for t in data.tasks] == ["A", "B"]
        assert data.edges == [Dependency("B", "A")]

    def test_delete_user_cascades(self, repository, make_task):
        repository.save_task(make_task("t1"))
        repository.save_user(User("bob", "Bob"))
        repository.save_assignment(TaskAssignment("a1", "bob", "t1"))
        repository.save_assignment(TaskAssignment("a2", "carol", "t1"))
        repository.delete_user("bob")

        assert repository.get_user("bob") is None
        assert list(repository.assignments) == ["a2"]

    def test_edge_to_unknown_task_rejected(self, repository, make_task):
        repository.save_task(make_task("A"))
        with pytest.raises(UnknownTaskError):
            repository.save_edge(Dependency("A", "missing"))
        with pytest.raises(SelfDependencyError):
            repository.save_edge(Dependency("A", "A"))
        assert repository.edges == set()

    def test_edge_closing_cycle_rejected(self, repository, make_task):
        for tid in ("A", "B", "C"):
            repository.save_task(make_task(tid))
        repository.save_edge(Dependency("B", "A"))
        repository.save_edge(Dependency("C", "B"))
        with pytest.raises(CycleError) as exc_info:
            repository.save_edge(Dependency("A", "C"))
        assert exc_info.value.task_ids == ["C", "B", "A", "C"]
        assert repository.edges == {Dependency("B", "A"), Dependency("C", "B")}

    def test_saving_existing_edge_is_noop(self, repository, make_task):
        repository.save_task(make_task("A"))
        repository.save_task(make_task("B"))
        repository.save_edge(Dependency("B", "A"))
        repository.save_edge(Dependency("B", "A"))
        assert repository.edges == {Dependency("B", "A")}

    def test_assignment_to_unknown_task_rejected(self, repository):
        with pytest.raises(UnknownTaskError):
            repository.save_assignment(TaskAssignment("a1", "bob", "t1"))
        assert repository.assignments == {}

    def test_second_active_leader_rejected(self, repository, make_task):
        repository.save_task(make_task("t1"))
        repository.save_assignment(TaskAssignment("a1", "eva", "t1", is_leader=True))
        with pytest.raises(LeaderConflictError):
            repository.save_assignment(TaskAssignment("a2", "alice", "t1", is_leader=True))
        repository.save_assignment(
            TaskAssignment("a1", "eva", "t1", is_leader=True, unassigned_at=datetime(2026, 1, 9))
        )
        repository.save_assignment(TaskAssignment("a2", "alice", "t1", is_leader=True))
        assert set(repository.assignments) == {"a1", "a2"}

    def test_delete_task_with_dependents_rejected(self, repository, make_task):
        repository.save_task(make_task("A"))
        repository.save_task(make_task("B"))
        repository.save_edge(Dependency("B", "A"))
        with pytest.raises(HasDependentsError) as exc_info:
            repository.delete_task("A")
        assert exc_info.value.dependents == ["B"]
        assert "A" in repository.tasks


class TestSessionMutations:
    """Tests for write-through mutations."""

    def test_add_task_and_dependency_persist(self, session, repository, make_task):
        session.add_task(make_task("A", 10))
        session.add_task(make_task("B", 20))
        session.add_dependency("B", "A")

        assert set(repository.tasks) == {"A", "B"}
        assert repository.edges == {Dependency("B", "A")}

    def test_rejected_edge_not_persisted(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.add_task(make_task("B"))
        session.add_dependency("B", "A")
        with pytest.raises(CycleError):
            session.add_dependency("A", "B")
        assert repository.edges == {Dependency("B", "A")}

    def test_remove_dependency_persists(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.add_task(make_task("B"))
        session.add_dependency("B", "A")
        assert session.remove_dependency("B", "A")
        assert not session.remove_dependency("B", "A")
        assert repository.edges == set()

    def test_remove_task_cascades_assignments(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.assignments.assign("bob", "A", is_leader=True)
        session.remove_task("A")

        assert "A" not in repository.tasks
        assert repository.assignments == {}
        assert session.assignments.active_assignments_for_user("bob") == []

    def test_remove_task_with_dependents_keeps_storage(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.add_task(make_task("B"))
        session.add_dependency("B", "A")
        with pytest.raises(HasDependentsError):
            session.remove_task("A")
        assert "A" in repository.tasks

    def test_update_estimate_and_status_persist(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.update_estimate("A", 2, 3, 10)
        session.set_status("A", TaskStatus.BLOCKED)
        stored = repository.tasks["A"]
        assert stored.pessimistic_hours == 10
        assert stored.status == TaskStatus.BLOCKED

    def test_set_progress_persists(self, session, repository, make_task):
        session.add_task(make_task("A"))
        session.set_progress("A", 60)
        assert repository.tasks["A"].percent_complete == 60
        with pytest.raises(InvalidProgressError):
            session.set_progress("A", 120)
        assert repository.tasks["A"].percent_complete == 60

    def test_task_without_project_gets_session_project(self, session, make_task):
        added = session.add_task(make_task("A", project_id=""))
        assert added.project_id == "proj"

    def test_delete_user(self, sample_session, repository):
        removed = sample_session.delete_user("bob")
        assert removed == 4
        assert sample_session.assignments.active_assignments_for_user("bob") == []
        assert all(a.user_id != "bob" for a in repository.assignments.values())
        assert repository.get_user("bob") is None


@pytest.fixture
def shared_repository(repository, make_task):
    """Stored project with tasks P, Q and R, where R depends on Q."""
    repository.save_project(Project("proj", "Shared"))
    for tid in ("P", "Q", "R"):
        repository.save_task(make_task(tid))
    repository.save_edge(Dependency("R", "Q"))
    return repository


class TestConcurrentSessions:
    """Tests for two sessions opened on the same stored project."""

    def test_leader_claims_from_two_sessions(self, shared_repository):
        """Test only one of two sessions can make its user the leader."""
        first = ProjectSession(shared_repository, "proj")
        second = ProjectSession(shared_repository, "proj")

        first.assignments.assign("eva", "P", is_leader=True)
        with pytest.raises(LeaderConflictError):
            second.assignments.assign("alice", "P", is_leader=True)

        assert second.assignments.active_leader("P") is None
        reloaded = ProjectSession(shared_repository, "proj")
        assert reloaded.assignments.active_leader("P") == "eva"

    def test_racing_leader_claims_across_sessions(self, repository, make_task):
        for round_no in range(25):
            project_id = f"proj_{round_no}"
            repository.save_project(Project(project_id, "Race"))
            repository.save_task(make_task(f"T{round_no}", project_id=project_id))
            sessions = [ProjectSession(repository, project_id) for _ in range(2)]
            barrier = threading.Barrier(2)

            def claim(args):
                session, user_id = args
                barrier.wait()
                try:
                    session.assignments.assign(user_id, f"T{round_no}", is_leader=True)
                    return "ok"
                except LeaderConflictError:
                    return "conflict"

            with ThreadPoolExecutor(max_workers=2) as pool:
                results = list(pool.map(claim, zip(sessions, ["eva", "alice"])))

            assert sorted(results) == ["conflict", "ok"]
            leaders = [
                a for a in repository.load_assignments(project_id) if a.is_leader and a.is_active
            ]
            assert len(leaders) == 1

    def test_opposite_edges_from_two_sessions(self, shared_repository):
        """Test storage refuses the edge that closes a cycle and the session rolls back."""
        first = ProjectSession(shared_repository, "proj")
        second = ProjectSession(shared_repository, "proj")

        first.add_dependency("P", "Q")
        with pytest.raises(CycleError):
            second.add_dependency("Q", "P")

        assert second.graph.dependencies_of("Q") == set()
        assert shared_repository.edges == {Dependency("R", "Q"), Dependency("P", "Q")}
        reloaded = ProjectSession(shared_repository, "proj")
        assert reloaded.graph.topological_order() == ["Q", "P", "R"]

    def test_racing_opposite_edges_across_sessions(self, repository, make_task):
        for round_no in range(25):
            project_id = f"proj_{round_no}"
            x, y = f"X{round_no}", f"Y{round_no}"
            repository.save_project(Project(project_id, "Race"))
            repository.save_task(make_task(x, project_id=project_id))
            repository.save_task(make_task(y, project_id=project_id))
            sessions = [ProjectSession(repository, project_id) for _ in range(2)]
            barrier = threading.Barrier(2)

            def link(args):
                session, task_id, depends_on = args
                barrier.wait()
                try:
                    session.add_dependency(task_id, depends_on)
                    return "ok"
                except CycleError:
                    return "cycle"

            jobs = [(sessions[0], x, y), (sessions[1], y, x)]
            with ThreadPoolExecutor(max_workers=2) as pool:
                results = list(pool.map(link, jobs))

            assert sorted(results) == ["cycle", "ok"]
            reloaded = ProjectSession(repository, project_id)
            assert len(reloaded.graph.edges()) == 1
            assert len(reloaded.graph.topological_order()) == 2

    def test_remove_task_needed_by_other_session(self, shared_repository):
        """Test a removal from a stale view is refused and the graph restored."""
        first = ProjectSession(shared_repository, "proj")
        second = ProjectSession(shared_repository, "proj")

        first.add_dependency("P", "R")
        with pytest.raises(HasDependentsError):
            second.remove_task("R")

        assert "R" in second.graph
        assert second.graph.dependencies_of("R") == {"Q"}
        assert "R" in shared_repository.tasks
        assert Dependency("R", "Q") in shared_repository.edges

    def test_assign_to_task_removed_by_other_session(self, shared_repository):
        first = ProjectSession(shared_repository, "proj")
        second = ProjectSession(shared_repository, "proj")

        first.remove_task("P")
        with pytest.raises(UnknownTaskError):
            second.assignments.assign("bob", "P")
        assert second.assignments.active_assignments_for_task("P") == []


class TestSampleProject:
    """Tests for the sample project end to end."""

    def test_loaded_structure(self, sample_session):
        assert len(sample_session.graph) == 6
        assert sample_session.graph.dependencies_of("task_005") == {"task_003", "task_004"}
        assert sample_session.assignments.active_leader("task_001") == "eva"
        assert sample_session.assignments.assigned_users("task_006") == ["alice", "david", "eva"]

    def test_schedule(self, sample_session):
        result = sample_session.schedule()
        assert result.project_duration == pytest.approx(136.8333, abs=1e-4)
        assert result.critical_chain == ["task_001", "task_002", "task_004", "task_005", "task_006"]
        assert not result.is_critical("task_003")
        assert result.tasks["task_003"].slack == pytest.approx(20)
        assert result.variance == pytest.approx(102.8056, abs=1e-4)

    def test_schedule_has_calendar_dates(self, sample_session):
        result = sample_session.schedule()
        first = result.tasks["task_001"]
        assert first.start_date == datetime(2026, 1, 5, 9)
        assert result.finish_date > first.finish_date

    def test_reload_sees_changes(self, sample_session, repository, make_task):
        sample_session.add_task(make_task("task_007", 4, project_id=SAMPLE_PROJECT_ID))
        sample_session.add_dependency("task_007", "task_006")

        reloaded = ProjectSession(repository, SAMPLE_PROJECT_ID)
        assert reloaded.graph.dependencies_of("task_007") == {"task_006"}
        assert reloaded.schedule().critical_chain[-1] == "task_007"
