"""Sample software project used by the CLI demo and tests."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .storage.base import Repository
from .utils.project_file import load_project_definition

SAMPLE_PROJECT_ID = "sample"


def sample_definition(start_date: Optional[datetime] = None) -> Dict[str, Any]:
    """Six-task software project with a diamond between design and testing."""
    if start_date is None:
        start_date = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0)

    def day(offset: int) -> datetime:
        return start_date + timedelta(days=offset)

    return {
        'project': {
            'id': SAMPLE_PROJECT_ID,
            'name': "Sample Software Project",
            'description': "Three-point estimation and task dependencies",
            'start_date': start_date,
        },
        'tasks': [
            {'id': 'task_001', 'name': "Requirements Analysis",
             'optimistic': 16, 'most_likely': 24, 'pessimistic': 40, 'priority': 1,
             'start_date': day(0)},
            {'id': 'task_002', 'name': "System Design",
             'optimistic': 20, 'most_likely': 32, 'pessimistic': 50, 'priority': 2,
             'start_date': day(3), 'depends_on': ['task_001']},
            {'id': 'task_003', 'name': "Database Development",
             'optimistic': 12, 'most_likely': 20, 'pessimistic': 32, 'priority': 3,
             'start_date': day(7), 'depends_on': ['task_002']},
            {'id': 'task_004', 'name': "User Interface Development",
             'optimistic': 24, 'most_likely': 40, 'pessimistic': 60, 'priority': 3,
             'start_date': day(7), 'depends_on': ['task_002']},
            {'id': 'task_005', 'name': "Integration Testing",
             'optimistic': 8, 'most_likely': 16, 'pessimistic': 28, 'priority': 4,
             'start_date': day(15), 'depends_on': ['task_003', 'task_004']},
            {'id': 'task_006', 'name': "User Acceptance Testing",
             'optimistic': 12, 'most_likely': 20, 'pessimistic': 35, 'priority': 5,
             'start_date': day(18), 'depends_on': ['task_005']},
        ],
        'users': [
            {'id': 'alice', 'name': "Alice Johnson", 'role': 'project_manager',
             'email': "alice.johnson@company.com", 'department': "Engineering"},
            {'id': 'bob', 'name': "Bob Smith", 'role': 'developer',
             'email': "bob.smith@company.com", 'department': "Engineering"},
            {'id': 'carol', 'name': "Carol Williams", 'role': 'designer',
             'email': "carol.williams@company.com", 'department': "Design"},
            {'id': 'david', 'name': "David Brown", 'role': 'quality_assurance',
             'email': "david.brown@company.com", 'department': "Quality"},
            {'id': 'eva', 'name': "Eva Davis", 'role': 'analyst',
             'email': "eva.davis@company.com", 'department': "Business"},
        ],
        'assignments': [
            {'user': 'eva', 'task': 'task_001', 'leader': True, 'allocation': 80, 'assigned_at': day(0)},
            {'user': 'alice', 'task': 'task_001', 'allocation': 50, 'assigned_at': day(0)},
            {'user': 'bob', 'task': 'task_002', 'leader': True, 'allocation': 100, 'assigned_at': day(3)},
            {'user': 'bob', 'task': 'task_003', 'leader': True, 'allocation': 100, 'assigned_at': day(7)},
            {'user': 'carol', 'task': 'task_004', 'leader': True, 'allocation': 100, 'assigned_at': day(7)},
            {'user': 'bob', 'task': 'task_004', 'allocation': 50, 'assigned_at': day(10)},
            {'user': 'david', 'task': 'task_005', 'leader': True, 'allocation': 100, 'assigned_at': day(15)},
            {'user': 'bob', 'task': 'task_005', 'allocation': 30, 'assigned_at': day(15)},
            {'user': 'david', 'task': 'task_006', 'leader': True, 'allocation': 80, 'assigned_at': day(18)},
            {'user': 'alice', 'task': 'task_006', 'allocation': 40, 'assigned_at': day(18)},
            {'user': 'eva', 'task': 'task_006', 'allocation': 60, 'assigned_at': day(18)},
        ],
    }


def build_sample_project(
    repository: Repository,
    start_date: Optional[datetime] = None,
    config: Optional[dict] = None,
) -> str:
    """Store the sample project in a repository and return its id."""
    return load_project_definition(sample_definition(start_date), repository, config)
