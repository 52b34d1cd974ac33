"""Main entry point for the Project Estimator engine."""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from project_estimator.engine.session import ProjectSession
from project_estimator.errors import ProjectEstimatorError
from project_estimator.estimation import estimate
from project_estimator.sample import build_sample_project
from project_estimator.storage.memory import InMemoryRepository
from project_estimator.utils.config import get_default_config, load_config
from project_estimator.utils.logging_utils import configure_logging
from project_estimator.utils.project_file import load_project_file

logger = logging.getLogger("project_estimator.main")


def run_estimate(optimistic: float, most_likely: float, pessimistic: float):
    """Print PERT statistics for one task."""
    result = estimate(optimistic, most_likely, pessimistic)

    print(f"\nExpected: {result.expected:.2f} hours")
    print(f"Standard deviation: {result.std_dev:.2f} hours")
    print(f"68% interval: {result.ci68[0]:.2f} - {result.ci68[1]:.2f}")
    print(f"95% interval: {result.ci95[0]:.2f} - {result.ci95[1]:.2f}")

    return result


def run_schedule(config: dict, project_path: str = None, start: datetime = None):
    """Compute the critical path for a project file, or the sample project."""
    repository = InMemoryRepository()

    if project_path:
        project_id = load_project_file(project_path, repository, config)
    else:
        project_id = build_sample_project(repository, start_date=start, config=config)

    session = ProjectSession(repository, project_id, config)
    result = session.schedule(start)

    print(result.to_human_readable())

    # Save results
    results_dir = Path(config.get('output', {}).get('results_dir', 'results'))
    results_dir.mkdir(parents=True, exist_ok=True)

    json_path = results_dir / f"schedule_{result.run_id}.json"
    with open(json_path, 'w') as f:
        json.dump(result.to_dict(), f, indent=2, default=str)

    log_path = results_dir / f"schedule_{result.run_id}.log"
    with open(log_path, 'w') as f:
        f.write(result.to_human_readable())

    print(f"\nSchedule saved to: {json_path}")
    print(f"Human-readable log saved to: {log_path}")

    return result


def run_sample(config: dict, start: datetime = None):
    """Print the sample project's tasks and assignments."""
    repository = InMemoryRepository()
    project_id = build_sample_project(repository, start_date=start, config=config)
    session = ProjectSession(repository, project_id, config)

    print(f"\n{session.project.name}")
    for task in session.graph.tasks():
        est = task.estimate
        deps = ', '.join(sorted(session.graph.dependencies_of(task.task_id))) or '-'
        leader = session.assignments.active_leader(task.task_id) or '-'
        print(f"  {task.task_id} {task.name:<30} {est.expected:>7.2f}h +/- {est.std_dev:.2f}"
              f"  depends on: {deps}  leader: {leader}")

    return session


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Project Estimator: PERT estimates and critical path scheduling"
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    estimate_parser = subparsers.add_parser('estimate', help='PERT statistics for one task')
    estimate_parser.add_argument('optimistic', type=float)
    estimate_parser.add_argument('most_likely', type=float)
    estimate_parser.add_argument('pessimistic', type=float)

    for name, help_text in [
        ('schedule', 'Compute the critical path of a project'),
        ('sample', 'Show the sample project'),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            '--config',
            type=str,
            default='config.yaml',
            help='Path to configuration file (default: config.yaml)'
        )
        sub.add_argument(
            '--start',
            type=datetime.fromisoformat,
            default=None,
            help='Project start date, YYYY-MM-DD (default: project file or today)'
        )
        if name == 'schedule':
            sub.add_argument(
                '--project',
                type=str,
                default=None,
                help='Project definition file (default: built-in sample project)'
            )

    args = parser.parse_args()

    config_path = getattr(args, 'config', None)
    config = load_config(config_path) if config_path and Path(config_path).exists() else get_default_config()
    configure_logging(config)

    try:
        if args.command == 'estimate':
            run_estimate(args.optimistic, args.most_likely, args.pessimistic)
        elif args.command == 'schedule':
            run_schedule(config, args.project, args.start)
        elif args.command == 'sample':
            run_sample(config, args.start)
    except ProjectEstimatorError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
