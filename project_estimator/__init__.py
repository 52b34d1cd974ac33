"""Project scheduling and estimation engine."""

__version__ = "0.1.0"
