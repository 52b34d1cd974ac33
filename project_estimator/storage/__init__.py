"""Persistence interfaces."""

from .base import ProjectData, Repository
from .memory import InMemoryRepository

__all__ = ['InMemoryRepository', 'ProjectData', 'Repository']
