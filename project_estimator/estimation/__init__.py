"""PERT three-point estimation."""

from .pert import Estimate, estimate, validate_durations

__all__ = ['Estimate', 'estimate', 'validate_durations']
