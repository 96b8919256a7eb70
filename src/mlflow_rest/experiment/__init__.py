"""Experiment tracking and management."""

from .tracker import (
    ExperimentResult,
    ExperimentTracker,
    run_experiment,
)

__all__ = [
    "ExperimentResult",
    "ExperimentTracker",
    "run_experiment",
]
