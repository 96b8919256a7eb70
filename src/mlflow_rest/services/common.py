"""Helpers shared by the service modules."""

from __future__ import annotations

from typing import Union

from mlflow_rest.entities import Experiment, Run

ExperimentRef = Union[str, int, Experiment]
RunRef = Union[str, Run]


def experiment_id_of(experiment: ExperimentRef) -> str:
    """Experiment id from an id, a numeric id or an Experiment."""
    if isinstance(experiment, Experiment):
        return experiment.experiment_id
    if isinstance(experiment, bool):
        raise TypeError("Experiment id cannot be a bool")
    return str(experiment)


def run_id_of(run: RunRef) -> str:
    """Run id from an id or a Run."""
    if isinstance(run, Run):
        return run.info.run_id
    return run
