#!/usr/bin/env python3
"""
Quick Start Examples
====================

Simple examples to get started with mlflow-rest. Needs a running tracking
server, e.g. ``mlflow server --port 5000``.

Usage:
    MLFLOW_TRACKING_URI=http://localhost:5000 uv run python examples/quick_start.py
"""

# ============================================================================
# 1. Experiments
# ============================================================================

def example_experiments():
    """Create, tag and search experiments."""
    from mlflow_rest import (
        MLFlow,
        get_or_create_experiment,
        iter_experiments,
        set_experiment_tag,
    )

    with MLFlow() as mlf:
        experiment = get_or_create_experiment(mlf, "quick-start", tags={"team": "vision"})
        set_experiment_tag(mlf, experiment, "stage", "demo")

        for exp in iter_experiments(mlf, filter="name LIKE 'quick%'"):
            print(f"{exp.experiment_id}: {exp.name} ({exp.lifecycle_stage})")


# ============================================================================
# 2. Runs and Logging
# ============================================================================

def example_runs():
    """Create a run and log metrics, params and tags."""
    from mlflow_rest import (
        MLFlow,
        RunStatus,
        create_run,
        get_full_metric_history,
        get_or_create_experiment,
        log_batch,
        log_metric,
        update_run,
    )
    from mlflow_rest.entities import now_millis

    with MLFlow() as mlf:
        experiment = get_or_create_experiment(mlf, "quick-start")
        run = create_run(mlf, experiment, run_name="baseline")

        log_batch(
            mlf,
            run,
            params={"model": "RandomForest", "n_estimators": 100},
            tags={"dataset": "care-pd"},
        )
        for step, loss in enumerate([0.9, 0.6, 0.4]):
            log_metric(mlf, run, "loss", loss, step=step)

        update_run(mlf, run, status=RunStatus.FINISHED, end_time=now_millis())

        for metric in get_full_metric_history(mlf, run, "loss"):
            print(f"step {metric.step}: loss={metric.value}")


# ============================================================================
# 3. Experiment Tracking
# ============================================================================

def example_experiment_tracking():
    """Track an experiment with the context-managed tracker."""
    from mlflow_rest.experiment import ExperimentTracker

    tracker = ExperimentTracker("quick-start", description="Quick start runs")

    with tracker.start_run("tracked-run"):
        tracker.log_params({"model": "SVM", "kernel": "rbf"})
        tracker.log_metrics({"accuracy": 0.82, "f1": 0.79})

    best = tracker.get_best_run("accuracy")
    if best:
        print(f"Best run: {best.info.run_name} ({best.data.metrics_dict['accuracy']:.2f})")
    tracker.close()


# ============================================================================
# Run Examples
# ============================================================================

if __name__ == "__main__":
    print("=" * 50)
    print("1. Experiments")
    print("=" * 50)
    example_experiments()

    print("\n" + "=" * 50)
    print("2. Runs and Logging")
    print("=" * 50)
    example_runs()

    print("\n" + "=" * 50)
    print("3. Experiment Tracking")
    print("=" * 50)
    example_experiment_tracking()
