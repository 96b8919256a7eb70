"""CLI application using Typer."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from mlflow_rest.core.client import MLFlow

app = typer.Typer(
    name="mlflow-rest",
    help="Command line client for the MLflow tracking REST API",
    no_args_is_help=True,
)
console = Console()

# Sub-applications
config_app = typer.Typer(help="Configuration management")
experiment_app = typer.Typer(help="Experiments")
run_app = typer.Typer(help="Runs, metrics and params")
user_app = typer.Typer(help="Users (auth-enabled servers)")
permission_app = typer.Typer(help="Experiment permissions (auth-enabled servers)")

app.add_typer(config_app, name="config")
app.add_typer(experiment_app, name="experiment")
app.add_typer(run_app, name="run")
app.add_typer(user_app, name="user")
app.add_typer(permission_app, name="permission")

_state: dict[str, Optional[str]] = {"uri": None}

# Config keys stored verbatim by `config set`
_STRING_KEYS = {"uri", "api_version", "username", "password", "token"}


@contextmanager
def connect() -> Iterator[MLFlow]:
    """Open a connection and turn client errors into a clean exit."""
    from mlflow_rest.core.client import MLFlow
    from mlflow_rest.core.errors import MLFlowError

    try:
        with MLFlow(_state["uri"]) as mlf:
            yield mlf
    except (MLFlowError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _format_time(millis: int | None) -> str:
    if not millis:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _parse_pairs(values: list[str] | None) -> dict[str, str]:
    pairs = {}
    for item in values or []:
        if "=" not in item:
            console.print(f"[red]Expected KEY=VALUE, got '{item}'[/red]")
            raise typer.Exit(1)
        key, value = item.split("=", 1)
        pairs[key] = value
    return pairs


# ============================================================================
# Config commands
# ============================================================================


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from mlflow_rest.core.config import get_settings

    settings = get_settings()
    data = settings.to_dict()

    console.print("[bold]Current Configuration[/bold]\n")

    for section, values in data.items():
        console.print(f"[cyan]{section}:[/cyan]")
        for key, value in values.items():
            # Mask sensitive values
            if key in ("password", "token") and value:
                value = "***"
            console.print(f"  {key}: {value}")
        console.print()


@config_app.command("init")
def config_init(
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = Path(
        "config/mlflow-rest.yaml"
    ),
):
    """Initialize configuration file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Abort()

    yaml_content = """# MLflow REST client configuration

tracking:
  # Or set MLFLOW_TRACKING_URI
  uri: http://localhost:5000
  api_version: "2.0"
  # Basic auth; or set MLFLOW_TRACKING_USERNAME / MLFLOW_TRACKING_PASSWORD
  username: ""
  password: ""
  # Bearer token; or set MLFLOW_TRACKING_TOKEN
  token: ""
  timeout: 30.0
  verify_ssl: true

logging:
  level: WARNING
  rich_tracebacks: true
"""

    path.write_text(yaml_content)
    console.print(f"[green]Created config at {path}[/green]")


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Config key (e.g., tracking.uri)")],
    value: Annotated[str, typer.Argument(help="New value")],
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = Path(
        "config/mlflow-rest.yaml"
    ),
):
    """Set a configuration value."""
    import yaml

    if not path.exists():
        console.print("[red]Config file not found. Run 'mlflow-rest config init' first.[/red]")
        raise typer.Exit(1)

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    # Parse key path
    parts = key.split(".")
    current = data

    for part in parts[:-1]:
        if part not in current:
            current[part] = {}
        current = current[part]

    # Convert value type
    if parts[-1] in _STRING_KEYS:
        pass
    elif value.lower() == "true":
        value = True
    elif value.lower() == "false":
        value = False
    elif value.isdigit():
        value = int(value)
    else:
        try:
            value = float(value)
        except ValueError:
            pass

    current[parts[-1]] = value

    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False)

    console.print(f"[green]Set {key} = {value}[/green]")


# ============================================================================
# Experiment commands
# ============================================================================


@experiment_app.command("list")
def experiment_list(
    filter: Annotated[str, typer.Option("--filter", "-f", help="Filter expression")] = "",
    view: Annotated[
        str, typer.Option("--view", help="ACTIVE_ONLY, DELETED_ONLY or ALL")
    ] = "ACTIVE_ONLY",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Max experiments to show")] = 50,
):
    """List experiments."""
    from mlflow_rest.entities import ViewType
    from mlflow_rest.services import search_experiments

    with connect() as mlf:
        view_type = ViewType(view.upper())
        experiments, _ = search_experiments(
            mlf, max_results=limit, filter=filter, view_type=view_type
        )

    if not experiments:
        console.print("[yellow]No experiments found[/yellow]")
        return

    table = Table(title="Experiments")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Stage")
    table.add_column("Artifact Location", max_width=50)

    for e in experiments:
        table.add_row(e.experiment_id, e.name, e.lifecycle_stage or "-", e.artifact_location or "-")

    console.print(table)


@experiment_app.command("get")
def experiment_get(
    experiment: Annotated[str, typer.Argument(help="Experiment ID or name")],
    by_name: Annotated[bool, typer.Option("--name", "-n", help="Look up by name")] = False,
):
    """Show an experiment."""
    from mlflow_rest.services import get_experiment, get_experiment_by_name

    with connect() as mlf:
        if by_name:
            exp = get_experiment_by_name(mlf, experiment)
        else:
            exp = get_experiment(mlf, experiment)

    console.print(f"\n[bold cyan]{exp.name}[/bold cyan] (id {exp.experiment_id})")
    console.print(f"Stage: {exp.lifecycle_stage}")
    console.print(f"Artifacts: {exp.artifact_location}")
    console.print(f"Created: {_format_time(exp.creation_time)}")
    console.print(f"Updated: {_format_time(exp.last_update_time)}")
    if exp.tags:
        console.print("\n[bold]Tags:[/bold]")
        for t in exp.tags:
            console.print(f"  {t.key}: {t.value}")


@experiment_app.command("create")
def experiment_create(
    name: Annotated[str, typer.Argument(help="Experiment name")],
    artifact_location: Annotated[
        Optional[str], typer.Option("--artifact-location", "-a", help="Artifact root")
    ] = None,
    tag: Annotated[
        Optional[list[str]], typer.Option("--tag", "-t", help="Tag as KEY=VALUE")
    ] = None,
    if_missing: Annotated[
        bool, typer.Option("--if-missing", help="Reuse an existing experiment with this name")
    ] = False,
):
    """Create an experiment."""
    from mlflow_rest.services import create_experiment, get_or_create_experiment

    tags = _parse_pairs(tag)
    with connect() as mlf:
        if if_missing:
            experiment_id = get_or_create_experiment(mlf, name, artifact_location, tags).experiment_id
        else:
            experiment_id = create_experiment(mlf, name, artifact_location, tags)

    console.print(f"[green]Experiment '{name}': {experiment_id}[/green]")


@experiment_app.command("delete")
def experiment_delete(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
):
    """Mark an experiment for deletion."""
    from mlflow_rest.services import delete_experiment

    with connect() as mlf:
        delete_experiment(mlf, experiment_id)
    console.print(f"[green]Deleted experiment {experiment_id}[/green]")


@experiment_app.command("restore")
def experiment_restore(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
):
    """Restore a deleted experiment."""
    from mlflow_rest.services import restore_experiment

    with connect() as mlf:
        restore_experiment(mlf, experiment_id)
    console.print(f"[green]Restored experiment {experiment_id}[/green]")


@experiment_app.command("rename")
def experiment_rename(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    new_name: Annotated[str, typer.Argument(help="New name")],
):
    """Rename an experiment."""
    from mlflow_rest.services import update_experiment

    with connect() as mlf:
        update_experiment(mlf, experiment_id, new_name)
    console.print(f"[green]Renamed experiment {experiment_id} to '{new_name}'[/green]")


@experiment_app.command("tag")
def experiment_tag(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    key: Annotated[str, typer.Argument(help="Tag key")],
    value: Annotated[str, typer.Argument(help="Tag value")],
):
    """Set a tag on an experiment."""
    from mlflow_rest.services import set_experiment_tag

    with connect() as mlf:
        set_experiment_tag(mlf, experiment_id, key, value)
    console.print(f"[green]Set {key} = {value}[/green]")


# ============================================================================
# Run commands
# ============================================================================


@run_app.command("list")
def run_list(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    filter: Annotated[str, typer.Option("--filter", "-f", help="Filter expression")] = "",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Max runs to show")] = 20,
):
    """List runs in an experiment."""
    from mlflow_rest.services import search_runs

    with connect() as mlf:
        runs, _ = search_runs(
            mlf,
            [experiment_id],
            filter=filter,
            max_results=limit,
            order_by=["attributes.start_time DESC"],
        )

    if not runs:
        console.print("[yellow]No runs found[/yellow]")
        return

    table = Table(title=f"Runs: experiment {experiment_id}")
    table.add_column("Run ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Started")
    table.add_column("Metrics")

    for run in runs:
        metrics_str = ", ".join(f"{m.key}={m.value:.3f}" for m in run.data.metrics[:3])
        table.add_row(
            run.info.run_id[:8],
            run.info.run_name or "-",
            run.info.status.value if run.info.status else "-",
            _format_time(run.info.start_time),
            metrics_str or "-",
        )

    console.print(table)


@run_app.command("get")
def run_get(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
):
    """Show a run with its params, metrics and tags."""
    from mlflow_rest.services import get_run

    with connect() as mlf:
        run = get_run(mlf, run_id)

    info = run.info
    console.print(f"\n[bold cyan]Run: {info.run_name or info.run_id[:8]}[/bold cyan]")
    console.print(f"\nRun ID: {info.run_id}")
    console.print(f"Experiment: {info.experiment_id}")
    console.print(f"Status: {info.status.value if info.status else '-'}")
    console.print(f"Started: {_format_time(info.start_time)}")
    console.print(f"Ended: {_format_time(info.end_time)}")

    for title, values in (
        ("Parameters", run.data.params_dict),
        ("Metrics", run.data.metrics_dict),
        ("Tags", run.data.tags_dict),
    ):
        if values:
            console.print(f"\n[bold]{title}:[/bold]")
            for k, v in sorted(values.items()):
                console.print(f"  {k}: {v}")


@run_app.command("create")
def run_create(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Run name")] = None,
    tag: Annotated[
        Optional[list[str]], typer.Option("--tag", "-t", help="Tag as KEY=VALUE")
    ] = None,
):
    """Create a run."""
    from mlflow_rest.services import create_run

    with connect() as mlf:
        run = create_run(mlf, experiment_id, run_name=name, tags=_parse_pairs(tag))
    console.print(f"[green]Created run {run.info.run_id}[/green]")


@run_app.command("finish")
def run_finish(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
    status: Annotated[
        str, typer.Option("--status", "-s", help="FINISHED, FAILED or KILLED")
    ] = "FINISHED",
):
    """Terminate a run with a final status."""
    from mlflow_rest.entities import RunStatus, now_millis
    from mlflow_rest.services import update_run

    with connect() as mlf:
        info = update_run(mlf, run_id, status=RunStatus(status.upper()), end_time=now_millis())
    console.print(f"[green]Run {info.run_id} is {info.status.value}[/green]")


@run_app.command("delete")
def run_delete(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
):
    """Mark a run for deletion."""
    from mlflow_rest.services import delete_run

    with connect() as mlf:
        delete_run(mlf, run_id)
    console.print(f"[green]Deleted run {run_id}[/green]")


@run_app.command("restore")
def run_restore(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
):
    """Restore a deleted run."""
    from mlflow_rest.services import restore_run

    with connect() as mlf:
        restore_run(mlf, run_id)
    console.print(f"[green]Restored run {run_id}[/green]")


@run_app.command("tag")
def run_tag(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
    key: Annotated[str, typer.Argument(help="Tag key")],
    value: Annotated[Optional[str], typer.Argument(help="Tag value")] = None,
    delete: Annotated[bool, typer.Option("--delete", "-d", help="Delete the tag")] = False,
):
    """Set or delete a tag on a run."""
    from mlflow_rest.services import delete_run_tag, set_run_tag

    if not delete and value is None:
        console.print("[red]Provide a value or --delete[/red]")
        raise typer.Exit(1)

    with connect() as mlf:
        if delete:
            delete_run_tag(mlf, run_id, key)
        else:
            set_run_tag(mlf, run_id, key, value)

    console.print(f"[green]{'Deleted' if delete else 'Set'} tag {key}[/green]")


@run_app.command("log-metric")
def run_log_metric(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
    key: Annotated[str, typer.Argument(help="Metric name")],
    value: Annotated[float, typer.Argument(help="Metric value")],
    step: Annotated[Optional[int], typer.Option("--step", "-s", help="Step")] = None,
):
    """Log a metric value."""
    from mlflow_rest.services import log_metric

    with connect() as mlf:
        log_metric(mlf, run_id, key, value, step=step)
    console.print(f"[green]Logged {key} = {value}[/green]")


@run_app.command("log-param")
def run_log_param(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
    key: Annotated[str, typer.Argument(help="Param name")],
    value: Annotated[str, typer.Argument(help="Param value")],
):
    """Log a param."""
    from mlflow_rest.services import log_param

    with connect() as mlf:
        log_param(mlf, run_id, key, value)
    console.print(f"[green]Logged {key} = {value}[/green]")


@run_app.command("history")
def run_history(
    run_id: Annotated[str, typer.Argument(help="Run ID")],
    metric: Annotated[str, typer.Argument(help="Metric name")],
):
    """Show every logged value of a metric."""
    from mlflow_rest.services import get_full_metric_history

    with connect() as mlf:
        history = get_full_metric_history(mlf, run_id, metric)

    if not history:
        console.print("[yellow]No values logged[/yellow]")
        return

    table = Table(title=f"{metric}: run {run_id[:8]}")
    table.add_column("Step", justify="right")
    table.add_column("Value", justify="right", style="cyan")
    table.add_column("Logged")

    for m in history:
        table.add_row(
            str(m.step) if m.step is not None else "-",
            f"{m.value:.6g}",
            _format_time(m.timestamp),
        )

    console.print(table)


@run_app.command("compare")
def run_compare(
    experiment_name: Annotated[str, typer.Argument(help="Experiment name")],
    metrics: Annotated[
        str, typer.Option("--metrics", "-m", help="Metrics to compare (comma-separated)")
    ] = "accuracy,f1",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Max runs to compare")] = 50,
):
    """Compare runs in an experiment."""
    from mlflow_rest.experiment import ExperimentTracker

    with connect() as mlf:
        tracker = ExperimentTracker(experiment_name, instance=mlf)
        runs = tracker.list_runs(max_results=limit)

    if not runs:
        console.print("[yellow]No runs found[/yellow]")
        return

    metric_list = [m.strip() for m in metrics.split(",")]

    table = Table(title=f"Comparison: {experiment_name}")
    table.add_column("Run", style="cyan")
    table.add_column("Name")
    for m in metric_list:
        table.add_column(m, justify="right")

    for run in runs:
        values = run.data.metrics_dict
        row = [run.info.run_id[:8], run.info.run_name or "-"]
        for m in metric_list:
            val = values.get(m)
            row.append(f"{val:.4f}" if val is not None else "-")
        table.add_row(*row)

    console.print(table)


@run_app.command("best")
def run_best(
    experiment_name: Annotated[str, typer.Argument(help="Experiment name")],
    metric: Annotated[str, typer.Option("--metric", "-m", help="Metric to optimize")] = "accuracy",
    minimize: Annotated[
        bool, typer.Option("--minimize", help="Minimize metric instead of maximize")
    ] = False,
):
    """Get the best run by a metric."""
    from mlflow_rest.experiment import ExperimentResult, ExperimentTracker

    with connect() as mlf:
        tracker = ExperimentTracker(experiment_name, instance=mlf)
        best_run = tracker.get_best_run(metric, maximize=not minimize)

    if not best_run:
        console.print("[yellow]No runs found[/yellow]")
        return

    result = ExperimentResult.from_run(best_run, experiment_name)

    console.print(f"\n[bold cyan]Best Run: {result.run_name or result.run_id[:8]}[/bold cyan]")
    console.print(f"\nRun ID: {result.run_id}")
    console.print(f"Status: {result.status}")
    console.print(f"Started: {result.start_time}")

    console.print("\n[bold]Parameters:[/bold]")
    for k, v in result.params.items():
        console.print(f"  {k}: {v}")

    console.print("\n[bold]Metrics:[/bold]")
    for k, v in sorted(result.metrics.items()):
        highlight = " [green]← best[/green]" if k == metric else ""
        console.print(f"  {k}: {v:.4f}{highlight}")


# ============================================================================
# User commands
# ============================================================================


@user_app.command("create")
def user_create(
    username: Annotated[str, typer.Argument(help="Username")],
    password: Annotated[
        str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password")
    ],
):
    """Create a user."""
    from mlflow_rest.services import create_user

    with connect() as mlf:
        user = create_user(mlf, username, password)
    console.print(f"[green]Created user {user.username} (id {user.id})[/green]")


@user_app.command("get")
def user_get(
    username: Annotated[str, typer.Argument(help="Username")],
):
    """Show a user and their permissions."""
    from mlflow_rest.services import get_user

    with connect() as mlf:
        user = get_user(mlf, username)

    console.print(f"\n[bold cyan]{user.username}[/bold cyan] (id {user.id})")
    console.print(f"Admin: {'Yes' if user.is_admin else 'No'}")

    if user.experiment_permissions or user.registered_model_permissions:
        table = Table(title="Permissions")
        table.add_column("Kind")
        table.add_column("Resource", style="cyan")
        table.add_column("Permission")
        for p in user.experiment_permissions:
            table.add_row("experiment", p.experiment_id, p.permission.value)
        for p in user.registered_model_permissions:
            table.add_row("registered model", p.name, p.permission.value)
        console.print(table)


@user_app.command("set-admin")
def user_set_admin(
    username: Annotated[str, typer.Argument(help="Username")],
    revoke: Annotated[bool, typer.Option("--revoke", help="Remove admin rights")] = False,
):
    """Grant or revoke admin rights."""
    from mlflow_rest.services import update_user_admin

    with connect() as mlf:
        update_user_admin(mlf, username, not revoke)
    console.print(f"[green]{username} admin: {not revoke}[/green]")


@user_app.command("delete")
def user_delete(
    username: Annotated[str, typer.Argument(help="Username")],
):
    """Delete a user."""
    from mlflow_rest.services import delete_user

    with connect() as mlf:
        delete_user(mlf, username)
    console.print(f"[green]Deleted user {username}[/green]")


# ============================================================================
# Permission commands
# ============================================================================


@permission_app.command("grant")
def permission_grant(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    username: Annotated[str, typer.Argument(help="Username")],
    permission: Annotated[
        str, typer.Argument(help="READ, EDIT, MANAGE or NO_PERMISSIONS")
    ] = "READ",
    update: Annotated[
        bool, typer.Option("--update", "-u", help="Change an existing permission")
    ] = False,
):
    """Grant a user a permission on an experiment."""
    from mlflow_rest.entities import Permission
    from mlflow_rest.services import create_experiment_permission, update_experiment_permission

    with connect() as mlf:
        level = Permission(permission.upper())
        if update:
            update_experiment_permission(mlf, experiment_id, username, level)
        else:
            create_experiment_permission(mlf, experiment_id, username, level)
    console.print(f"[green]{username}: {level.value} on experiment {experiment_id}[/green]")


@permission_app.command("show")
def permission_show(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    username: Annotated[str, typer.Argument(help="Username")],
):
    """Show a user's permission on an experiment."""
    from mlflow_rest.services import get_experiment_permission

    with connect() as mlf:
        perm = get_experiment_permission(mlf, experiment_id, username)
    console.print(f"{username}: [cyan]{perm.permission.value}[/cyan] on experiment {perm.experiment_id}")


@permission_app.command("revoke")
def permission_revoke(
    experiment_id: Annotated[str, typer.Argument(help="Experiment ID")],
    username: Annotated[str, typer.Argument(help="Username")],
):
    """Remove a user's permission on an experiment."""
    from mlflow_rest.services import delete_experiment_permission

    with connect() as mlf:
        delete_experiment_permission(mlf, experiment_id, username)
    console.print(f"[green]Revoked {username} on experiment {experiment_id}[/green]")


# ============================================================================
# Main entry point
# ============================================================================


@app.callback()
def main(
    uri: Annotated[
        Optional[str], typer.Option("--uri", "-u", help="Tracking server URI", envvar="MLFLOW_TRACKING_URI")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log HTTP requests")] = False,
):
    """Command line client for the MLflow tracking REST API."""
    from mlflow_rest.core.logging import setup_logging

    _state["uri"] = uri
    setup_logging("DEBUG" if verbose else None)


if __name__ == "__main__":
    app()
