# cli.py
from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

import click

from symflow.engine import State
from symflow.errors import SymflowError, WorkflowError
from symflow.runner import JobSpec, drive, load_workflow, plan, register_all
from symflow.settings import Settings
from symflow.ui.console import Console, get_console, set_console


def find_workflow_files() -> list[Path]:
    """
    Find all workflow files in the current directory.

    Returns:
        List of Path objects for workflow files
    """
    workflow_files = []
    current_dir = Path(".")

    default_workflow = current_dir / "symflow_workflow.py"
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for pattern in ("*_workflow.py", "*_graph.json"):
        for path in current_dir.glob(pattern):
            if path != default_workflow:
                workflow_files.append(path)

    return sorted(workflow_files)


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix not in (".py", ".json"):
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  symflow plan --workflow my_workflow.py",
            )
            sys.exit(1)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=[
                "Looked for:",
                "  symflow_workflow.py",
                "  *_workflow.py",
                "  *_graph.json",
            ],
            suggestion="Create a workflow file:\n  symflow_workflow.py\n\nOr specify a workflow explicitly:\n  symflow plan --workflow my_workflow.py",
        )
        sys.exit(1)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion="Specify a workflow explicitly:\n  symflow plan --workflow symflow_workflow.py",
        )
        sys.exit(1)

    return workflow_files[0]


def _load(workflow: str | None) -> tuple[Path, list[JobSpec]]:
    console = get_console()
    workflow_path = discover_workflow(workflow)
    try:
        specs = load_workflow(workflow_path)
    except WorkflowError as e:
        console.print_error(
            "Failed to load workflow",
            f"Could not load workflow from {workflow_path}",
            details=[str(e)],
        )
        sys.exit(1)
    console.print_workflow_loaded(workflow_path.name, len(specs))
    return workflow_path, specs


def _parse_token(token: str) -> tuple[int, str]:
    jobid, sep, event = token.partition(":")
    if not sep or not event:
        raise click.BadParameter(f"expected JOBID:EVENT, got {token!r}", param_hint="EVENTS")
    try:
        return int(jobid), event
    except ValueError:
        raise click.BadParameter(f"job id must be an integer, got {jobid!r}", param_hint="EVENTS") from None


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and engine debug logs)",
)
@click.pass_context
def cli(ctx, debug):
    """symflow: readiness tracking for symbol-linked job graphs."""
    console = Console(debug=debug)
    set_console(console)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    try:
        ctx.obj["settings"] = Settings.from_env()
    except ValueError as e:
        console.print_error("Invalid configuration", str(e))
        sys.exit(2)


@cli.command("plan")
@click.option("--workflow", default=None, help="Workflow file (.py or .json)")
@click.pass_context
def plan_cmd(ctx, workflow):
    """Print the waves of jobs that become ready together."""
    console = get_console()
    _path, specs = _load(workflow)
    try:
        waves = plan(specs, settings=ctx.obj["settings"])
    except SymflowError as e:
        console.print_exception(e)
        sys.exit(1)
    console.print_plan(waves, {s.jobid: s.name for s in specs if s.name})


@cli.command("graph")
@click.option("--workflow", default=None, help="Workflow file (.py or .json)")
@click.pass_context
def graph_cmd(ctx, workflow):
    """Print the inferred edges of every registered job."""
    console = get_console()
    _path, specs = _load(workflow)
    try:
        state = register_all(State(ctx.obj["settings"]), specs)
    except SymflowError as e:
        console.print_exception(e)
        sys.exit(1)
    console.print_header("GRAPH")
    for jobid in state.job_ids():
        console.print_job_edges(jobid, state.ancestors(jobid), state.children(jobid), state.outputs(jobid))


@cli.command("events")
@click.option("--workflow", default=None, help="Workflow file (.py or .json)")
@click.option("--strict-lifecycle/--no-strict-lifecycle", default=None, help="Reject out-of-order events")
@click.argument("events", nargs=-1, required=True)
@click.pass_context
def events_cmd(ctx, workflow, strict_lifecycle, events):
    """Register the workflow, then apply JOBID:EVENT tokens in order."""
    console = get_console()
    parsed = [_parse_token(t) for t in events]
    settings: Settings = ctx.obj["settings"]
    if strict_lifecycle is not None:
        settings = dataclasses.replace(settings, strict_lifecycle=strict_lifecycle)

    _path, specs = _load(workflow)
    console.print_header("EVENTS")
    try:
        state = register_all(State(settings), specs)
        for jobid, event in parsed:
            console.print_event(jobid, event, state.job_event(jobid, event))
    except SymflowError as e:
        console.print_error(e.kind, e.message, details=[f"{k}={v}" for k, v in e.details.items()])
        sys.exit(1)


@cli.command("run")
@click.option("--workflow", default=None, help="Workflow file (.py)")
@click.option("--workers", default=None, type=int, help="Number of parallel workers")
@click.option("--fail-fast/--no-fail-fast", default=True, help="Stop scheduling new jobs after first failure")
@click.pass_context
def run_cmd(ctx, workflow, workers, fail_fast):
    """Run the workflow's job callables as they become ready."""
    console = get_console()
    _path, specs = _load(workflow)
    try:
        results = drive(specs, max_workers=workers, fail_fast=fail_fast, settings=ctx.obj["settings"])
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except SymflowError as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_results(results)
    if any(v in ("failed", "blocked") for v in results.values()):
        sys.exit(1)


if __name__ == "__main__":
    cli()
