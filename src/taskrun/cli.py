# cli.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Tuple

import click

from taskrun.errors import TaskError
from taskrun.graph import Table
from taskrun.model import TargetState
from taskrun.runner import load_workflow, plan, run_target
from taskrun.targets import DEFAULT_TABLE
from taskrun.ui.console import Console, get_console, set_console

DEFAULT_WORKFLOW = "taskrun_workflow.py"


def find_workflow_files(directory: Path = Path(".")) -> list[Path]:
    """
    Find all workflow files in a directory.

    Returns:
        List of Path objects for workflow files
    """
    workflow_files = []

    default_workflow = directory / DEFAULT_WORKFLOW
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for path in directory.glob("*_workflow.py"):
        if path != default_workflow:
            workflow_files.append(path)

    return sorted(workflow_files)


def discover_table(workflow_arg: str | None) -> Tuple[str, Table]:
    """
    Resolve the target table from a --workflow argument, a workflow file in
    the current directory, or the built-in defaults.

    Returns:
        (label for display, table)

    Raises:
        SystemExit: If the workflow cannot be found or is ambiguous
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix != ".py":
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion=f"Create a workflow file or specify a different path:\n  taskrun run release --workflow {DEFAULT_WORKFLOW}",
            )
            sys.exit(1)
        return workflow_path.name, load_workflow(workflow_path)

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_debug("No workflow file found, using built-in targets")
        return "<built-in>", DEFAULT_TABLE

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a workflow explicitly:\n  taskrun run release --workflow {DEFAULT_WORKFLOW}",
        )
        sys.exit(1)

    return workflow_files[0].name, load_workflow(workflow_files[0])


def _load_or_exit(ctx, workflow: str | None) -> Tuple[str, Table]:
    console = get_console()
    try:
        return discover_table(workflow)
    except TaskError as e:
        console.print_error("Failed to load workflow", str(e))
        sys.exit(1)
    except Exception as e:
        console.print_error(
            "Failed to load workflow",
            f"Could not load workflow: {workflow or 'auto-discovered'}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)


workflow_option = click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {DEFAULT_WORKFLOW} if present)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """taskrun: run named targets, prerequisites first, one step at a time."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("target_name", metavar="TARGET")
@workflow_option
@click.option("--root", default=".", show_default=True, help="Directory steps run in")
@click.option("--dry-run", is_flag=True, default=False, help="Print the steps without running them")
@click.pass_context
def run(ctx, target_name, workflow, root, dry_run):
    """Run TARGET and its prerequisites."""
    console = get_console()
    label, table = _load_or_exit(ctx, workflow)
    results: dict[str, TargetState] = {}

    try:
        chain = plan(table, target_name)
        console.print_run_started(workflow=label, target=target_name, chain=chain)

        if dry_run:
            for name in chain:
                tgt = table[name]
                for step in tgt.steps:
                    console.print_plan_step(name, step.run, tgt.step_env(step))
            return

        run_target(table, target_name, root=root, console=console, results=results)
        console.print_results(results)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except TaskError as e:
        if results:
            console.print_results(results)
        console.print_error(type(e).__name__, str(e))
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)


@cli.command("list")
@workflow_option
@click.pass_context
def list_targets(ctx, workflow):
    """List the targets of a workflow."""
    console = get_console()
    label, table = _load_or_exit(ctx, workflow)
    console.print_header(f"Targets ({label})")
    for tgt in table.values():
        console.print_target_line(tgt.name, tgt.needs, tgt.description)


@cli.command()
@click.argument("target_name", metavar="TARGET")
@workflow_option
@click.pass_context
def show(ctx, target_name, workflow):
    """Show the prerequisite chain and commands of TARGET."""
    console = get_console()
    label, table = _load_or_exit(ctx, workflow)
    try:
        chain = plan(table, target_name)
    except TaskError as e:
        console.print_error(type(e).__name__, str(e))
        sys.exit(1)

    console.print_header(f"{target_name} ({label})")
    console.print_info(f"Chain: {' -> '.join(chain)}")
    for name in chain:
        tgt = table[name]
        for step in tgt.steps:
            console.print_plan_step(name, step.run, tgt.step_env(step))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
