# runner.py
from __future__ import annotations

import os
import runpy
import subprocess
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional

from .errors import (
    TOOL_HINTS,
    ConfigError,
    PrerequisiteFailed,
    StepFailed,
    TaskError,
    UnknownTarget,
)
from .graph import Table, build_table, resolve_chain
from .model import Step, Target, TargetState
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> Table:
    """
    Load a target table from a python file path.

    The file must define either:
      - workflow() -> table or List[Target]
      - TARGETS = table or [Target, ...]

    Returns:
      the validated, immutable table
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise ConfigError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ConfigError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"taskrun_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        defined = globals_dict["workflow"]()
    elif "TARGETS" in globals_dict:
        defined = globals_dict["TARGETS"]
    else:
        raise ConfigError(
            f"{wf_path.name} defines no targets. "
            "Define workflow() -> List[Target] or TARGETS = [Target, ...]."
        )

    if isinstance(defined, Mapping):
        defined = list(defined.values())
    if not isinstance(defined, (list, tuple)) or not all(isinstance(t, Target) for t in defined):
        raise ConfigError(
            "Workflow must return/define a table or a List[Target]. "
            "Define workflow() -> List[Target] or TARGETS = [Target, ...]."
        )

    return build_table(defined)


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------

def plan(table: Table, name: str) -> List[str]:
    """Targets `run_target(table, name)` would execute, in order. Spawns nothing."""
    return resolve_chain(table, name)


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _spawn_hint(program: str, cwd: Path) -> str:
    if "/" in program:
        return f"No executable at {program} (relative to {cwd}). Was it built?"
    return TOOL_HINTS.get(program, f"Install {program} or fix PATH.")


def _run_step(target: Target, step: Step, index: int, root: Path, console: Console) -> None:
    cwd = (root / (step.cwd or ".")).resolve()
    if not cwd.is_dir():
        raise ConfigError(f"[{target.name}] step '{step.name}' cwd not found: {cwd}")

    overrides = target.step_env(step)
    env = os.environ.copy()
    env.update(overrides)
    if overrides:
        console.print_debug(f"[{target.name}] env overrides: {sorted(overrides)}")

    argv = step.argv
    try:
        proc = subprocess.run(argv, cwd=str(cwd), env=env)
    except FileNotFoundError:
        raise StepFailed(
            target=target.name,
            step=step.name,
            index=index,
            cmd=step.run,
            exit_code=127,
            hint=_spawn_hint(argv[0], cwd),
        ) from None
    except PermissionError:
        raise StepFailed(
            target=target.name,
            step=step.name,
            index=index,
            cmd=step.run,
            exit_code=126,
            hint=f"{argv[0]} is not executable.",
        ) from None
    except OSError as e:
        # exec format errors, ENOMEM and the like
        raise StepFailed(
            target=target.name,
            step=step.name,
            index=index,
            cmd=step.run,
            exit_code=126,
            hint=f"Could not start {argv[0]}: {e.strerror or e}",
        ) from None

    if proc.returncode < 0:
        raise StepFailed(
            target=target.name,
            step=step.name,
            index=index,
            cmd=step.run,
            signal=-proc.returncode,
        )
    if proc.returncode != 0:
        raise StepFailed(
            target=target.name,
            step=step.name,
            index=index,
            cmd=step.run,
            exit_code=proc.returncode,
        )


def _run_chain(
    table: Table,
    name: str,
    root: Path,
    console: Console,
    results: Dict[str, TargetState],
    executed: List[str],
    active: FrozenSet[str],
) -> None:
    if name not in table:
        raise UnknownTarget(name, list(table))
    if name in active:
        raise ConfigError(f"Prerequisite cycle detected at target '{name}'")

    tgt = table[name]

    # ---- prerequisite ----
    results[name] = TargetState.RESOLVING_PREREQUISITE
    if tgt.needs is not None:
        try:
            _run_chain(table, tgt.needs, root, console, results, executed, active | {name})
        except (StepFailed, PrerequisiteFailed) as e:
            results[name] = TargetState.FAILED
            raise PrerequisiteFailed(target=name, prerequisite=tgt.needs, cause=e) from e
        except TaskError:
            results[name] = TargetState.FAILED
            raise

    # ---- steps ----
    results[name] = TargetState.RUNNING_STEPS
    console.print_target_start(name)
    executed.append(name)
    for index, step in enumerate(tgt.steps):
        console.print_step(step.name, step.run)
        try:
            _run_step(tgt, step, index, root, console)
        except StepFailed as e:
            results[name] = TargetState.FAILED
            console.print_failure(step.name, str(e), status=e.status, hint=e.hint)
            raise
        except TaskError:
            results[name] = TargetState.FAILED
            raise

    results[name] = TargetState.SUCCEEDED
    console.print_success(name)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_target(
    table: Table,
    name: str,
    *,
    root: str | Path = ".",
    console: Optional[Console] = None,
    results: Optional[Dict[str, TargetState]] = None,
) -> List[str]:
    """
    Run `name` after its prerequisite chain, strictly sequentially.

    Raises UnknownTarget, StepFailed, PrerequisiteFailed or ConfigError on
    the first failure; steps already run are not undone. `results`, when
    given, receives every visited target's last state even on failure.

    Returns the names of the targets whose steps ran, in order.
    """
    console = console or get_console()
    if results is None:
        results = {}

    # fail on unknown names and cycles before anything is spawned
    chain = plan(table, name)
    for pending in chain:
        results[pending] = TargetState.PENDING

    executed: List[str] = []
    _run_chain(table, name, Path(root).resolve(), console, results, executed, frozenset())
    return executed
