# src/taskrun/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional

from .graph import Table, build_table
from .model import Step, Target


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def sh(
    name: str,
    cmd: str,
    *,
    env: Optional[Dict[str, str]] = None,
    cwd: str | None = None,
) -> Step:
    """Create a command step. `env` is visible to this step's process only."""
    return Step(name=name, run=cmd, env=_str_env(env), cwd=cwd)


def _str_env(env: Optional[Dict[str, object]]) -> Dict[str, str]:
    # subprocess wants str values
    return {str(k): str(v) for k, v in (env or {}).items()}


# ---------------------------------------------------------------------
# Functional Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    *steps: Step,  # allow: target("x", sh(...), sh(...))
    needs: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    description: str = "",
    cwd: str | None = None,  # default cwd applied to steps missing cwd
) -> Target:
    if not steps:
        raise ValueError(f"target({name!r}) must have at least one step")

    steps_final = list(steps)
    if cwd is not None:
        steps_final = [s if s.cwd is not None else replace(s, cwd=cwd) for s in steps_final]

    return Target(
        name=name,
        steps=tuple(steps_final),
        needs=needs,
        env=_str_env(env),
        description=description,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class TargetBuilder:
    def __init__(self, name: str):
        self.name = name
        self._needs: Optional[str] = None
        self._steps: list[Step] = []
        self._env: dict[str, str] = {}
        self._description = ""

    def depends_on(self, target_name: str):
        if self._needs is not None and self._needs != target_name:
            raise ValueError(
                f"Target '{self.name}' already depends on '{self._needs}'; "
                "only one prerequisite per target is supported"
            )
        self._needs = target_name
        return self

    def define_step(
        self,
        name: str,
        run: str,
        cwd: str | None = None,
        env: Optional[Dict[str, str]] = None,
    ):
        self._steps.append(sh(name, run, env=env, cwd=cwd))
        return self

    def with_env(self, **env):
        self._env.update(_str_env(env))
        return self

    def describe(self, text: str):
        self._description = text
        return self

    def build(self) -> Target:
        if not self._steps:
            raise ValueError(f"Target '{self.name}' has no steps")
        return Target(
            name=self.name,
            steps=tuple(self._steps),
            needs=self._needs,
            env=dict(self._env),
            description=self._description,
        )


def build(name: str) -> TargetBuilder:
    """Convenience: build('release').define_step(...).build()"""
    return TargetBuilder(name)


# ---------------------------------------------------------------------
# Table helper (single-file story)
# ---------------------------------------------------------------------

def table(*targets: Target) -> Table:
    """
    Validated, immutable target table.

    Users can write:
        from taskrun import table, target, sh

        def workflow():
            return table(
                target(...),
                target(...),
            )

    Or define the list directly:
        TARGETS = [target(...), target(...)]
    """
    return build_table(targets)
