# model.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Step:
    """A single external command inside a target."""
    name: str
    run: str
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: str | None = None

    @property
    def argv(self) -> List[str]:
        # program + arguments, never handed to a shell
        return shlex.split(self.run)


@dataclass(frozen=True)
class Target:
    """
    A named unit of work: ordered steps plus at most one prerequisite.

    `needs` names the target that must fully succeed before any of
    these steps run. `env` applies to every step; a step's own env wins.
    """
    name: str
    steps: Tuple[Step, ...]
    needs: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict)
    description: str = ""

    def step_env(self, step: Step) -> Dict[str, str]:
        merged = dict(self.env)
        merged.update(step.env)
        return merged


class TargetState(str, Enum):
    PENDING = "pending"
    RESOLVING_PREREQUISITE = "resolving-prerequisite"
    RUNNING_STEPS = "running-steps"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (TargetState.SUCCEEDED, TargetState.FAILED)
