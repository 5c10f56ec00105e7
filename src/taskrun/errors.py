# errors.py
from __future__ import annotations

import signal as _signal
from dataclasses import dataclass, field
from typing import List, Optional


TOOL_HINTS = {
    "cargo": "Install Rust (includes cargo) or fix PATH.",
    "pandoc": "Install pandoc or fix PATH.",
    "python3": "Install Python 3 or fix PATH (python3).",
    "make": "Install make or fix PATH.",
}


class TaskError(Exception):
    """Base class for every failure surfaced by taskrun."""


@dataclass
class ConfigError(TaskError):
    """The target table (or the workflow file defining it) is invalid."""
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class UnknownTarget(TaskError):
    name: str
    known: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Unknown target '{self.name}'. Known targets: {self.known}"


@dataclass
class StepFailed(TaskError):
    """
    An external command exited non-zero, was killed by a signal, or could
    not be spawned at all.

    `signal` is set instead of `exit_code` when the process was killed.
    """
    target: str
    step: str
    index: int
    cmd: str
    exit_code: Optional[int] = None
    signal: Optional[int] = None
    hint: Optional[str] = None

    @property
    def status(self) -> str:
        if self.signal is not None:
            try:
                sig_name = _signal.Signals(self.signal).name
            except ValueError:
                sig_name = str(self.signal)
            return f"signal={sig_name}"
        return f"exit={self.exit_code}"

    def __str__(self) -> str:
        lines = [
            f"[{self.target}] step {self.index + 1} '{self.step}' failed ({self.status}): {self.cmd}"
        ]
        if self.hint:
            lines.append(f"hint={self.hint}")
        return "\n".join(lines)


@dataclass
class PrerequisiteFailed(TaskError):
    target: str
    prerequisite: str
    cause: TaskError

    @property
    def root_cause(self) -> TaskError:
        err: TaskError = self
        while isinstance(err, PrerequisiteFailed):
            err = err.cause
        return err

    def __str__(self) -> str:
        return f"[{self.target}] prerequisite '{self.prerequisite}' failed\n{self.cause}"
