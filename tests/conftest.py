from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from taskrun import runner
from taskrun.ui.console import Console


@dataclass
class Spawn:
    argv: List[str]
    env: Dict[str, str]
    cwd: Optional[str]


@dataclass
class SpawnRecorder:
    """Stands in for subprocess.run; exit codes are keyed by the joined argv."""
    calls: List[Spawn] = field(default_factory=list)
    exit_codes: Dict[str, int] = field(default_factory=dict)
    missing: set = field(default_factory=set)

    def __call__(self, argv, cwd=None, env=None, **kwargs):
        cmd = " ".join(argv)
        if argv[0] in self.missing:
            raise FileNotFoundError(argv[0])
        self.calls.append(Spawn(argv=list(argv), env=dict(env or {}), cwd=cwd))
        return subprocess.CompletedProcess(argv, self.exit_codes.get(cmd, 0))

    def fail(self, cmd: str, code: int = 1) -> None:
        self.exit_codes[cmd] = code

    @property
    def commands(self) -> List[str]:
        return [" ".join(c.argv) for c in self.calls]


@pytest.fixture
def spawns(monkeypatch) -> SpawnRecorder:
    recorder = SpawnRecorder()
    monkeypatch.setattr(runner.subprocess, "run", recorder)
    return recorder


@pytest.fixture
def console() -> Console:
    return Console(debug=True)
