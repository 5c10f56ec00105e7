# taskrun_workflow.py
# Targets for the detector project: build + run, build + run with backtraces,
# and the writeup PDF.
from __future__ import annotations

from taskrun.targets import default_targets


def workflow():
    return default_targets()
