# targets.py
from __future__ import annotations

from typing import List

from .dsl import sh, table, target
from .graph import Table
from .model import Target

# Paths and programs stay plain constants: no templating.
CARGO_BUILD = "cargo build --release"
DETECTOR_BIN = "./target/release/detector"
TRACE_ENV = {"RUST_BACKTRACE": "1"}

WRITEUP_SOURCE = "writeup.md"
WRITEUP_OUTPUT = "writeup.pdf"
PANDOC = f"pandoc {WRITEUP_SOURCE} -o {WRITEUP_OUTPUT}"


def default_targets() -> List[Target]:
    return [
        target(
            "release",
            sh("Build detector", CARGO_BUILD),
            sh("Run detector", DETECTOR_BIN),
            description="build the detector in release mode and run it",
        ),
        target(
            "btrace",
            sh("Build detector", CARGO_BUILD),
            sh("Run detector (backtrace)", DETECTOR_BIN, env=TRACE_ENV),
            description="like release, with RUST_BACKTRACE=1 for the run step",
        ),
        target(
            "writeup",
            sh("Render writeup", PANDOC),
            description=f"render {WRITEUP_SOURCE} to {WRITEUP_OUTPUT}",
        ),
    ]


DEFAULT_TABLE: Table = table(*default_targets())
