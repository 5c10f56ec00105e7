from .dsl import sh, target, table, TargetBuilder, build
from .errors import TaskError, ConfigError, UnknownTarget, StepFailed, PrerequisiteFailed
from .graph import build_table, resolve_chain
from .model import Step, Target, TargetState
from .runner import run_target, plan, load_workflow

__all__ = [
    "sh", "target", "table", "TargetBuilder", "build",
    "TaskError", "ConfigError", "UnknownTarget", "StepFailed", "PrerequisiteFailed",
    "build_table", "resolve_chain",
    "Step", "Target", "TargetState",
    "run_target", "plan", "load_workflow",
]
