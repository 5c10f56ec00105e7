# graph.py
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Set

from .errors import ConfigError, UnknownTarget
from .model import Target


Table = Mapping[str, Target]


def build_table(targets: Iterable[Target]) -> Table:
    """
    Build the immutable target table.

    Requires:
      - target.name: str (unique)
      - target.needs: name of a target in the same table, or None
      - no target may (transitively) need itself
    """
    targets = list(targets)
    for t in targets:
        if not isinstance(t, Target):
            raise ConfigError(f"Expected Target, got {type(t).__name__}: {t!r}")

    names = [t.name for t in targets]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ConfigError(f"Duplicate target names found: {dupes}")

    by_name: Dict[str, Target] = {}
    for t in targets:
        if not t.steps:
            raise ConfigError(f"Target '{t.name}' has no steps")
        for step in t.steps:
            try:
                argv = step.argv
            except ValueError as e:
                raise ConfigError(f"Target '{t.name}' step '{step.name}': {e}") from e
            if not argv:
                raise ConfigError(f"Target '{t.name}' step '{step.name}' has an empty command")
        by_name[t.name] = t

    for t in targets:
        if t.needs is not None and t.needs not in by_name:
            raise ConfigError(
                f"Target '{t.name}' needs missing target '{t.needs}'. "
                f"Known targets: {names}"
            )

    table = MappingProxyType(by_name)
    for name in names:
        resolve_chain(table, name)
    return table


def resolve_chain(table: Table, name: str) -> List[str]:
    """
    Walk `needs` links from `name` and return the chain in run order
    (deepest prerequisite first, `name` last).
    """
    if name not in table:
        raise UnknownTarget(name, list(table))

    chain: List[str] = []
    seen: Set[str] = set()
    current: str | None = name
    while current is not None:
        if current in seen:
            loop = " -> ".join(chain + [current])
            raise ConfigError(f"Prerequisite cycle detected: {loop}")
        if current not in table:
            raise ConfigError(f"Target '{chain[-1]}' needs missing target '{current}'")
        seen.add(current)
        chain.append(current)
        current = table[current].needs

    chain.reverse()
    return chain
