"""
Scenario file loading with ``extends:`` inheritance.

A scenario YAML may name a parent scenario with ``extends: base.yaml``; the
child's keys are deep-merged over the parent's, so a variant only needs to
spell out what it changes::

    # aggressive.yaml
    extends: base.yaml
    portfolio:
      dca_monthly: 2500
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml

__all__ = ['load', 'deep_merge']

SCENARIO_SUFFIXES = ('.yaml', '.yml')


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a new dict with `override` layered over `base`, recursing into
    nested dicts. Neither argument is modified. An explicit None in
    `override` replaces the base value (so a child scenario can drop a
    parent's `property:` with `property: null`).
    """
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _read(path: Path) -> Dict[str, Any]:
    with open(path, encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _load_file(path: Path, seen: Optional[Set[Path]] = None) -> Dict[str, Any]:
    seen = set() if seen is None else seen
    resolved = path.resolve()
    if resolved in seen:
        raise ValueError(f"Circular extends detected at '{path.name}'")
    seen.add(resolved)

    cfg = _read(path)
    parent = cfg.get('extends')
    overrides = {k: v for k, v in cfg.items() if k != 'extends'}
    if not parent:
        return overrides
    parent_fp = path.parent / parent
    if not parent_fp.exists():
        raise FileNotFoundError(f"Parent scenario '{parent}' not found for {path}")
    return deep_merge(_load_file(parent_fp, seen), overrides)


def _load_directory(path: Path) -> Dict[str, Dict[str, Any]]:
    raw = {
        fp.stem: _read(fp)
        for fp in sorted(path.iterdir())
        if fp.suffix in SCENARIO_SUFFIXES
    }

    def resolve(name: str, seen: Set[str]) -> Dict[str, Any]:
        if name in seen:
            raise ValueError(f"Circular extends detected in '{name}'")
        seen.add(name)
        cfg = raw.get(name)
        if cfg is None:
            raise ValueError(f"Scenario '{name}' not found in {path}")
        parent = cfg.get('extends')
        base = resolve(Path(parent).stem, seen) if parent else {}
        overrides = {k: v for k, v in cfg.items() if k != 'extends'}
        return deep_merge(base, overrides)

    return {name: resolve(name, set()) for name in raw if not name.startswith('_')}


def load(path: str) -> Any:
    """
    Load a scenario from a YAML file or a directory of YAMLs.
    If path is a directory, returns Dict[str, Dict] keyed by file stem
    (files starting with an underscore are shared bases: they can be extended
    but are not returned as scenarios).
    If path is a file, returns a single config dict, resolving 'extends'.
    """
    p = Path(path)
    if p.is_dir():
        return _load_directory(p)
    return _load_file(p)
