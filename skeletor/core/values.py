"""Template values: nested mappings with recursive merge semantics."""
import copy
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from skeletor.core.errors import ValuesError

Values = Dict[str, Any]


def merge_values(base: Optional[Mapping[str, Any]], override: Optional[Mapping[str, Any]]) -> Values:
    """Merge override on top of base and return a new mapping.

    Keys holding a mapping on both sides are merged recursively. Any other
    value in override replaces the base value wholesale, so a scalar
    override drops a nested mapping from base entirely.

    Neither input is modified.
    """
    result: Values = copy.deepcopy(dict(base or {}))

    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = merge_values(current, value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def merge_all(*values: Optional[Mapping[str, Any]]) -> Values:
    """Merge any number of value maps left to right."""
    merged: Values = {}
    for other in values:
        merged = merge_values(merged, other)
    return merged


def load_values_file(path) -> Values:
    """Load values from a YAML file.

    Raises:
        ValuesError: If the file cannot be read or is not a mapping
    """
    values_path = Path(path)
    try:
        with open(values_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ValuesError(f"failed to read values file {values_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ValuesError(f"invalid YAML in values file {values_path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValuesError(f"values file {values_path} must contain a mapping")

    return data


def parse_set_value(expression: str) -> Values:
    """Parse a single ``a.b.c=value`` expression into a nested mapping.

    The right-hand side is interpreted as a YAML scalar, so ``true`` becomes
    a bool and ``3`` an int.
    """
    key, sep, raw = expression.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValuesError(f"invalid value {expression!r}, expected <key>=<value>")

    parts = key.split(".")
    if any(not part for part in parts):
        raise ValuesError(f"invalid key {key!r} in {expression!r}")

    try:
        value = yaml.safe_load(raw) if raw else ""
    except yaml.YAMLError:
        value = raw

    if isinstance(value, (dict, list)):
        # Only scalars on the command line
        value = raw

    result: Values = {}
    current = result
    for part in parts[:-1]:
        current[part] = {}
        current = current[part]
    current[parts[-1]] = value

    return result


def parse_set_values(expressions: Iterable[str]) -> Values:
    """Parse and merge a sequence of ``key=value`` expressions left to right."""
    merged: Values = {}
    for expression in expressions:
        merged = merge_values(merged, parse_set_value(expression))
    return merged
