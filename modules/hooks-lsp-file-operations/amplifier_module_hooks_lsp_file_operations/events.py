"""Canonical event arguments handed to handler modules."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RenameArgs:
    """A rename or move from ``old_path`` to ``new_path``."""

    old_path: str
    new_path: str


@dataclass(frozen=True)
class PathArgs:
    """A create or delete affecting a single ``path``."""

    path: str


CanonicalEventArgs = RenameArgs | PathArgs


def normalize(
    payload: Any,
    *,
    old_keys: tuple[str, ...],
    new_keys: tuple[str, ...],
    path_keys: tuple[str, ...],
) -> CanonicalEventArgs:
    """Translate a plugin payload into canonical arguments.

    A mapping with both an old and a new field becomes ``RenameArgs``. Anything
    else becomes ``PathArgs``: the first path field found, or the payload itself
    when it is not a mapping. Never raises.
    """
    if isinstance(payload, Mapping):
        old = _first(payload, old_keys)
        new = _first(payload, new_keys)
        if old is not None and new is not None:
            return RenameArgs(old_path=str(old), new_path=str(new))
        path = _first(payload, path_keys)
        if path is None:
            path = old if old is not None else new
        return PathArgs(path="" if path is None else str(path))
    return PathArgs(path="" if payload is None else str(payload))


def _first(payload: Mapping, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None
