"""Configuration resolution for the file operations hook.

Options arrive the same way every Amplifier module gets them: a plain dict,
deep-merged over defaults. Unknown keys are ignored; values that cannot be
used (a non-numeric timeout, a flag that is not true or false, a non-mapping
``operations``) fail at setup time with ``ConfigurationError`` instead of
surfacing later during dispatch.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .operations import Operation

logger = logging.getLogger(__name__)

MODULE_NAME = "hooks-lsp-file-operations"

DEFAULT_CONFIG: dict[str, Any] = {
    "debug": False,
    "timeout_ms": 10000,
    "operations": {op.value: True for op in Operation},
}


class FileOperationsError(Exception):
    """Base error for the file operations hook."""


class ConfigurationError(FileOperationsError):
    """Raised when options cannot be turned into a configuration."""


@dataclass(frozen=True)
class FileOperationsConfig:
    debug: bool = False
    timeout_ms: int = 10000
    operations: Mapping[Operation, bool] = field(
        default_factory=lambda: MappingProxyType({op: True for op in Operation})
    )

    def enabled(self, operation: Operation) -> bool:
        return self.operations.get(operation, False)

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        return self.timeout_ms / 1000


def deep_merge(base: dict, overlay: dict) -> dict:
    """Deep merge overlay into base, returning new dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def resolve(
    defaults: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> FileOperationsConfig:
    """Merge ``overrides`` onto ``defaults`` and build the configuration."""
    if overrides is not None and not isinstance(overrides, Mapping):
        raise ConfigurationError(f"options must be a mapping, got {type(overrides).__name__}")

    merged = deep_merge(dict(defaults or DEFAULT_CONFIG), dict(overrides or {}))

    for key in merged.keys() - DEFAULT_CONFIG.keys() - {"config_file"}:
        logger.debug("Ignoring unknown option %r", key)

    raw_operations = merged.get("operations", {})
    if not isinstance(raw_operations, Mapping):
        raise ConfigurationError(
            f"'operations' must be a mapping, got {type(raw_operations).__name__}"
        )

    operations: dict[Operation, bool] = {}
    for name, enabled in raw_operations.items():
        try:
            operation = Operation(name)
        except ValueError:
            logger.debug("Ignoring unknown operation %r", name)
            continue
        operations[operation] = _flag(f"operations.{name}", enabled)
    for operation in Operation:
        operations.setdefault(operation, False)

    timeout_ms = merged.get("timeout_ms", DEFAULT_CONFIG["timeout_ms"])
    try:
        if isinstance(timeout_ms, bool):
            raise TypeError("boolean timeout")
        timeout_ms = int(timeout_ms)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'timeout_ms' must be an integer, got {timeout_ms!r}") from e
    if timeout_ms < 0:
        raise ConfigurationError(f"'timeout_ms' must not be negative, got {timeout_ms}")

    return FileOperationsConfig(
        debug=_flag("debug", merged.get("debug", False)),
        timeout_ms=timeout_ms,
        operations=MappingProxyType(operations),
    )


def _flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigurationError(f"'{name}' must be true or false, got {value!r}")


def load_overrides(path: str | Path) -> dict[str, Any]:
    """Read options from a YAML file.

    The file may hold the options mapping itself, or a bundle behavior
    document whose ``hooks`` list contains an entry for this module.
    """
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"{path} must contain a mapping")

    if "hooks" in document:
        for entry in document.get("hooks") or []:
            if isinstance(entry, dict) and entry.get("module") == MODULE_NAME:
                return dict(entry.get("config") or {})
        return {}
    return document


def configure_logging(debug: bool) -> None:
    """Raise the package log level to DEBUG when ``debug`` is set.

    Otherwise the level is left to whatever the host configured.
    """
    package_logger = logging.getLogger(__package__)
    package_logger.setLevel(logging.DEBUG if debug else logging.NOTSET)
