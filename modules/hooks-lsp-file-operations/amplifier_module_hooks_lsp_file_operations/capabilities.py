"""Client capabilities advertised to language servers."""

from . import state
from .config import FileOperationsConfig, resolve
from .operations import OPERATIONS


def build_capabilities(config: FileOperationsConfig) -> dict:
    """Build the ``workspace.fileOperations`` part of the client capabilities."""
    file_operations = {
        spec.capability: config.enabled(operation) for operation, spec in OPERATIONS.items()
    }
    return {"workspace": {"fileOperations": file_operations}}


def default_capabilities() -> dict:
    """Capabilities for the most recent setup, or the defaults before any setup.

    Merge the result into the client capabilities sent with ``initialize``.
    """
    return build_capabilities(state.config or resolve())
