"""Attached LSP clients and server-side file operation filters.

A client is anything with ``server_capabilities`` (the ``capabilities`` of the
server's InitializeResult) plus ``request(method, params)`` and
``notify(method, params)`` coroutines, such as ``server.LspServer``.
"""

import fnmatch
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LspClientRegistry:
    """Clients that should hear about file operations."""

    def __init__(self):
        self._clients: list[Any] = []
        # Called with (client, workspace_edit) for non-empty will* results
        self.apply_edit: Callable[[Any, dict], Any] | None = None

    def attach(self, client: Any) -> None:
        if not any(c is client for c in self._clients):
            self._clients.append(client)

    def detach(self, client: Any) -> None:
        self._clients = [c for c in self._clients if c is not client]

    def clear(self) -> None:
        self._clients.clear()

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._clients))

    def __len__(self) -> int:
        return len(self._clients)

    def interested(self, capability: str, path: str) -> list[Any]:
        """Clients whose server registered ``capability`` with a filter matching ``path``."""
        result = []
        for client in self:
            options = file_operation_options(client, capability)
            if options is None:
                continue
            filters = options.get("filters") if isinstance(options, dict) else None
            if filters is None or matches_filters(filters, path):
                result.append(client)
        return result

    async def shutdown_all(self):
        """Shutdown every attached client that can be shut down."""
        for client in self:
            shutdown = getattr(client, "shutdown", None)
            if shutdown is not None:
                await shutdown()
        self.clear()


def file_operation_options(client: Any, capability: str) -> Any:
    """Registration options for ``capability``, or None when unsupported."""
    capabilities = getattr(client, "server_capabilities", None) or {}
    file_operations = (capabilities.get("workspace") or {}).get("fileOperations") or {}
    options = file_operations.get(capability)
    return options or None


def matches_filters(filters: list[dict], path: str) -> bool:
    """True if any FileOperationFilter accepts ``path``."""
    target = Path(path).resolve()
    is_dir = target.is_dir()
    return any(_matches_filter(f, target, is_dir) for f in filters)


def _matches_filter(file_filter: dict, target: Path, is_dir: bool) -> bool:
    scheme = file_filter.get("scheme")
    if scheme and scheme != "file":
        return False

    pattern = file_filter.get("pattern") or {}
    kind = pattern.get("matches")
    if (kind == "file" and is_dir) or (kind == "folder" and not is_dir):
        return False

    name = target.as_posix()
    glob = pattern.get("glob", "")
    if (pattern.get("options") or {}).get("ignoreCase"):
        name, glob = name.lower(), glob.lower()
    return any(fnmatch.fnmatchcase(name, g) for g in expand_braces(glob))


def expand_braces(glob: str) -> list[str]:
    """Expand ``{a,b}`` groups, which fnmatch does not understand."""
    start = glob.find("{")
    if start == -1:
        return [glob]

    depth = 0
    end = -1
    for i in range(start, len(glob)):
        if glob[i] == "{":
            depth += 1
        elif glob[i] == "}":
            depth -= 1
            if depth == 0:
                end = i
                break
    if end == -1:
        return [glob]

    alternatives = []
    current = ""
    depth = 0
    for char in glob[start + 1 : end]:
        if char == "," and depth == 0:
            alternatives.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    alternatives.append(current)

    prefix, suffix = glob[:start], glob[end + 1 :]
    return [
        expanded
        for alternative in alternatives
        for expanded in expand_braces(prefix + alternative + suffix)
    ]
