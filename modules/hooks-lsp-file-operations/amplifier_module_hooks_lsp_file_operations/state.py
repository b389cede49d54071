"""Process-wide state shared with handler modules.

Handler modules are entered through ``callback(args)`` alone, so the resolved
configuration and the attached LSP clients are published here. ``setup``
replaces the configuration wholesale on every call.
"""

import asyncio

from .clients import LspClientRegistry
from .config import FileOperationsConfig

config: FileOperationsConfig | None = None

clients = LspClientRegistry()

# Handler tasks still in flight; the event loop only keeps weak references
pending: set[asyncio.Task] = set()
