"""LSP workspace file operations for file explorer plugins.

Rename, create and delete events from whichever explorer plugins are installed
are routed to handler modules that tell language servers about them.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from . import state
from .adapters import ADAPTERS
from .capabilities import build_capabilities, default_capabilities
from .config import (
    DEFAULT_CONFIG,
    ConfigurationError,
    FileOperationsConfig,
    FileOperationsError,
    configure_logging,
    deep_merge,
    load_overrides,
    resolve,
)
from .operations import OPERATIONS, Operation
from .router import route
from .server import LspError, LspServer

__all__ = [
    "ConfigurationError",
    "FileOperationsConfig",
    "FileOperationsError",
    "LspError",
    "LspServer",
    "OPERATIONS",
    "Operation",
    "build_capabilities",
    "default_capabilities",
    "mount",
    "setup",
    "teardown",
]

logger = logging.getLogger(__name__)


def setup(opts: Mapping[str, Any] | None = None, *, host: Any = None) -> FileOperationsConfig:
    """Resolve options and subscribe to every available explorer plugin.

    Safe to call again: the configuration is replaced and each adapter
    re-subscribes without leaving duplicates behind. ``host`` is the host's
    event bus, needed by plugins that broadcast through it.
    """
    overrides = opts
    if isinstance(opts, Mapping) and opts.get("config_file"):
        overrides = deep_merge(load_overrides(opts["config_file"]), dict(opts))
    config = resolve(DEFAULT_CONFIG, overrides)

    state.config = config
    configure_logging(config.debug)

    for adapter in ADAPTERS:
        adapter.host = host
        try:
            if not adapter.detect():
                adapter.teardown()
                continue
            logger.debug("Setting up %s integration", adapter.name)
            adapter.prepare()
            count = route(config, adapter.build_handler_map(), adapter.subscribe)
        except Exception:
            logger.warning("%s integration failed, skipping it", adapter.name, exc_info=True)
            continue
        logger.debug("%s integration setup complete (%d subscriptions)", adapter.name, count)

    return config


def teardown() -> None:
    """Remove all subscriptions made by ``setup``."""
    for adapter in ADAPTERS:
        try:
            adapter.teardown()
        except Exception:
            logger.warning("%s teardown failed", adapter.name, exc_info=True)


async def mount(coordinator, config: dict):
    """Mount the file operations hook.

    Returns cleanup function to unsubscribe, wait for in-flight handler work
    and shutdown attached servers.
    """
    setup(config, host=getattr(coordinator, "hooks", None))
    coordinator.mount_points["lsp_file_operations"] = {
        "clients": state.clients,
        "capabilities": default_capabilities,
        "server_class": LspServer,
    }

    async def cleanup():
        teardown()
        if state.pending:
            await asyncio.gather(*state.pending, return_exceptions=True)
        await state.clients.shutdown_all()

    return cleanup
