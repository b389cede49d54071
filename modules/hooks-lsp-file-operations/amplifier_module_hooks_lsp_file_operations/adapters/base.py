"""Common shape of a file explorer integration."""

import importlib
import logging
from abc import ABC, abstractmethod
from collections.abc import Hashable
from types import ModuleType
from typing import Any

from ..events import CanonicalEventArgs
from ..router import HandlerMap

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Integration with one optional file explorer plugin.

    Subclasses name the plugin module to import, map its native events to
    operations, subscribe to them, and translate its payloads.
    """

    name: str
    module_name: str

    def __init__(self):
        self.plugin: ModuleType | None = None
        # Event bus of the host, for plugins that broadcast through it
        self.host: Any = None

    def detect(self) -> bool:
        """Import the plugin's integration surface. False when it is absent."""
        try:
            self.plugin = importlib.import_module(self.module_name)
        except ImportError:
            self.plugin = None
            return False
        return True

    def prepare(self) -> None:
        """Start a new setup round, before any ``subscribe`` call."""

    def teardown(self) -> None:
        """Drop every subscription this adapter owns."""

    @abstractmethod
    def build_handler_map(self) -> HandlerMap:
        ...

    @abstractmethod
    def subscribe(self, handler_module: str, event: Hashable) -> None:
        ...

    @abstractmethod
    def normalize(self, payload: Any) -> CanonicalEventArgs:
        ...

    def dispatch(self, handler_module: str, payload: Any) -> Any:
        """Normalize ``payload`` and hand it to ``handler_module.callback``."""
        args = self.normalize(payload)
        logger.debug("%s: %s <- %r", self.name, handler_module, args)
        return importlib.import_module(handler_module).callback(args)


def identity(handler_module: str, event: Hashable) -> str:
    """Stable subscription id for a (handler module, native event) pair."""
    return f"{handler_module}.{getattr(event, 'value', event)}"


def present(source: Any, *names: str) -> list:
    """Attributes of ``source`` among ``names``, skipping the missing ones."""
    return [getattr(source, n) for n in names if getattr(source, n, None) is not None]
