"""nvim-tree integration.

``api.events.subscribe(event, handler)`` has no way to unsubscribe, so each
(handler module, event) pair is subscribed natively once and the native
handler only dispatches while its pair is active. A new setup round clears
the active set and routing marks the enabled pairs again.
"""

from collections.abc import Hashable
from typing import Any

from ..events import CanonicalEventArgs, normalize
from ..operations import Operation
from ..router import HandlerMap
from .base import SourceAdapter, identity, present


class NvimTreeAdapter(SourceAdapter):
    name = "nvim-tree"
    module_name = "nvim_tree.api"

    def __init__(self):
        super().__init__()
        self._subscribed: set[str] = set()
        self._active: set[str] = set()
        self._subscribed_on: Any = None

    def build_handler_map(self) -> HandlerMap:
        event = self.plugin.events.Event
        return {
            Operation.WILL_RENAME: present(event, "WillRenameNode"),
            Operation.DID_RENAME: present(event, "NodeRenamed"),
            Operation.WILL_CREATE: present(event, "WillCreateFile"),
            Operation.DID_CREATE: present(event, "FileCreated", "FolderCreated"),
            Operation.WILL_DELETE: present(event, "WillRemoveFile"),
            Operation.DID_DELETE: present(event, "FileRemoved", "FolderRemoved"),
        }

    def prepare(self) -> None:
        if self._subscribed_on is not self.plugin:
            # Plugin was reloaded; its old subscriptions are gone
            self._subscribed.clear()
            self._subscribed_on = self.plugin
        self._active.clear()

    def teardown(self) -> None:
        self._active.clear()

    def subscribe(self, handler_module: str, event: Hashable) -> None:
        key = identity(handler_module, event)
        self._active.add(key)
        if key in self._subscribed:
            return

        def handler(payload):
            if key in self._active:
                return self.dispatch(handler_module, payload)
            return None

        self.plugin.events.subscribe(event, handler)
        self._subscribed.add(key)

    def normalize(self, payload: Any) -> CanonicalEventArgs:
        return normalize(
            payload,
            old_keys=("old_name",),
            new_keys=("new_name",),
            path_keys=("fname", "folder_name"),
        )
