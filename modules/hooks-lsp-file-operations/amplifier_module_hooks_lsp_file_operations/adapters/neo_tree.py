"""neo-tree integration.

neo-tree keeps every subscription it is given, so subscriptions carry an id
built from the handler module and event, and the previous one with the same
id is removed before subscribing again.
"""

from collections.abc import Hashable
from typing import Any

from ..events import CanonicalEventArgs, normalize
from ..operations import Operation
from ..router import HandlerMap
from .base import SourceAdapter, identity, present


class NeoTreeAdapter(SourceAdapter):
    name = "neo-tree"
    module_name = "neo_tree.events"

    def __init__(self):
        super().__init__()
        self._ids: set[str] = set()

    def build_handler_map(self) -> HandlerMap:
        events = self.plugin
        return {
            Operation.WILL_RENAME: present(events, "BEFORE_FILE_RENAME", "BEFORE_FILE_MOVE"),
            Operation.DID_RENAME: present(events, "FILE_RENAMED", "FILE_MOVED"),
            Operation.WILL_CREATE: present(events, "BEFORE_FILE_ADD"),
            Operation.DID_CREATE: present(events, "FILE_ADDED"),
            Operation.WILL_DELETE: present(events, "BEFORE_FILE_DELETE"),
            Operation.DID_DELETE: present(events, "FILE_DELETED"),
        }

    def prepare(self) -> None:
        self.teardown()

    def teardown(self) -> None:
        if self.plugin is None:
            return
        for subscription_id in sorted(self._ids):
            self.plugin.unsubscribe({"id": subscription_id})
        self._ids.clear()

    def subscribe(self, handler_module: str, event: Hashable) -> None:
        subscription_id = identity(handler_module, event)
        self.plugin.unsubscribe({"id": subscription_id})
        self.plugin.subscribe(
            {
                "id": subscription_id,
                "event": event,
                "handler": lambda payload: self.dispatch(handler_module, payload),
            }
        )
        self._ids.add(subscription_id)

    def normalize(self, payload: Any) -> CanonicalEventArgs:
        return normalize(
            payload,
            old_keys=("source",),
            new_keys=("destination",),
            path_keys=("path",),
        )
