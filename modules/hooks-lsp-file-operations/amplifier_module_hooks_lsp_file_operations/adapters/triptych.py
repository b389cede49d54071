"""triptych integration.

triptych broadcasts its events on the host event bus rather than through an
API of its own. ``host.register(event, handler, name=...)`` returns an
unregister callable; those are kept per subscription id and called before the
same id is registered again.
"""

from collections.abc import Callable, Hashable, Mapping
from typing import Any

from ..events import CanonicalEventArgs, normalize
from ..operations import Operation
from ..router import HandlerMap
from .base import SourceAdapter, identity

EVENTS = {
    Operation.WILL_RENAME: ["TriptychWillMoveNode"],
    Operation.DID_RENAME: ["TriptychDidMoveNode"],
    Operation.WILL_CREATE: ["TriptychWillCreateNode"],
    Operation.DID_CREATE: ["TriptychDidCreateNode"],
    Operation.WILL_DELETE: ["TriptychWillDeleteNode"],
    Operation.DID_DELETE: ["TriptychDidDeleteNode"],
}


class TriptychAdapter(SourceAdapter):
    name = "triptych"
    module_name = "triptych"

    def __init__(self):
        super().__init__()
        self._unregister: dict[str, Callable[[], Any]] = {}

    def detect(self) -> bool:
        if self.host is None:
            return False
        return super().detect()

    def build_handler_map(self) -> HandlerMap:
        return {operation: list(events) for operation, events in EVENTS.items()}

    def prepare(self) -> None:
        self.teardown()

    def teardown(self) -> None:
        for unregister in self._unregister.values():
            unregister()
        self._unregister.clear()

    def subscribe(self, handler_module: str, event: Hashable) -> None:
        name = identity(handler_module, event)
        previous = self._unregister.pop(name, None)
        if previous is not None:
            previous()

        def handler(event_name, data):
            return self.dispatch(handler_module, data)

        self._unregister[name] = self.host.register(event, handler, name=name)

    def normalize(self, payload: Any) -> CanonicalEventArgs:
        data = payload
        if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
            data = payload["data"]
        return normalize(
            data,
            old_keys=("from_path",),
            new_keys=("to_path",),
            path_keys=("path",),
        )
