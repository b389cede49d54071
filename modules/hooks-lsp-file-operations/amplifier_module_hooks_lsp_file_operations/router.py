"""Subscribe handler modules to the native events of one explorer plugin."""

import logging
from collections.abc import Callable, Hashable, Mapping, Sequence

from .config import FileOperationsConfig
from .operations import OPERATIONS, Operation

logger = logging.getLogger(__name__)

# Operation -> native event identifiers of one plugin that trigger it
HandlerMap = Mapping[Operation, Sequence[Hashable]]

Subscribe = Callable[[str, Hashable], None]


def route(config: FileOperationsConfig, handler_map: HandlerMap, subscribe: Subscribe) -> int:
    """Call ``subscribe(handler_module, event)`` for every enabled operation.

    Disabled operations are skipped silently. Enabled operations the plugin has
    no events for are skipped with a debug message. Keeping subscriptions unique
    across repeated calls is the job of ``subscribe``; nothing is remembered here.

    Returns the number of ``subscribe`` calls made.
    """
    count = 0
    for operation, spec in OPERATIONS.items():
        if not config.enabled(operation):
            continue
        events = handler_map.get(operation)
        if not events:
            logger.debug("No native event for %s, skipping", operation.value)
            continue
        for event in events:
            subscribe(spec.handler_module, event)
            count += 1
    return count
