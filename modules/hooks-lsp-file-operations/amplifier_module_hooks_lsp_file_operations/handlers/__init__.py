"""Per-operation handler modules.

Each submodule exposes ``callback(args)`` taking canonical event arguments.
The helpers here turn those arguments into LSP params and send them to every
attached client that registered interest in the operation.
"""

import asyncio
import inspect
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

from .. import state
from ..events import CanonicalEventArgs, PathArgs, RenameArgs
from ..operations import OPERATIONS, Operation

logger = logging.getLogger(__name__)


def file_uri(path: str) -> str:
    return Path(path).resolve().as_uri()


def build_params(operation: Operation, args: CanonicalEventArgs) -> dict | None:
    """RenameFilesParams, CreateFilesParams or DeleteFilesParams for ``args``."""
    if operation.is_rename:
        if not isinstance(args, RenameArgs):
            return None
        return {"files": [{"oldUri": file_uri(args.old_path), "newUri": file_uri(args.new_path)}]}
    if not isinstance(args, PathArgs) or not args.path:
        return None
    return {"files": [{"uri": file_uri(args.path)}]}


def run_soon(coro: Coroutine) -> Any:
    """Schedule on the running loop, or run to completion when there is none."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    task = loop.create_task(coro)
    state.pending.add(task)
    task.add_done_callback(state.pending.discard)
    return task


def _prepare(operation: Operation, args: CanonicalEventArgs) -> tuple[str, dict, list] | None:
    spec = OPERATIONS[operation]
    params = build_params(operation, args)
    if params is None:
        logger.debug("%s: cannot handle arguments %r", operation.value, args)
        return None

    path = args.old_path if isinstance(args, RenameArgs) else args.path
    clients = state.clients.interested(spec.capability, path)
    if not clients:
        logger.debug("%s: no interested clients for %s", operation.value, path)
        return None
    return spec.method, params, clients


def send_notification(operation: Operation, args: CanonicalEventArgs) -> Any:
    """Notify interested clients that a file operation happened."""
    prepared = _prepare(operation, args)
    if prepared is None:
        return None
    method, params, clients = prepared
    logger.debug("Sending %s to %d client(s)", method, len(clients))
    return run_soon(_notify_all(clients, method, params))


def send_request(operation: Operation, args: CanonicalEventArgs) -> Any:
    """Ask interested clients for edits before a file operation happens."""
    prepared = _prepare(operation, args)
    if prepared is None:
        return None
    method, params, clients = prepared
    timeout = state.config.timeout if state.config else 10.0
    logger.debug("Sending %s to %d client(s)", method, len(clients))
    return run_soon(_request_all(clients, method, params, timeout))


async def _notify_all(clients: list, method: str, params: dict) -> None:
    for client in clients:
        try:
            await client.notify(method, params)
        except Exception as e:
            logger.warning("%s failed for %r: %s", method, client, e)


async def _request_all(clients: list, method: str, params: dict, timeout: float) -> list[dict]:
    edits = []
    for client in clients:
        try:
            edit = await asyncio.wait_for(client.request(method, params), timeout=timeout)
            if not edit:
                continue
            edits.append(edit)
            if state.clients.apply_edit is None:
                logger.debug("%s returned an edit but no applier is registered", method)
                continue
            applied = state.clients.apply_edit(client, edit)
            if inspect.isawaitable(applied):
                await applied
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs for %r", method, timeout, client)
        except Exception as e:
            logger.warning("%s failed for %r: %s", method, client, e)
    return edits
