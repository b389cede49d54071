"""Language server process that can be attached to the client registry.

Speaks JSON-RPC over stdio. The ``initialize`` request carries the file
operation capabilities, and the server's answer is kept as
``server_capabilities`` so handler modules can check its registration filters.

Shutdown always awaits process exit (see CPython #114177), otherwise the
event loop may be closed before the subprocess transport is.
"""

import asyncio
import contextlib
import json
import logging
from pathlib import Path
from typing import Any

from . import state
from .capabilities import default_capabilities
from .config import FileOperationsError, deep_merge

logger = logging.getLogger(__name__)

BASE_CLIENT_CAPABILITIES = {
    "workspace": {
        "applyEdit": True,
        "workspaceEdit": {"documentChanges": True},
    },
}


class LspError(FileOperationsError):
    """Error response from a language server."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class LspServer:
    """Wrapper around a language server process."""

    def __init__(
        self,
        language: str,
        workspace: Path,
        process: asyncio.subprocess.Process,
        timeout: float | None = None,
    ):
        self.language = language
        self.workspace = workspace
        self.server_capabilities: dict[str, Any] = {}
        self._process = process
        self._timeout = timeout
        self._request_id = 0
        self._pending: dict[int, asyncio.Future] = {}
        self._reader_task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"LspServer({self.language!r}, {str(self.workspace)!r})"

    @classmethod
    async def create(
        cls,
        language: str,
        workspace: Path,
        command: list[str],
        init_options: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> "LspServer":
        """Start the server, initialize it and attach it to the registry."""
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            cwd=workspace,
        )

        server = cls(language, workspace, process, timeout=timeout)
        server._reader_task = asyncio.create_task(server._read_messages())
        await server.initialize(init_options or {})
        state.clients.attach(server)
        return server

    @staticmethod
    def client_capabilities() -> dict[str, Any]:
        return deep_merge(BASE_CLIENT_CAPABILITIES, default_capabilities())

    async def initialize(self, init_options: dict[str, Any]) -> Any:
        result = await self.request(
            "initialize",
            {
                "processId": None,
                "rootUri": Path(self.workspace).resolve().as_uri(),
                "capabilities": self.client_capabilities(),
                "initializationOptions": init_options,
            },
        )
        self.server_capabilities = (result or {}).get("capabilities") or {}
        await self.notify("initialized", {})
        return result

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return state.config.timeout if state.config else 10.0

    async def request(self, method: str, params: dict[str, Any]) -> Any:
        """Send a request and wait for its result."""
        self._request_id += 1
        request_id = self._request_id

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._send({"jsonrpc": "2.0", "id": request_id, "method": method, "params": params})
            return await asyncio.wait_for(future, timeout=self.timeout)
        finally:
            self._pending.pop(request_id, None)

    async def notify(self, method: str, params: dict[str, Any]) -> None:
        await self._send({"jsonrpc": "2.0", "method": method, "params": params})

    async def _send(self, message: dict) -> None:
        assert self._process.stdin is not None, "Process stdin not available"
        body = json.dumps(message).encode()
        self._process.stdin.write(f"Content-Length: {len(body)}\r\n\r\n".encode() + body)
        await self._process.stdin.drain()

    async def _read_messages(self):
        """Resolve pending requests from the server's output until EOF."""
        assert self._process.stdout is not None, "Process stdout not available"
        while True:
            try:
                content_length = 0
                while True:
                    line = await self._process.stdout.readline()
                    if not line:
                        return
                    if line in (b"\r\n", b"\n"):
                        break
                    if line.lower().startswith(b"content-length:"):
                        content_length = int(line.split(b":")[1].strip())
                if not content_length:
                    continue

                message = json.loads(await self._process.stdout.readexactly(content_length))
                self._resolve(message)
            except asyncio.CancelledError:
                raise
            except (asyncio.IncompleteReadError, ConnectionError):
                return
            except ValueError as e:
                logger.warning("Unreadable message from %s server: %s", self.language, e)

    def _resolve(self, message: dict) -> None:
        if "method" in message:
            # Requests and notifications from the server are not handled here
            return
        future = self._pending.get(message.get("id"))
        if future is None or future.done():
            return
        if "error" in message:
            error = message["error"] or {}
            future.set_exception(LspError(error.get("message", "Unknown error"), error.get("code")))
        else:
            future.set_result(message.get("result"))

    async def shutdown(self):
        """Shutdown the server and wait for the process to exit."""
        state.clients.detach(self)
        try:
            await self.request("shutdown", {})
            await self.notify("exit", {})
        except Exception as e:
            logger.debug("%s server did not shut down cleanly: %s", self.language, e)
        finally:
            if self._reader_task:
                self._reader_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._reader_task

            if self._process.stdin:
                self._process.stdin.close()

            if self._process.returncode is None:
                self._process.kill()

            try:
                await asyncio.wait_for(self._process.communicate(), timeout=5.0)
            except Exception:
                with contextlib.suppress(Exception):
                    await self._process.wait()
