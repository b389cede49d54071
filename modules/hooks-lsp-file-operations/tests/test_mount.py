"""Tests for the Amplifier mount entry point."""

import asyncio
from unittest.mock import MagicMock

import pytest

from amplifier_module_hooks_lsp_file_operations import LspServer, mount, state, teardown
from amplifier_module_hooks_lsp_file_operations.events import PathArgs
from amplifier_module_hooks_lsp_file_operations.handlers import did_create
from amplifier_module_hooks_lsp_file_operations.operations import OPERATIONS, Operation

from conftest import FakeClient, all_file_operations


def make_coordinator(hooks):
    coordinator = MagicMock()
    coordinator.mount_points = {"tools": {}}
    coordinator.hooks = hooks
    return coordinator


class TestMount:
    @pytest.mark.asyncio
    async def test_registers_mount_point(self, host):
        coordinator = make_coordinator(host)
        await mount(coordinator, {"operations": {"didRenameFiles": False}})

        mounted = coordinator.mount_points["lsp_file_operations"]
        assert mounted["clients"] is state.clients
        caps = mounted["capabilities"]()
        assert caps["workspace"]["fileOperations"]["didRename"] is False
        assert mounted["server_class"] is LspServer

    @pytest.mark.asyncio
    async def test_uses_coordinator_hooks_as_host(self, triptych, host, calls):
        await mount(make_coordinator(host), {})
        host.emit("TriptychDidCreateNode", {"path": "/a.py"})
        assert calls == [(OPERATIONS[Operation.DID_CREATE].handler_module, PathArgs("/a.py"))]

    @pytest.mark.asyncio
    async def test_cleanup_unsubscribes_and_shuts_down(self, triptych, neo_tree, host):
        class Closable(FakeClient):
            closed = False

            async def shutdown(self):
                self.closed = True

        client = Closable()
        state.clients.attach(client)
        cleanup = await mount(make_coordinator(host), {})
        assert host.count() == 6
        assert neo_tree.count() == 8

        await cleanup()

        assert host.count() == 0
        assert neo_tree.count() == 0
        assert client.closed
        assert len(state.clients) == 0

    @pytest.mark.asyncio
    async def test_cleanup_waits_for_handler_tasks(self, tmp_path, host):
        release = asyncio.Event()

        class SlowClient(FakeClient):
            async def notify(self, method, params):
                await release.wait()
                await super().notify(method, params)

        client = SlowClient(all_file_operations())
        state.clients.attach(client)
        cleanup = await mount(make_coordinator(host), {})

        did_create.callback(PathArgs(str(tmp_path / "a.py")))
        assert len(state.pending) == 1
        (task,) = state.pending

        asyncio.get_running_loop().call_soon(release.set)
        await cleanup()

        assert task.done()
        assert client.notifications[0][0] == "workspace/didCreateFiles"
        assert state.pending == set()


class TestTeardown:
    def test_teardown_without_setup(self):
        teardown()
