"""Shared fakes: explorer plugins, host event bus and LSP clients."""

import importlib
import sys
import types
from enum import Enum

import pytest

import amplifier_module_hooks_lsp_file_operations as fileops
from amplifier_module_hooks_lsp_file_operations import state
from amplifier_module_hooks_lsp_file_operations.adapters import (
    NeoTreeAdapter,
    NvimTreeAdapter,
    TriptychAdapter,
)
from amplifier_module_hooks_lsp_file_operations.clients import LspClientRegistry
from amplifier_module_hooks_lsp_file_operations.operations import OPERATIONS

PLUGIN_MODULES = ["nvim_tree", "nvim_tree.api", "neo_tree", "neo_tree.events", "triptych"]


# ── Fake nvim-tree ────────────────────────────────────────────────────────────


class NvimTreeEvent(Enum):
    WillRenameNode = "WillRenameNode"
    NodeRenamed = "NodeRenamed"
    WillCreateFile = "WillCreateFile"
    FileCreated = "FileCreated"
    FolderCreated = "FolderCreated"
    WillRemoveFile = "WillRemoveFile"
    FileRemoved = "FileRemoved"
    FolderRemoved = "FolderRemoved"


class FakeNvimTreeEvents:
    Event = NvimTreeEvent

    def __init__(self):
        self.handlers: dict = {}

    def subscribe(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def fire(self, event, payload):
        return [handler(payload) for handler in self.handlers.get(event, [])]

    def count(self, event=None):
        if event is not None:
            return len(self.handlers.get(event, []))
        return sum(len(h) for h in self.handlers.values())


def make_nvim_tree():
    module = types.ModuleType("nvim_tree.api")
    module.events = FakeNvimTreeEvents()
    return module


# ── Fake neo-tree ─────────────────────────────────────────────────────────────


def make_neo_tree():
    module = types.ModuleType("neo_tree.events")
    for name in [
        "BEFORE_FILE_RENAME",
        "BEFORE_FILE_MOVE",
        "FILE_RENAMED",
        "FILE_MOVED",
        "BEFORE_FILE_ADD",
        "FILE_ADDED",
        "BEFORE_FILE_DELETE",
        "FILE_DELETED",
    ]:
        setattr(module, name, name.lower())
    # neo-tree keeps duplicates: subscribing twice means two deliveries
    module.subscriptions = []

    def subscribe(subscription):
        module.subscriptions.append(subscription)

    def unsubscribe(subscription):
        module.subscriptions[:] = [
            s for s in module.subscriptions if s["id"] != subscription["id"]
        ]

    def fire(event, payload):
        return [s["handler"](payload) for s in list(module.subscriptions) if s["event"] == event]

    def count(event=None):
        return len([s for s in module.subscriptions if event is None or s["event"] == event])

    module.subscribe = subscribe
    module.unsubscribe = unsubscribe
    module.fire = fire
    module.count = count
    return module


# ── Fake host event bus ───────────────────────────────────────────────────────


class FakeHost:
    """Host event bus with register() returning an unregister callable."""

    def __init__(self):
        self.registrations: list[tuple] = []

    def register(self, event, handler, name=None):
        entry = (event, handler, name)
        self.registrations.append(entry)

        def unregister():
            if entry in self.registrations:
                self.registrations.remove(entry)

        return unregister

    def emit(self, event, data):
        return [h(event, data) for e, h, _ in list(self.registrations) if e == event]

    def count(self, event=None):
        return len([r for r in self.registrations if event is None or r[0] == event])


# ── Fake LSP client ───────────────────────────────────────────────────────────


class FakeClient:
    """Records what handler modules send to it."""

    def __init__(self, capabilities=None, response=None):
        self.server_capabilities = {"workspace": {"fileOperations": capabilities or {}}}
        self.response = response
        self.requests: list[tuple[str, dict]] = []
        self.notifications: list[tuple[str, dict]] = []

    async def request(self, method, params):
        self.requests.append((method, params))
        return self.response

    async def notify(self, method, params):
        self.notifications.append((method, params))


def all_file_operations(filters=None):
    options = {"filters": filters if filters is not None else [{"pattern": {"glob": "**"}}]}
    return {spec.capability: options for spec in OPERATIONS.values()}


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    """Isolate process-wide state and adapter tables per test."""
    monkeypatch.setattr(state, "config", None)
    monkeypatch.setattr(state, "clients", LspClientRegistry())
    monkeypatch.setattr(state, "pending", set())
    monkeypatch.setattr(fileops, "ADAPTERS", [NvimTreeAdapter(), NeoTreeAdapter(), TriptychAdapter()])
    for name in PLUGIN_MODULES:
        monkeypatch.delitem(sys.modules, name, raising=False)


@pytest.fixture
def nvim_tree(monkeypatch):
    module = make_nvim_tree()
    monkeypatch.setitem(sys.modules, "nvim_tree", types.ModuleType("nvim_tree"))
    monkeypatch.setitem(sys.modules, "nvim_tree.api", module)
    return module


@pytest.fixture
def neo_tree(monkeypatch):
    module = make_neo_tree()
    monkeypatch.setitem(sys.modules, "neo_tree", types.ModuleType("neo_tree"))
    monkeypatch.setitem(sys.modules, "neo_tree.events", module)
    return module


@pytest.fixture
def triptych(monkeypatch):
    module = types.ModuleType("triptych")
    monkeypatch.setitem(sys.modules, "triptych", module)
    return module


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def calls(monkeypatch):
    """Replace every handler module's callback with a recorder."""
    recorded: list[tuple[str, object]] = []
    for spec in OPERATIONS.values():
        module = importlib.import_module(spec.handler_module)

        def callback(args, _name=spec.handler_module):
            recorded.append((_name, args))

        monkeypatch.setattr(module, "callback", callback)
    return recorded
