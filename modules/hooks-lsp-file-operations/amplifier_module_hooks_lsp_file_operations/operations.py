"""The six LSP workspace file operations and what each one maps to."""

from dataclasses import dataclass
from enum import Enum


class Operation(str, Enum):
    """File operations, named after their LSP option keys."""

    WILL_RENAME = "willRenameFiles"
    DID_RENAME = "didRenameFiles"
    WILL_CREATE = "willCreateFiles"
    DID_CREATE = "didCreateFiles"
    WILL_DELETE = "willDeleteFiles"
    DID_DELETE = "didDeleteFiles"

    @property
    def is_rename(self) -> bool:
        return self in (Operation.WILL_RENAME, Operation.DID_RENAME)


@dataclass(frozen=True)
class OperationSpec:
    handler_module: str
    capability: str
    method: str


_HANDLERS = __package__ + ".handlers"

OPERATIONS: dict[Operation, OperationSpec] = {
    Operation.WILL_RENAME: OperationSpec(f"{_HANDLERS}.will_rename", "willRename", "workspace/willRenameFiles"),
    Operation.DID_RENAME: OperationSpec(f"{_HANDLERS}.did_rename", "didRename", "workspace/didRenameFiles"),
    Operation.WILL_CREATE: OperationSpec(f"{_HANDLERS}.will_create", "willCreate", "workspace/willCreateFiles"),
    Operation.DID_CREATE: OperationSpec(f"{_HANDLERS}.did_create", "didCreate", "workspace/didCreateFiles"),
    Operation.WILL_DELETE: OperationSpec(f"{_HANDLERS}.will_delete", "willDelete", "workspace/willDeleteFiles"),
    Operation.DID_DELETE: OperationSpec(f"{_HANDLERS}.did_delete", "didDelete", "workspace/didDeleteFiles"),
}
