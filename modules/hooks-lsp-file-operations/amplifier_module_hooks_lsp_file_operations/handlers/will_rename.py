"""workspace/willRenameFiles: ask servers for edits before a rename or move."""

from ..operations import Operation
from . import send_request


def callback(args):
    return send_request(Operation.WILL_RENAME, args)
