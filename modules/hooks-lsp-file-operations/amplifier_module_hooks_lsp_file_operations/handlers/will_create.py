"""workspace/willCreateFiles: ask servers for edits before a file or folder is created."""

from ..operations import Operation
from . import send_request


def callback(args):
    return send_request(Operation.WILL_CREATE, args)
