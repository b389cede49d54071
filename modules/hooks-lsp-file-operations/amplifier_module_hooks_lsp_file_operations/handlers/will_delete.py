"""workspace/willDeleteFiles: ask servers for edits before a delete."""

from ..operations import Operation
from . import send_request


def callback(args):
    return send_request(Operation.WILL_DELETE, args)
