"""workspace/didRenameFiles"""

from ..operations import Operation
from . import send_notification


def callback(args):
    return send_notification(Operation.DID_RENAME, args)
