"""workspace/didCreateFiles, fired for both files and folders."""

from ..operations import Operation
from . import send_notification


def callback(args):
    return send_notification(Operation.DID_CREATE, args)
