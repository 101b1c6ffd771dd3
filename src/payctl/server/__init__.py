"""Server instances and the controller that tracks them."""

from payctl.server.controller import ApplicationInstance, ServerInstanceController
from payctl.server.instance import OutputChannel, ServerInstance

__all__ = [
    "ApplicationInstance",
    "OutputChannel",
    "ServerInstance",
    "ServerInstanceController",
]
