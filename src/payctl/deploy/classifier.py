"""Pick how an artifact path reaches a server instance."""

from payctl.config import InstanceType
from payctl.core.logging import get_logger
from payctl.deploy.models import (
    LocalDefault,
    RemoteDocker,
    RemoteUpload,
    RemoteWsl,
    ServerTarget,
    Strategy,
)

logger = get_logger(__name__)


def classify(target: ServerTarget) -> Strategy:
    """Classify a server target into a deployment strategy.

    Rules, first match wins:

    1. local instances read the artifact in place
    2. docker instances with both mount paths get the path rewritten
    3. wsl instances get the Windows drive mapped under ``/mnt``
    4. everything else uploads the artifact

    Args:
        target: Snapshot of the server instance

    Returns:
        The strategy for this deployment
    """
    if not target.is_remote:
        strategy: Strategy = LocalDefault()
    elif (
        target.instance_type == InstanceType.DOCKER
        and target.host_path
        and target.container_path
    ):
        strategy = RemoteDocker(host_path=target.host_path, container_path=target.container_path)
    elif target.instance_type == InstanceType.WSL:
        strategy = RemoteWsl()
    else:
        strategy = RemoteUpload()

    logger.debug("Classified target", server=target.name, strategy=type(strategy).__name__)
    return strategy
