"""Build the ``deploy`` admin command for an artifact and strategy."""

import re
from collections.abc import Sequence
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from urllib.parse import quote

from payctl.config import DeployOption
from payctl.core.exceptions import ValidationError
from payctl.core.logging import get_logger
from payctl.deploy.models import (
    DeploymentRequest,
    LocalDefault,
    RemoteDocker,
    RemoteUpload,
    RemoteWsl,
    Strategy,
)

logger = get_logger(__name__)

ARCHIVE_EXTENSIONS = (".ear", ".war", ".jar")

_DRIVE_PATH = re.compile(r"^([A-Za-z]):/(.*)$")

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "!'()*~"


def _pure_path(path: str) -> PurePath:
    if "\\" in path or re.match(r"^[A-Za-z]:", path):
        return PureWindowsPath(path)
    return PurePosixPath(path)


def encode_component(value: str) -> str:
    """Percent-encode a query value the way browsers encode URI components."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def application_name(artifact_path: str | Path) -> str:
    """Derive the application name from an artifact path.

    ``app.war`` becomes ``app``; anything that is not an ear, war or jar
    keeps its full base name, so exploded directories deploy under their
    directory name.
    """
    path = _pure_path(str(artifact_path))
    if path.suffix in ARCHIVE_EXTENSIONS:
        return path.stem
    return path.name


def docker_path(artifact_path: str, host_path: str, container_path: str) -> str:
    """Rewrite a host path into the container's view of the bind mount."""
    try:
        relative = _pure_path(artifact_path).relative_to(_pure_path(host_path))
    except ValueError:
        raise ValidationError(
            f"Artifact {artifact_path} is outside the docker host path {host_path}",
            details={"container_path": container_path},
        )
    rewritten = PurePosixPath(container_path.replace("\\", "/")) / relative.as_posix()
    return str(rewritten)


def wsl_path(artifact_path: str) -> str:
    """Map ``C:\\dir\\app.war`` to ``/mnt/c/dir/app.war``."""
    normalized = artifact_path.replace("\\", "/")
    match = _DRIVE_PATH.match(normalized)
    if not match:
        logger.debug("Path has no drive letter, leaving as is", path=normalized)
        return normalized
    drive, rest = match.groups()
    return f"/mnt/{drive.lower()}/{rest}"


def build_request(
    artifact_path: str | Path,
    strategy: Strategy,
    deploy_option: DeployOption = DeployOption.DEFAULT,
    metadata_changed: bool = False,
    sources_changed: Sequence[str] | None = None,
) -> DeploymentRequest:
    """Build the deployment request for an artifact.

    Args:
        artifact_path: Local path of the built artifact
        strategy: Strategy returned by :func:`payctl.deploy.classifier.classify`
        deploy_option: Server's configured deploy option
        metadata_changed: Whether deployment descriptors changed (hot reload)
        sources_changed: Changed source identifiers (hot reload)

    Returns:
        DeploymentRequest ready for the invoker

    Raises:
        ValidationError: If the application name is empty or a docker
            path cannot be mapped
    """
    local_path = str(artifact_path)
    name = application_name(local_path)
    if not name:
        raise ValidationError(f"Cannot derive an application name from {local_path!r}")

    params: list[tuple[str, str]] = [("force", "true")]
    upload_file: Path | None = None

    if isinstance(strategy, LocalDefault):
        target_path = local_path
    elif isinstance(strategy, RemoteDocker):
        target_path = docker_path(local_path, strategy.host_path, strategy.container_path)
    elif isinstance(strategy, RemoteWsl):
        target_path = wsl_path(local_path)
    elif isinstance(strategy, RemoteUpload):
        target_path = local_path
        upload_file = Path(local_path)
    else:
        raise ValidationError(f"Unknown deployment strategy: {strategy!r}")

    if upload_file is None:
        params.append(("DEFAULT", encode_component(target_path)))
    else:
        params.append(("upload", "true"))
    params.append(("name", name))

    if deploy_option == DeployOption.HOT_RELOAD:
        params.append(("hotDeploy", "true"))
        if metadata_changed:
            params.append(("metadataChanged", "true"))
        if sources_changed:
            params.append(("sourcesChanged", ",".join(str(s) for s in sources_changed)))

    request = DeploymentRequest(
        application_name=name,
        target_path=target_path,
        params=params,
        upload_file=upload_file,
    )
    logger.debug("Built deployment request", operation=request.operation_path)
    return request
