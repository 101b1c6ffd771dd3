"""Deployment data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from payctl.config import DeployOption, InstanceType, ServerMode


@dataclass(frozen=True)
class ServerTarget:
    """Read-only snapshot of a server instance taken at deployment time."""

    name: str
    mode: ServerMode = ServerMode.LOCAL
    instance_type: InstanceType = InstanceType.GENERIC
    host_path: str | None = None
    container_path: str | None = None
    deploy_option: DeployOption = DeployOption.DEFAULT

    @property
    def is_remote(self) -> bool:
        return self.mode == ServerMode.REMOTE


# Strategies


@dataclass(frozen=True)
class LocalDefault:
    """Server reads the artifact from the local filesystem."""


@dataclass(frozen=True)
class RemoteDocker:
    """Server reads the artifact through a host/container bind mount."""

    host_path: str
    container_path: str


@dataclass(frozen=True)
class RemoteWsl:
    """Server runs under WSL and reads Windows drives through /mnt."""


@dataclass(frozen=True)
class RemoteUpload:
    """Artifact is streamed to the server in the request body."""


Strategy = Union[LocalDefault, RemoteDocker, RemoteWsl, RemoteUpload]


@dataclass
class DeploymentRequest:
    """Query for the ``deploy`` admin command plus an optional file to upload."""

    application_name: str
    target_path: str
    params: list[tuple[str, str]] = field(default_factory=list)
    upload_file: Path | None = None

    OPERATION = "deploy"

    @property
    def query(self) -> str:
        return "&".join(f"{key}={value}" for key, value in self.params)

    @property
    def operation_path(self) -> str:
        return f"{self.OPERATION}?{self.query}"

    def has_param(self, key: str) -> bool:
        return any(k == key for k, _ in self.params)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "application": self.application_name,
            "path": self.target_path,
            "operation": self.operation_path,
            "upload_file": str(self.upload_file) if self.upload_file else None,
        }


# Outcomes


@dataclass(frozen=True)
class DeploySuccess:
    """Server accepted the deployment."""

    application_name: str


@dataclass(frozen=True)
class DeployFailure:
    """Server or transport rejected the deployment."""

    message: str
    status_code: int | None = None


DeployOutcome = Union[DeploySuccess, DeployFailure]


@dataclass(frozen=True)
class AdminResponse:
    """Response of an admin command with its parsed action report."""

    status_code: int
    report: dict[str, Any] = field(default_factory=dict)
    text: str = ""


@dataclass(frozen=True)
class Workspace:
    """Project folder an artifact was built from."""

    name: str
    root: Path

    @classmethod
    def from_path(cls, root: str | Path) -> "Workspace":
        path = Path(root)
        return cls(name=path.name, root=path)


def find_workspace(path: str | Path, roots: list[Path]) -> Workspace | None:
    """Return the innermost workspace root containing ``path``."""
    candidate = Path(path).expanduser().resolve()
    matches = [root for root in roots if candidate == root or root in candidate.parents]
    if not matches:
        return None
    return Workspace.from_path(max(matches, key=lambda r: len(r.parts)))


@dataclass
class DeployContext:
    """Everything the outcome handler needs about one deployment."""

    server: Any  # payctl.server.ServerInstance
    workspace: Workspace | None
    debug: bool = False
    auto_deploy: bool = False
