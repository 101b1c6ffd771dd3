"""Deployment of built artifacts to Payara Server instances."""

from payctl.deploy.classifier import classify
from payctl.deploy.models import (
    DeployContext,
    DeployFailure,
    DeployOutcome,
    DeploySuccess,
    DeploymentRequest,
    LocalDefault,
    RemoteDocker,
    RemoteUpload,
    RemoteWsl,
    ServerTarget,
    Strategy,
    Workspace,
)
from payctl.deploy.request import application_name, build_request

__all__ = [
    "DeployContext",
    "DeployFailure",
    "DeployOutcome",
    "DeploySuccess",
    "DeploymentRequest",
    "LocalDefault",
    "RemoteDocker",
    "RemoteUpload",
    "RemoteWsl",
    "ServerTarget",
    "Strategy",
    "Workspace",
    "application_name",
    "build_request",
    "classify",
]
