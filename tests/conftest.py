"""Pytest fixtures for payctl tests."""

import os
from collections.abc import Callable
from types import SimpleNamespace
from typing import Generator

import httpx
import pytest
from click.testing import CliRunner

from payctl.clients.payara import PayaraAdminClient
from payctl.config import (
    DebugConfig,
    DeployConfig,
    InstanceType,
    PayctlConfig,
    ServerConfig,
    ServerMode,
)
from payctl.core.output import OutputFormatter
from payctl.deploy.debug import DebugManager, DebugSessions
from payctl.deploy.status import StatusBar
from payctl.server.controller import ServerInstanceController
from payctl.server.instance import ServerInstance


def deploy_report(name: str = "shop") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
        '<action-report description="deploy AdminCommand" exit-code="SUCCESS">'
        '<message-part message="">'
        f'<property name="name" value="{name}"/>'
        "</message-part>"
        "</action-report>"
    )


def failure_report(cause: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
        f'<action-report description="deploy AdminCommand" exit-code="FAILURE" failure-cause="{cause}">'
        '<message-part message=""/>'
        "</action-report>"
    )


def applications_report(*names: str) -> str:
    props = "".join(f'<property name="{n}" value="&lt;web&gt;"/>' for n in names)
    return (
        '<action-report description="list-applications AdminCommand" exit-code="SUCCESS">'
        f'<message-part message="">{props}</message-part>'
        "</action-report>"
    )


class FakePayara:
    """Records admin requests and answers them like a Payara server."""

    def __init__(self, deploy_status: int = 200, deploy_body: str | None = None):
        self.requests: list[httpx.Request] = []
        self.deploy_status = deploy_status
        self.deploy_body = deploy_body if deploy_body is not None else deploy_report()
        self.applications = ["shop"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/__asadmin/deploy"):
            return httpx.Response(self.deploy_status, text=self.deploy_body)
        if path.startswith("/__asadmin/list-applications"):
            return httpx.Response(200, text=applications_report(*self.applications))
        if path.startswith("/__asadmin/version"):
            return httpx.Response(
                200,
                text='<action-report exit-code="SUCCESS"><message-part message="Payara Server 6.2024.1"/></action-report>',
            )
        return httpx.Response(404, text="not found")

    @property
    def deploy_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/__asadmin/deploy")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def quiet_output() -> OutputFormatter:
    return OutputFormatter(color=False, quiet=True)


@pytest.fixture
def reports() -> SimpleNamespace:
    """Builders for asadmin action report XML."""
    return SimpleNamespace(
        deploy=deploy_report,
        failure=failure_report,
        applications=applications_report,
    )


@pytest.fixture
def fake_payara() -> FakePayara:
    return FakePayara()


@pytest.fixture
def mock_config() -> PayctlConfig:
    """Create a configuration with one server of every kind."""
    return PayctlConfig(
        servers={
            "local": ServerConfig(mode=ServerMode.LOCAL),
            "docker": ServerConfig(
                mode=ServerMode.REMOTE,
                host="10.0.0.5",
                instance_type=InstanceType.DOCKER,
                host_path="/home/u/proj",
                container_path="/srv/app",
            ),
            "wsl": ServerConfig(mode=ServerMode.REMOTE, instance_type=InstanceType.WSL),
            "remote": ServerConfig(mode=ServerMode.REMOTE, host="payara.example.com"),
        },
        deploy=DeployConfig(status_delay=0.05),
        debug=DebugConfig(port=5005),
    )


@pytest.fixture
def make_server(fake_payara: FakePayara) -> Callable[..., ServerInstance]:
    """Build a ServerInstance talking to the fake Payara."""

    def factory(name: str = "local", **overrides) -> ServerInstance:
        config = ServerConfig(**overrides)
        client = PayaraAdminClient(config, transport=fake_payara.transport())
        return ServerInstance(name, config, client=client)

    return factory


@pytest.fixture
def controller(mock_config: PayctlConfig, quiet_output: OutputFormatter) -> ServerInstanceController:
    return ServerInstanceController(mock_config, quiet_output, open_browser=False)


@pytest.fixture
def debug_sessions() -> DebugSessions:
    return DebugSessions()


@pytest.fixture
def debug_manager(
    mock_config: PayctlConfig,
    debug_sessions: DebugSessions,
    quiet_output: OutputFormatter,
) -> DebugManager:
    return DebugManager(mock_config.debug, debug_sessions, quiet_output)


@pytest.fixture
def status_bar() -> StatusBar:
    return StatusBar(enabled=False)


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "PAYCTL_USERNAME",
        "PAYCTL_PASSWORD",
        "PAYARA_PASSWORD",
        "PAYCTL_WORKSPACE",
        "PAYCTL_DEBUG_ATTACH",
        "PAYCTL_CONFIG",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_content = """
version: "1"
global:
  output_format: table
servers:
  local:
    mode: local
  remote:
    mode: remote
    host: payara.example.com
    connection_allowed: false
deploy:
  verify_connection: false
  status_delay: 0
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return str(config_file)
