"""Debugger configuration and session tracking."""

import shlex
import subprocess
from dataclasses import dataclass, field, replace
from typing import Any

import yaml

from payctl.config import DebugConfig
from payctl.core.exceptions import ConfigError
from payctl.core.logging import get_logger
from payctl.core.output import OutputFormatter
from payctl.deploy.models import Workspace

logger = get_logger(__name__)

WORKSPACE_DEBUG_FILE = ".payctl/debug.yaml"

# Seconds a replaced debugger gets to exit before it is killed
TERMINATE_TIMEOUT = 5.0


@dataclass(frozen=True)
class DebugConfiguration:
    """JDWP attach configuration."""

    type: str = "java"
    name: str = "payara-server"
    request: str = "attach"
    host_name: str = "localhost"
    port: int = 9009
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def matches(self, other: "DebugConfiguration") -> bool:
        """Two configurations attach to the same debugger endpoint."""
        return self.port == other.port and self.type == other.type


@dataclass(frozen=True)
class DebugSession:
    """Snapshot of an attached debugger.

    ``process`` is set when payctl launched the attach command itself.
    """

    workspace: Workspace
    configuration: DebugConfiguration
    process: subprocess.Popen | None = field(default=None, compare=False, repr=False)

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process is not None else None

    def running(self) -> bool:
        return self.process is not None and self.process.poll() is None


def _stop(process: subprocess.Popen) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=TERMINATE_TIMEOUT)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


class DebugSessions:
    """Holds the process-wide active debug session.

    Launched debuggers are owned here: a replaced session's process is
    stopped, and :meth:`wait` or :meth:`close` reap the active one.
    """

    def __init__(self) -> None:
        self._active: DebugSession | None = None

    @property
    def active(self) -> DebugSession | None:
        return self._active

    def set_active(self, session: DebugSession | None) -> None:
        previous = self._active
        self._active = session
        if previous is not None and previous.process is not None and previous is not session:
            logger.info("Stopping replaced debugger", pid=previous.pid)
            _stop(previous.process)

    def wait(self) -> int | None:
        """Block until a launched debugger exits, stopping it on Ctrl-C.

        Returns:
            The debugger's exit code, or None if none was launched
        """
        session = self._active
        if session is None or session.process is None:
            return None
        try:
            return session.process.wait()
        except KeyboardInterrupt:
            _stop(session.process)
            raise

    def close(self) -> None:
        """Stop a launched debugger that is still running."""
        session = self._active
        if session is not None and session.running():
            logger.info("Stopping debugger", pid=session.pid)
            _stop(session.process)


class DebugManager:
    """Builds debug configurations and starts debug sessions."""

    def __init__(
        self,
        config: DebugConfig,
        sessions: DebugSessions,
        output: OutputFormatter | None = None,
    ):
        self._config = config
        self._sessions = sessions
        self._output = output or OutputFormatter()

    @property
    def sessions(self) -> DebugSessions:
        return self._sessions

    def get_default_server_config(self) -> DebugConfiguration:
        """Default attach configuration from settings."""
        return DebugConfiguration(
            type=self._config.type,
            request=self._config.request,
            host_name=self._config.host_name,
            port=self._config.port,
        )

    def get_payara_config(
        self,
        workspace: Workspace,
        config: DebugConfiguration,
    ) -> DebugConfiguration:
        """Apply workspace overrides from ``.payctl/debug.yaml``."""
        overrides: dict[str, Any] = {}
        debug_file = workspace.root / WORKSPACE_DEBUG_FILE
        if debug_file.exists():
            try:
                with open(debug_file) as f:
                    overrides = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {debug_file}: {e}")

        known = {"type", "request", "host_name", "port"}
        return replace(
            config,
            name=f"{workspace.name} (payara)",
            **{k: v for k, v in overrides.items() if k in known},
            extra={k: v for k, v in overrides.items() if k not in known},
        )

    def start_debugging(self, workspace: Workspace, config: DebugConfiguration) -> DebugSession:
        """Attach a debugger and record it as the active session."""
        process: subprocess.Popen | None = None
        command = self._config.get_attach_command()
        if command:
            args = shlex.split(command.format(host=config.host_name, port=config.port))
            try:
                process = subprocess.Popen(args)
            except OSError as e:
                raise ConfigError(f"Cannot start debugger '{args[0]}': {e}")
            logger.info("Started debugger", command=" ".join(args), pid=process.pid)
        else:
            self._output.print_info(
                f"Attach a {config.type} debugger to {config.host_name}:{config.port}"
            )

        session = DebugSession(workspace=workspace, configuration=config, process=process)
        self._sessions.set_active(session)
        return session
