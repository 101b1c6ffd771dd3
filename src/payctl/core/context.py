"""Click context object for sharing state across commands."""

from __future__ import annotations

from pathlib import Path

import click

from payctl.config import PayctlConfig, get_default_config
from payctl.core.output import OutputFormat, OutputFormatter
from payctl.core.logging import LogLevel, get_logger, setup_logging
from payctl.deploy.debug import DebugManager, DebugSessions
from payctl.deploy.orchestrator import DeploymentSupport
from payctl.deploy.outcome import DeployOutcomeHandler
from payctl.deploy.status import StatusBar
from payctl.server.controller import ServerInstanceController


class PayctlContext:
    """Shared context object for payctl commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the server controller and the deployment
    machinery.
    """

    def __init__(
        self,
        config: PayctlConfig | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()

        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._color = color

        setup_logging(
            LogLevel.for_cli(verbose, quiet, self._config.global_settings.verbosity),
            rich_output=color,
        )
        self._logger = get_logger(__name__)

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazy-loaded collaborators
        self._controller: ServerInstanceController | None = None
        self._debug_sessions = DebugSessions()
        self._status_bar: StatusBar | None = None

    @property
    def config(self) -> PayctlConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose

    @property
    def quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    @property
    def debug_sessions(self) -> DebugSessions:
        """Debug sessions started by this invocation."""
        return self._debug_sessions

    @property
    def controller(self) -> ServerInstanceController:
        """Get or create the server controller."""
        if self._controller is None:
            self._controller = ServerInstanceController(self._config, self._output)
        return self._controller

    @property
    def status_bar(self) -> StatusBar:
        """Get or create the status line."""
        if self._status_bar is None:
            self._status_bar = StatusBar(enabled=not self._quiet)
        return self._status_bar

    def deployment_support(self, extra_workspaces: list[Path] | None = None) -> DeploymentSupport:
        """Wire up a DeploymentSupport for this invocation."""
        debug_manager = DebugManager(self._config.debug, self._debug_sessions, self._output)
        handler = DeployOutcomeHandler(
            controller=self.controller,
            debug_manager=debug_manager,
            status_bar=self.status_bar,
            output=self._output,
            status_delay=self._config.deploy.status_delay,
        )
        workspaces = [*(extra_workspaces or []), *self._config.deploy.get_workspaces()]
        self._logger.debug("Deployment support ready", workspaces=len(workspaces))
        return DeploymentSupport(
            handler=handler,
            output=self._output,
            workspaces=workspaces,
            build_config=self._config.build,
        )


# Click decorator for passing context
pass_context = click.make_pass_decorator(PayctlContext, ensure=True)
