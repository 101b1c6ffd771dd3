"""Turn server responses into outcomes and run the post-deploy steps."""

import asyncio
from collections.abc import Callable

from payctl.core.exceptions import PayaraError
from payctl.core.logging import get_logger
from payctl.core.output import OutputFormatter
from payctl.deploy.debug import DebugManager, DebugSession
from payctl.deploy.models import (
    AdminResponse,
    DeployContext,
    DeployFailure,
    DeployOutcome,
    DeploySuccess,
    Workspace,
)
from payctl.deploy.status import StatusBar
from payctl.server.controller import ApplicationInstance, ServerInstanceController

logger = get_logger(__name__)


def interpret(response: AdminResponse) -> DeployOutcome | None:
    """Read the deployed application name from a deploy report.

    Only a 200 response whose first message part starts with a ``name``
    property counts as success. Any other shape yields None: the caller
    shows nothing to the user, but the drop is logged.
    """
    if response.status_code != 200:
        return DeployFailure(
            message=response.text.strip() or "Unexpected response",
            status_code=response.status_code,
        )

    parts = response.report.get("message-part") or []
    properties = parts[0].get("property") if parts else None
    if properties:
        attrs = properties[0].get("$", {})
        if attrs.get("name") == "name":
            return DeploySuccess(application_name=attrs.get("value", ""))

    logger.warning(
        "Deploy succeeded but the report has no application name, ignoring",
        exit_code=response.report.get("exit-code"),
        body=response.text[:200],
    )
    return None


class DeployOutcomeHandler:
    """Runs the side effects of one deployment outcome."""

    def __init__(
        self,
        controller: ServerInstanceController,
        debug_manager: DebugManager,
        status_bar: StatusBar,
        output: OutputFormatter,
        status_delay: float = 3.0,
        active_session: Callable[[], DebugSession | None] | None = None,
    ):
        self._controller = controller
        self._debug = debug_manager
        self._status = status_bar
        self._output = output
        self._status_delay = status_delay
        self._active_session = active_session or (lambda: debug_manager.sessions.active)
        self.hide_task: asyncio.Task[None] | None = None

    async def handle(self, outcome: DeployOutcome, context: DeployContext) -> None:
        """Handle a deployment outcome.

        Args:
            outcome: DeploySuccess or DeployFailure
            context: Server, workspace and flags of the deployment
        """
        if isinstance(outcome, DeployFailure):
            logger.error(
                "Deployment failed",
                server=context.server.name,
                status=outcome.status_code,
                reason=outcome.message,
            )
            self._output.print_error(f"Application deployment failed: {outcome.message}")
            return

        app_name = outcome.application_name
        workspace = context.workspace
        logger.info("Deployed", server=context.server.name, application=app_name)

        if context.debug and workspace is not None:
            self.reconcile_debugger(workspace)

        if not context.auto_deploy:
            self._controller.open_app(ApplicationInstance(context.server, app_name))
            try:
                await context.server.reload_applications()
            except PayaraError as e:
                logger.warning("Could not reload applications", server=context.server.name, error=str(e))
            self._controller.refresh_server_list()

        scope = workspace.name if workspace is not None else app_name
        self._status.publish(f"{scope} successfully deployed")
        self.hide_task = self._status.hide_after(self._status_delay)

    def reconcile_debugger(self, workspace: Workspace) -> DebugSession | None:
        """Start a debug session unless a matching one is attached.

        Returns:
            The new session, or None when the active one was kept
        """
        config = self._debug.get_payara_config(
            workspace,
            self._debug.get_default_server_config(),
        )

        session = self._active_session()
        if session is not None and session.configuration.matches(config):
            logger.debug("Debugger already attached", port=config.port, type=config.type)
            return None

        return self._debug.start_debugging(workspace, config)
