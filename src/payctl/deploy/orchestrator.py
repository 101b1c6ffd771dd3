"""Build-and-deploy orchestration."""

import asyncio
from collections.abc import Sequence
from pathlib import Path

from payctl.build import BuildSupport
from payctl.config import BuildConfig
from payctl.core.logging import get_logger
from payctl.core.output import OutputFormatter
from payctl.deploy.classifier import classify
from payctl.deploy.invoker import DeployInvoker
from payctl.deploy.models import (
    AdminResponse,
    DeployContext,
    DeployFailure,
    DeploymentRequest,
    Workspace,
    find_workspace,
)
from payctl.deploy.outcome import DeployOutcomeHandler, interpret
from payctl.deploy.request import build_request
from payctl.server.instance import ServerInstance

logger = get_logger(__name__)


class DeploymentSupport:
    """Builds a project and deploys the artifact to a server instance."""

    def __init__(
        self,
        handler: DeployOutcomeHandler,
        output: OutputFormatter,
        workspaces: list[Path],
        build_config: BuildConfig | None = None,
        build_support: type[BuildSupport] = BuildSupport,
        invoker_factory: type[DeployInvoker] = DeployInvoker,
    ):
        self._handler = handler
        self._output = output
        self._workspaces = workspaces
        self._build_config = build_config or BuildConfig()
        self._build_support = build_support
        self._invoker_factory = invoker_factory
        self._pending: set[asyncio.Task[None]] = set()

    async def build_and_deploy(
        self,
        uri: str | Path,
        server: ServerInstance,
        debug: bool,
        auto_deploy: bool = False,
        metadata_changed: bool = False,
        sources_changed: Sequence[str] | None = None,
    ) -> None:
        """Build the project at ``uri`` and deploy what it produces.

        Remote servers that are not connected are skipped with a warning
        before anything is built.

        Raises:
            BuildError: If the build fails
        """
        if not self.check_connectable(server):
            return

        remote_kind = server.config.instance_type if server.is_remote else None
        build = self._build_support.get_build(server, uri, self._build_config)

        async def deploy_artifact(artifact: str) -> None:
            await self.deploy_application(
                artifact,
                server,
                debug,
                auto_deploy=auto_deploy,
                metadata_changed=metadata_changed,
                sources_changed=sources_changed,
            )

        await build.build_project(server.is_remote, remote_kind, deploy_artifact, auto_deploy)

    def check_connectable(self, server: ServerInstance) -> bool:
        """Warn and return False for a remote server that is not connected."""
        if server.is_remote and not server.is_connection_allowed():
            message = f"Payara remote server instance {server.name} not connected"
            logger.warning(message, server=server.name)
            self._output.print_warning(message)
            return False
        return True

    async def deploy_application(
        self,
        app_path: str | Path,
        server: ServerInstance,
        debug: bool,
        auto_deploy: bool = False,
        metadata_changed: bool = False,
        sources_changed: Sequence[str] | None = None,
    ) -> DeploymentRequest:
        """Deploy an already built artifact.

        The request is submitted and this returns right away; the outcome
        is handled when the server answers. Use :meth:`drain` to wait.

        Raises:
            ValidationError: If no valid request can be built for the path
        """
        if not auto_deploy:
            server.output_channel.show(preserve_focus=False)

        target = server.target()
        strategy = classify(target)
        request = build_request(
            str(app_path),
            strategy,
            target.deploy_option,
            metadata_changed=metadata_changed,
            sources_changed=sources_changed,
        )
        context = DeployContext(
            server=server,
            workspace=self._workspace_for(app_path),
            debug=debug,
            auto_deploy=auto_deploy,
        )

        async def on_success(response: AdminResponse) -> None:
            outcome = interpret(response)
            if outcome is not None:
                await self._handler.handle(outcome, context)

        async def on_failure(status_code: int | None, message: str) -> None:
            await self._handler.handle(DeployFailure(message, status_code), context)

        task = self._invoker_factory(server.client).submit(request, on_success, on_failure)
        self._pending.add(task)
        return request

    async def drain(self) -> None:
        """Wait for submitted deployments and their outcome handling.

        Errors raised while handling an outcome surface here.
        """
        while self._pending:
            await self._pending.pop()

    def _workspace_for(self, app_path: str | Path) -> Workspace | None:
        workspace = find_workspace(app_path, self._workspaces)
        if workspace is None:
            logger.debug("Artifact is outside known workspaces", path=str(app_path))
        return workspace
