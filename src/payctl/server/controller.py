"""Server list and deployed application handling."""

import webbrowser
from collections.abc import Callable
from dataclasses import dataclass

from payctl.config import PayctlConfig
from payctl.core.logging import get_logger
from payctl.core.output import OutputFormatter
from payctl.server.instance import ServerInstance

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApplicationInstance:
    """An application deployed on a server."""

    server: ServerInstance
    name: str

    @property
    def url(self) -> str:
        return f"{self.server.config.http_url}/{self.name}"


class ServerInstanceController:
    """Owns the configured servers and reacts to deployments."""

    def __init__(
        self,
        config: PayctlConfig,
        output: OutputFormatter | None = None,
        open_browser: bool | None = None,
    ):
        self._config = config
        self._output = output or OutputFormatter()
        self._open_browser = config.deploy.open_browser if open_browser is None else open_browser
        self._servers: dict[str, ServerInstance] = {}
        self._listeners: list[Callable[[list[ServerInstance]], None]] = []

    def get_server(self, name: str | None = None) -> ServerInstance:
        """Get or create the instance for a configured server."""
        server_config = self._config.get_server(name)
        if name is None:
            name = next(iter(self._config.servers))
        if name not in self._servers:
            self._servers[name] = ServerInstance(name, server_config, console=self._output.console)
        return self._servers[name]

    def get_servers(self) -> list[ServerInstance]:
        return [self.get_server(name) for name in self._config.servers]

    def on_refresh(self, listener: Callable[[list[ServerInstance]], None]) -> None:
        self._listeners.append(listener)

    def open_app(self, app: ApplicationInstance) -> None:
        """Point the user at a freshly deployed application."""
        self._output.print_success(f"{app.name} is available at {app.url}")
        if self._open_browser:
            if not webbrowser.open(app.url):
                logger.warning("Could not open browser", url=app.url)

    def refresh_server_list(self) -> None:
        servers = list(self._servers.values())
        logger.debug("Refreshing server list", servers=len(servers))
        for listener in self._listeners:
            listener(servers)

    async def close(self) -> None:
        for server in self._servers.values():
            await server.client.close()

