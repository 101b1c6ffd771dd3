"""Payara Server instances as seen by payctl."""

from rich.console import Console
from rich.rule import Rule

from payctl.clients.payara import PayaraAdminClient
from payctl.config import ServerConfig, ServerMode
from payctl.core.async_utils import run_with_timeout
from payctl.core.exceptions import PayctlError
from payctl.core.logging import get_logger
from payctl.deploy.models import ServerTarget

logger = get_logger(__name__)


class OutputChannel:
    """Per-server log pane.

    Lines are buffered until the channel is shown, then printed as they
    arrive.
    """

    def __init__(self, name: str, console: Console | None = None, max_buffer: int = 500):
        self.name = name
        self._console = console or Console()
        self._max_buffer = max_buffer
        self._buffer: list[str] = []
        self._visible = False

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def lines(self) -> list[str]:
        return list(self._buffer)

    def append_line(self, line: str) -> None:
        if self._visible:
            self._console.print(line, markup=False, highlight=False)
            return
        self._buffer.append(line)
        if len(self._buffer) > self._max_buffer:
            self._buffer = self._buffer[-self._max_buffer :]

    def show(self, preserve_focus: bool = False) -> None:
        """Reveal the channel and flush buffered lines."""
        if self._visible:
            return
        self._visible = True
        if not preserve_focus:
            self._console.print(Rule(f"[bold]{self.name}[/bold]"))
        for line in self._buffer:
            self._console.print(line, markup=False, highlight=False)
        self._buffer.clear()


class ServerInstance:
    """A configured server with its admin client and cached state."""

    def __init__(
        self,
        name: str,
        config: ServerConfig,
        client: PayaraAdminClient | None = None,
        console: Console | None = None,
    ):
        self.name = name
        self.config = config
        self.client = client or PayaraAdminClient(config)
        self.output_channel = OutputChannel(f"Payara Server: {name}", console)
        self.applications: list[str] = []
        self._connection_allowed = config.connection_allowed

    @property
    def is_remote(self) -> bool:
        return self.config.mode == ServerMode.REMOTE

    def is_connection_allowed(self) -> bool:
        return self._connection_allowed

    def target(self) -> ServerTarget:
        """Snapshot the current configuration for classification."""
        return ServerTarget(
            name=self.name,
            mode=self.config.mode,
            instance_type=self.config.instance_type,
            host_path=self.config.host_path,
            container_path=self.config.container_path,
            deploy_option=self.config.deploy_option,
        )

    async def connect(self, timeout: float = 10.0) -> bool:
        """Probe the admin endpoint and record whether it answered."""
        try:
            version = await run_with_timeout(
                self.client.version(),
                timeout,
                f"Server {self.name} did not answer within {timeout}s",
            )
        except PayctlError as e:
            logger.warning("Server not reachable", server=self.name, error=str(e))
            self._connection_allowed = False
            return False

        logger.info("Connected", server=self.name, version=version)
        self._connection_allowed = True
        return True

    async def reload_applications(self) -> list[str]:
        """Refresh the cached application list from the server."""
        self.applications = await self.client.list_applications()
        logger.debug("Reloaded applications", server=self.name, count=len(self.applications))
        return self.applications

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "mode": self.config.mode.value,
            "type": self.config.instance_type.value if self.is_remote else "-",
            "admin_url": self.config.admin_url,
            "deploy_option": self.config.deploy_option.value,
            "connected": self._connection_allowed,
        }
