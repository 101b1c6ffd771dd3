"""Configuration management for payctl using Pydantic."""

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from payctl.core.exceptions import ConfigError
from payctl.core.output import OutputFormat
from payctl.core.logging import LogLevel


class ServerMode(str, Enum):
    """Where the server instance runs."""

    LOCAL = "local"
    REMOTE = "remote"


class InstanceType(str, Enum):
    """Execution environment of a remote server instance."""

    GENERIC = "generic"
    DOCKER = "docker"
    WSL = "wsl"


class DeployOption(str, Enum):
    """How artifacts are pushed to a server instance."""

    DEFAULT = "default"
    HOT_RELOAD = "hot_reload"


class ServerConfig(BaseModel):
    """Payara Server instance configuration."""

    mode: ServerMode = ServerMode.LOCAL
    host: str = "localhost"
    admin_port: int = 4848
    http_port: int = 8080
    protocol: str = "http"
    instance_type: InstanceType = InstanceType.GENERIC
    host_path: str | None = None
    container_path: str | None = None
    deploy_option: DeployOption = DeployOption.DEFAULT
    username: str | None = None
    password: str | None = None
    connection_allowed: bool = True
    insecure: bool = False
    timeout: int = 120

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        if v not in ("http", "https"):
            raise ValueError("protocol must be 'http' or 'https'")
        return v

    @model_validator(mode="after")
    def validate_docker_mapping(self) -> "ServerConfig":
        if self.instance_type == InstanceType.DOCKER and bool(self.host_path) != bool(
            self.container_path
        ):
            raise ValueError("docker instances need both host_path and container_path, or neither")
        return self

    def get_username(self) -> str | None:
        """Get admin username from config or environment."""
        return os.environ.get("PAYCTL_USERNAME") or self.username

    def get_password(self) -> str | None:
        """Get admin password from config or environment."""
        password = self.password
        if password == "from_env" or password is None:
            password = os.environ.get("PAYCTL_PASSWORD") or os.environ.get("PAYARA_PASSWORD")
        return password

    @property
    def admin_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.admin_port}"

    @property
    def http_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.http_port}"


class DeployConfig(BaseModel):
    """Deployment behaviour."""

    status_delay: float = 3.0  # seconds the "successfully deployed" status stays visible
    open_browser: bool = False
    verify_connection: bool = True
    connect_timeout: float = 10.0
    workspaces: list[str] = Field(default_factory=list)

    def get_workspaces(self) -> list[Path]:
        """Workspace roots, defaulting to the current directory."""
        roots = self.workspaces or [os.environ.get("PAYCTL_WORKSPACE") or str(Path.cwd())]
        return [Path(r).expanduser().resolve() for r in roots]


class DebugConfig(BaseModel):
    """Remote debugger defaults."""

    type: str = "java"
    request: str = "attach"
    host_name: str = "localhost"
    port: int = 9009
    attach_command: str | None = None

    def get_attach_command(self) -> str | None:
        """Get debugger attach command from config or environment."""
        return os.environ.get("PAYCTL_DEBUG_ATTACH") or self.attach_command


class BuildConfig(BaseModel):
    """Build tool settings."""

    maven_goals: list[str] = Field(default_factory=lambda: ["package", "-DskipTests"])
    gradle_tasks: list[str] = Field(default_factory=lambda: ["build", "-x", "test"])
    use_wrapper: bool = True
    timeout: float = 900


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class PayctlConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    servers: dict[str, ServerConfig] = Field(default_factory=lambda: {"local": ServerConfig()})
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)

    def get_server(self, name: str | None = None) -> ServerConfig:
        """Get a server by name, defaulting to the only configured one."""
        if name is None:
            if len(self.servers) == 1:
                return next(iter(self.servers.values()))
            raise ConfigError(
                "Several servers configured, pick one with --server",
                details={"servers": ", ".join(sorted(self.servers))},
            )
        if name not in self.servers:
            raise ConfigError(f"Server '{name}' not found")
        return self.servers[name]


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into mappings."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


class ConfigLoader:
    """Loads and merges payctl configuration files.

    Later sources win: the user file, then the nearest project file, then
    a file named on the command line.
    """

    CONFIG_FILENAMES = ("payctl.yaml", "payctl.yml", ".payctl.yaml", ".payctl.yml")

    def __init__(self, home: Path | None = None, start_dir: Path | None = None):
        self._home = home
        self._start_dir = start_dir

    @property
    def user_config_path(self) -> Path:
        return (self._home or Path.home()) / ".payctl" / "config.yaml"

    def find_project_config(self) -> Path | None:
        """Return the nearest project config, searching up from the start dir."""
        start = (self._start_dir or Path.cwd()).resolve()
        for directory in (start, *start.parents):
            for filename in self.CONFIG_FILENAMES:
                candidate = directory / filename
                if candidate.is_file():
                    return candidate
        return None

    def sources(self, config_file: str | Path | None = None) -> list[Path]:
        """Config files that apply, lowest priority first.

        Raises:
            ConfigError: If ``config_file`` does not exist
        """
        found = [p for p in (self.user_config_path, self.find_project_config()) if p and p.is_file()]
        if config_file:
            explicit = Path(config_file)
            if not explicit.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            found.append(explicit)
        return found

    def load(self, config_file: str | Path | None = None) -> PayctlConfig:
        """Load and validate the merged configuration.

        Raises:
            ConfigError: If a file is unreadable or the result is invalid
        """
        merged: dict[str, Any] = {}
        for path in self.sources(config_file):
            merged = deep_merge(merged, self._read(path))

        try:
            return PayctlConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return data


def load_config(config_file: str | Path | None = None) -> PayctlConfig:
    """Load payctl configuration from the standard locations."""
    return ConfigLoader().load(config_file)


def get_default_config() -> PayctlConfig:
    """Get default configuration without loading from files."""
    return PayctlConfig()
