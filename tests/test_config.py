"""Tests for configuration management."""

import os
from pathlib import Path

import pytest

from payctl.config import (
    ConfigLoader,
    deep_merge,
    DebugConfig,
    DeployConfig,
    InstanceType,
    PayctlConfig,
    ServerConfig,
    ServerMode,
    get_default_config,
)
from payctl.core.exceptions import ConfigError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty home and working directory."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work


class TestServerConfig:
    """Tests for ServerConfig model."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.mode == ServerMode.LOCAL
        assert config.admin_url == "http://localhost:4848"
        assert config.http_url == "http://localhost:8080"
        assert config.connection_allowed is True

    def test_invalid_protocol(self):
        with pytest.raises(ValueError):
            ServerConfig(protocol="ftp")

    def test_docker_needs_both_paths(self):
        with pytest.raises(ValueError):
            ServerConfig(instance_type=InstanceType.DOCKER, host_path="/home/u")

    def test_docker_without_mapping(self):
        config = ServerConfig(mode=ServerMode.REMOTE, instance_type=InstanceType.DOCKER)
        assert config.host_path is None

    def test_username_from_env(self):
        os.environ["PAYCTL_USERNAME"] = "env-admin"
        assert ServerConfig(username="admin").get_username() == "env-admin"

    def test_password_from_env(self):
        os.environ["PAYARA_PASSWORD"] = "secret"
        assert ServerConfig(password="from_env").get_password() == "secret"
        assert ServerConfig().get_password() == "secret"

    def test_password_explicit(self):
        os.environ["PAYCTL_PASSWORD"] = "ignored"
        assert ServerConfig(password="admin123").get_password() == "admin123"


class TestDeployConfig:
    """Tests for DeployConfig model."""

    def test_workspaces_default_to_cwd(self, isolated):
        assert DeployConfig().get_workspaces() == [isolated.resolve()]

    def test_workspaces_from_env(self, tmp_path):
        os.environ["PAYCTL_WORKSPACE"] = str(tmp_path)
        assert DeployConfig().get_workspaces() == [tmp_path.resolve()]

    def test_explicit_workspaces(self, tmp_path):
        config = DeployConfig(workspaces=[str(tmp_path / "a"), str(tmp_path / "b")])
        assert [p.name for p in config.get_workspaces()] == ["a", "b"]


class TestDebugConfig:
    """Tests for DebugConfig model."""

    def test_defaults(self):
        config = DebugConfig()
        assert (config.type, config.request, config.port) == ("java", "attach", 9009)

    def test_attach_command_from_env(self):
        os.environ["PAYCTL_DEBUG_ATTACH"] = "jdb -attach {host}:{port}"
        assert DebugConfig().get_attach_command() == "jdb -attach {host}:{port}"


class TestPayctlConfig:
    """Tests for PayctlConfig model."""

    def test_default_config(self):
        config = get_default_config()
        assert list(config.servers) == ["local"]
        assert config.deploy.status_delay == 3.0

    def test_global_alias(self):
        config = PayctlConfig(**{"global": {"output_format": "json"}})
        assert config.global_settings.output_format.value == "json"

    def test_get_only_server(self):
        config = PayctlConfig()
        assert config.get_server() is config.servers["local"]

    def test_get_server_needs_name(self, mock_config):
        with pytest.raises(ConfigError) as exc_info:
            mock_config.get_server()
        assert "docker" in str(exc_info.value)

    def test_get_unknown_server(self, mock_config):
        with pytest.raises(ConfigError):
            mock_config.get_server("nope")


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_explicit_file(self, isolated, temp_config_file):
        config = ConfigLoader().load(temp_config_file)
        assert set(config.servers) == {"local", "remote"}
        assert config.servers["remote"].connection_allowed is False
        assert config.deploy.verify_connection is False

    def test_missing_file(self, isolated):
        with pytest.raises(ConfigError):
            ConfigLoader().load("/nonexistent/payctl.yaml")

    def test_invalid_yaml(self, isolated, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("servers: [unclosed")
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(path)
        assert "Invalid YAML" in str(exc_info.value)

    def test_invalid_values(self, isolated, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("servers:\n  local:\n    protocol: ftp\n")
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(path)
        assert "Invalid configuration" in str(exc_info.value)

    def test_project_config_found_upwards(self, isolated):
        (isolated / "payctl.yaml").write_text("debug:\n  port: 5005\n")
        nested = isolated / "module" / "src"
        nested.mkdir(parents=True)
        os.chdir(nested)

        assert ConfigLoader().load().debug.port == 5005

    def test_merge_order(self, isolated, tmp_path):
        user_dir = Path(os.environ["HOME"]) / ".payctl"
        user_dir.mkdir()
        (user_dir / "config.yaml").write_text(
            "debug:\n  port: 5005\n  host_name: devbox\nservers:\n  local:\n    admin_port: 4949\n"
        )
        (isolated / "payctl.yaml").write_text("debug:\n  port: 6006\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("servers:\n  local:\n    http_port: 9090\n")

        config = ConfigLoader().load(explicit)

        assert config.debug.port == 6006
        assert config.debug.host_name == "devbox"
        assert config.servers["local"].admin_port == 4949
        assert config.servers["local"].http_port == 9090

    def test_not_a_mapping(self, isolated, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- local\n- remote\n")
        with pytest.raises(ConfigError):
            ConfigLoader().load(path)

    def test_explicit_start_dir(self, tmp_path):
        project = tmp_path / "project"
        project.mkdir()
        (project / ".payctl.yml").write_text("deploy:\n  open_browser: true\n")
        loader = ConfigLoader(home=tmp_path / "nohome", start_dir=project)
        assert loader.load().deploy.open_browser is True

    def test_deep_merge(self):
        merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}, "e": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 1, "e": 4}
