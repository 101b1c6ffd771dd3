"""Tests for the deploy invoker."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from payctl.clients.payara import PayaraAdminClient
from payctl.config import ServerConfig
from payctl.core.exceptions import PayaraError
from payctl.deploy.invoker import DeployInvoker
from payctl.deploy.models import AdminResponse, LocalDefault, RemoteUpload
from payctl.deploy.request import build_request


@pytest.fixture
def local_request():
    return build_request("/p/target/shop.war", LocalDefault())


class TestDeployInvoker:
    """Tests for DeployInvoker."""

    @pytest.mark.asyncio
    async def test_success_calls_only_success(self, local_request):
        response = AdminResponse(status_code=200, report={"exit-code": "SUCCESS"})
        transport = MagicMock()
        transport.invoke = AsyncMock(return_value=response)
        on_success, on_failure = MagicMock(), MagicMock()

        await DeployInvoker(transport).invoke(local_request, on_success, on_failure)

        transport.invoke.assert_awaited_once_with(local_request.operation_path, "application/xml", None)
        on_success.assert_called_once_with(response)
        on_failure.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_calls_only_failure(self, local_request):
        transport = MagicMock()
        transport.invoke = AsyncMock(side_effect=PayaraError("boom", status_code=500))
        on_success, on_failure = AsyncMock(), AsyncMock()

        await DeployInvoker(transport).invoke(local_request, on_success, on_failure)

        on_failure.assert_awaited_once_with(500, "boom")
        on_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_file_is_passed(self):
        request = build_request("/p/target/shop.war", RemoteUpload())
        transport = MagicMock()
        transport.invoke = AsyncMock(return_value=AdminResponse(status_code=200))

        await DeployInvoker(transport).invoke(request, MagicMock(), MagicMock())

        args = transport.invoke.await_args.args
        assert args[2] == request.upload_file

    @pytest.mark.asyncio
    async def test_error_in_success_does_not_trigger_failure(self, local_request):
        transport = MagicMock()
        transport.invoke = AsyncMock(return_value=AdminResponse(status_code=200))
        on_success = MagicMock(side_effect=PayaraError("reload failed"))
        on_failure = MagicMock()

        with pytest.raises(PayaraError):
            await DeployInvoker(transport).invoke(local_request, on_success, on_failure)

        on_failure.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_returns_before_completion(self, local_request):
        gate = asyncio.Event()

        async def slow_invoke(*args):
            await gate.wait()
            return AdminResponse(status_code=200)

        transport = MagicMock()
        transport.invoke = slow_invoke
        on_success = MagicMock()

        task = DeployInvoker(transport).submit(local_request, on_success, MagicMock())
        await asyncio.sleep(0)
        assert not task.done()
        on_success.assert_not_called()

        gate.set()
        await task
        on_success.assert_called_once()


class TestDeployInvokerWithClient:
    """Client-side errors still resolve exactly one continuation."""

    @pytest.mark.asyncio
    async def test_missing_password_calls_failure(self, local_request, fake_payara):
        client = PayaraAdminClient(ServerConfig(username="admin"), transport=fake_payara.transport())
        on_success, on_failure = MagicMock(), MagicMock()

        await DeployInvoker(client).invoke(local_request, on_success, on_failure)

        on_success.assert_not_called()
        on_failure.assert_called_once()
        status_code, message = on_failure.call_args.args
        assert status_code is None
        assert "No admin password configured for user admin" in message
        assert fake_payara.requests == []

    @pytest.mark.asyncio
    async def test_unreadable_upload_calls_failure(self, tmp_path, fake_payara):
        war = tmp_path / "shop.war"
        war.write_bytes(b"PK")
        request = build_request(str(war), RemoteUpload())
        client = PayaraAdminClient(ServerConfig(), transport=fake_payara.transport())

        async def broken_stream(path):
            raise OSError("Input/output error")
            yield b""

        on_success, on_failure = MagicMock(), MagicMock()
        with patch("payctl.clients.payara._stream_file", broken_stream):
            await DeployInvoker(client).invoke(request, on_success, on_failure)

        on_success.assert_not_called()
        on_failure.assert_called_once()
        assert "Input/output error" in on_failure.call_args.args[1]
