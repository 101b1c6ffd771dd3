"""Send deployment requests to the server admin endpoint."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from payctl.core.async_utils import call_maybe_async
from payctl.core.exceptions import PayaraError
from payctl.core.logging import get_logger
from payctl.deploy.models import AdminResponse, DeploymentRequest

logger = get_logger(__name__)

REPORT_CONTENT_TYPE = "application/xml"

SuccessCallback = Callable[[AdminResponse], Awaitable[Any] | Any]
FailureCallback = Callable[[int | None, str], Awaitable[Any] | Any]


class AdminTransport(Protocol):
    """What the invoker needs from an admin client."""

    async def invoke(
        self,
        operation_path: str,
        content_type: str = REPORT_CONTENT_TYPE,
        upload_file: Any = None,
    ) -> AdminResponse: ...


class DeployInvoker:
    """Runs a deployment request and resolves exactly one continuation."""

    def __init__(self, transport: AdminTransport):
        self._transport = transport

    async def invoke(
        self,
        request: DeploymentRequest,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        """Invoke the deploy command.

        ``on_success`` receives the AdminResponse, ``on_failure`` the HTTP
        status (None for transport errors) and the server's message. Errors
        raised by a continuation propagate to the caller and never trigger
        the other one.
        """
        log = logger.bind(application=request.application_name)
        log.info("Invoking deploy", operation=request.operation_path, upload=bool(request.upload_file))

        try:
            response = await self._transport.invoke(
                request.operation_path,
                REPORT_CONTENT_TYPE,
                request.upload_file,
            )
        except PayaraError as e:
            log.debug("Deploy rejected", status=e.status_code)
            await call_maybe_async(on_failure, e.status_code, e.message)
            return

        await call_maybe_async(on_success, response)

    def submit(
        self,
        request: DeploymentRequest,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> "asyncio.Task[None]":
        """Schedule :meth:`invoke` on the running loop and return at once."""
        return asyncio.create_task(
            self.invoke(request, on_success, on_failure),
            name=f"deploy:{request.application_name}",
        )
