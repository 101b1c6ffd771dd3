"""Payara Server admin client using httpx."""

import asyncio
import xml.etree.ElementTree as ET
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import httpx

from payctl.config import ServerConfig
from payctl.core.exceptions import AuthenticationError, PayaraError
from payctl.core.logging import get_logger
from payctl.deploy.models import AdminResponse

logger = get_logger(__name__)

ASADMIN_PATH = "/__asadmin/"
CHUNK_SIZE = 64 * 1024


def _element_to_dict(element: ET.Element) -> dict[str, Any]:
    node: dict[str, Any] = {}
    if element.attrib:
        node["$"] = dict(element.attrib)
    for child in element:
        node.setdefault(child.tag, []).append(_element_to_dict(child))
    text = (element.text or "").strip()
    if text:
        node["_"] = text
    return node


def parse_report(text: str) -> dict[str, Any]:
    """Parse an asadmin action report.

    Children become lists keyed by tag and attributes sit under ``$``;
    the root element's attributes are also copied to the top level so
    ``report["exit-code"]`` works.

    Example:
        ``<action-report exit-code="SUCCESS"><message-part message="">
        <property name="name" value="app"/></message-part></action-report>``
        parses to ``report["message-part"][0]["property"][0]["$"]``
        == ``{"name": "name", "value": "app"}``.
    """
    if not text.strip():
        return {}
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        logger.debug("Response is not an action report", error=str(e))
        return {}
    report = _element_to_dict(root)
    report.update(root.attrib)
    return report


def report_message(report: dict[str, Any]) -> str | None:
    """Pull the human readable message out of a report."""
    if report.get("failure-cause"):
        return report["failure-cause"]
    for part in report.get("message-part", []):
        message = part.get("$", {}).get("message")
        if message:
            return message
    return None


async def _stream_file(path: Path) -> AsyncIterator[bytes]:
    with open(path, "rb") as f:
        while chunk := await asyncio.to_thread(f.read, CHUNK_SIZE):
            yield chunk


class PayaraAdminClient:
    """Client for the Payara Server asadmin-over-HTTP endpoint."""

    def __init__(self, config: ServerConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            username = self._config.get_username()
            password = self._config.get_password()

            auth: httpx.BasicAuth | None = None
            if username:
                if password is None:
                    raise AuthenticationError(f"No admin password configured for user {username}")
                auth = httpx.BasicAuth(username, password)

            self._client = httpx.AsyncClient(
                base_url=self._config.admin_url,
                headers={"X-Requested-By": "payctl"},
                auth=auth,
                timeout=self._config.timeout,
                verify=not self._config.insecure,
                transport=self._transport,
            )

            logger.debug("Created Payara admin client", url=self._config.admin_url)

        return self._client

    async def invoke(
        self,
        operation_path: str,
        content_type: str = "application/xml",
        upload_file: str | Path | None = None,
    ) -> AdminResponse:
        """Run an admin command.

        Args:
            operation_path: Command name with its query string
            content_type: Report format to ask the server for
            upload_file: Local file streamed as the request body

        Returns:
            AdminResponse with the parsed report

        Raises:
            PayaraError: On transport, credential or upload read errors, or a
                non-200 status
        """
        url = ASADMIN_PATH + operation_path
        headers = {"Accept": content_type}

        try:
            if upload_file is not None:
                path = Path(upload_file)
                if not path.is_file():
                    raise PayaraError(f"Upload file not found: {path}")
                headers["Content-Type"] = "application/octet-stream"
                headers["Content-Length"] = str(path.stat().st_size)
                response = await self.client.post(url, headers=headers, content=_stream_file(path))
            else:
                response = await self.client.get(url, headers=headers)
        except httpx.RequestError as e:
            raise PayaraError(f"Request failed: {e}")
        except AuthenticationError as e:
            raise PayaraError(e.message, details=e.details)
        except OSError as e:
            raise PayaraError(f"Request failed: {e}")

        report = parse_report(response.text)
        if response.status_code != 200:
            message = report_message(report) or response.text.strip() or response.reason_phrase
            raise PayaraError(message, status_code=response.status_code)

        return AdminResponse(status_code=response.status_code, report=report, text=response.text)

    async def list_applications(self) -> list[str]:
        """List the applications deployed on the server."""
        response = await self.invoke("list-applications")
        names: list[str] = []
        for part in response.report.get("message-part", []):
            for holder in [part, *part.get("message-part", [])]:
                for prop in holder.get("property", []):
                    attrs = prop.get("$", {})
                    if attrs.get("name") and attrs.get("value") is not None:
                        names.append(attrs["name"])
        return names

    async def version(self) -> str:
        """Get the server version string."""
        response = await self.invoke("version")
        return report_message(response.report) or ""

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PayaraAdminClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
