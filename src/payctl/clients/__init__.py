"""API clients for external services."""

from payctl.clients.payara import PayaraAdminClient, parse_report

__all__ = ["PayaraAdminClient", "parse_report"]
