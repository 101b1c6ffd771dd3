"""Console output for payctl commands."""

import json
from collections.abc import Callable
from enum import Enum
from typing import Any

import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

console = Console()
error_console = Console(stderr=True)

Rows = list[dict[str, Any]] | dict[str, Any]

_MARKERS = {
    "success": "[green]✓[/green]",
    "warning": "[yellow]Warning:[/yellow]",
    "info": "[blue]ℹ[/blue]",
}


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    RAW = "raw"


class OutputFormatter:
    """Prints command results and user notices.

    Notices (success, warning, info) are dropped in quiet mode; errors go
    to stderr regardless. Structured results honour ``format``.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        color: bool = True,
        quiet: bool = False,
        console: Console | None = None,
    ):
        self.format = format
        self.color = color
        self.quiet = quiet
        self._console = console or Console(force_terminal=color, no_color=not color)
        self._renderers: dict[OutputFormat, Callable[[Rows, list[str] | None, str | None], None]] = {
            OutputFormat.JSON: lambda data, _h, _t: self._print_document(
                json.dumps(data, indent=2, default=str), "json"
            ),
            OutputFormat.YAML: lambda data, _h, _t: self._print_document(
                yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False),
                "yaml",
            ),
            OutputFormat.RAW: lambda data, _h, _t: self._print_raw(data),
            OutputFormat.TABLE: self._print_table,
        }

    @property
    def console(self) -> Console:
        """Console used for standard output."""
        return self._console

    def _notice(self, kind: str, message: str) -> None:
        if not self.quiet:
            self._console.print(f"{_MARKERS[kind]} {message}")

    def print(self, message: str, style: str | None = None) -> None:
        if not self.quiet:
            self._console.print(message, style=style)

    def print_error(self, message: str) -> None:
        error_console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        self._notice("warning", message)

    def print_success(self, message: str) -> None:
        self._notice("success", message)

    def print_info(self, message: str) -> None:
        self._notice("info", message)

    def print_data(
        self,
        data: Rows,
        headers: list[str] | None = None,
        title: str | None = None,
    ) -> None:
        """Print a record or a list of records in the configured format.

        Args:
            data: One record or a list of records
            headers: Table columns to show, defaults to the first record's keys
            title: Table title, ignored by the other formats
        """
        self._renderers[self.format](data, headers, title)

    def _print_document(self, text: str, lexer: str) -> None:
        # Plain print keeps piped output free of console wrapping
        if self.color:
            self._console.print(Syntax(text, lexer, theme="monokai"))
        else:
            print(text.rstrip("\n"))

    def _print_raw(self, data: Rows) -> None:
        if isinstance(data, dict):
            lines = [f"{key}: {value}" for key, value in data.items()]
        else:
            lines = [str(item) for item in data]
        for line in lines:
            print(line)

    def _print_table(self, data: Rows, headers: list[str] | None, title: str | None) -> None:
        if not data:
            self._console.print("[dim]No data to display[/dim]")
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        if isinstance(data, dict):
            table.add_column("Field", style="dim")
            table.add_column("Value")
            for key, value in data.items():
                table.add_row(str(key), str(value))
        else:
            columns = headers or list(data[0])
            for column in columns:
                table.add_column(column)
            for row in data:
                table.add_row(*(str(row.get(column, "")) for column in columns))
        self._console.print(table)
