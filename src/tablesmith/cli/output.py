"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tablesmith.core.types import TableInfo
from tablesmith.exceptions import TablesmithError

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_json(self, data: Any) -> None:
        print(json.dumps(data, default=str, indent=2))

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print rows as a Rich table, or the raw rows as a JSON array."""
        if self.json_mode:
            self.print_json(data)
            return
        table = Table(title=title, show_header=True, header_style="bold magenta")
        for col in columns:
            table.add_column(col)
        for row in data:
            table.add_row(*["" if row.get(col) is None else str(row.get(col)) for col in columns])
        console.print(table)

    def print_table_info(self, info: TableInfo) -> None:
        """Print a table's columns and status."""
        if self.json_mode:
            self.print_json(info.model_dump())
            return

        console.print(f"\n[bold]Table:[/bold] {info.name}")
        if info.row_count is not None:
            console.print(f"Rows: {info.row_count:,}")
        if info.has_update_trigger is not None:
            trigger = "installed" if info.has_update_trigger else "[red]missing[/red]"
            console.print(f"updated_at trigger: {trigger}")
        if info.has_context is not None:
            console.print(f"Context: {'saved' if info.has_context else 'none'}")

        columns = Table(show_header=True, header_style="bold cyan")
        columns.add_column("Name")
        columns.add_column("Type")
        columns.add_column("Nullable")
        for column in info.columns:
            columns.add_row(column.name, column.type, "✓" if column.nullable else "")
        console.print(columns)

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if details:
                output.update(details)
            self.print_json(output)
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, TablesmithError):
                self.print_json({"success": False, **error.to_dict()})
            else:
                self.print_json({"success": False, "error": str(error)})
            return

        error_text = str(error)
        if isinstance(error, TablesmithError) and error.context:
            context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
            error_text = f"{error_text}\n\n{context_str}"
        console.print(Panel(error_text, title="[red]Error[/red]", border_style="red"))

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.)."""
        if self.json_mode:
            self.print_json(data)
        else:
            console.print_json(json.dumps(data, default=str))
