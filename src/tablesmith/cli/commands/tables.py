"""Table definition commands."""

from typing import Annotated

import typer

from tablesmith.cli.context import CLIContext
from tablesmith.cli.output import OutputFormatter
from tablesmith.cli.parsing import parse_column_spec, read_json_file

app = typer.Typer(help="Create, inspect, alter and drop tables")


@app.command("list")
def tables_list(ctx: typer.Context) -> None:
    """List all user tables."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        db = cli_ctx.get_db()
        names = db.list_tables()

        if cli_ctx.json_output:
            formatter.print_data(names)
        else:
            rows = []
            for name in names:
                info = db.describe_table(name)
                rows.append(
                    {
                        "Name": info.name,
                        "Columns": len(info.columns),
                        "Rows": info.row_count or 0,
                        "Context": "✓" if info.has_context else "",
                    }
                )
            formatter.print_table(
                f"Tables ({len(names)} total)", rows, ["Name", "Columns", "Rows", "Context"]
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("describe")
def tables_describe(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
) -> None:
    """Show columns, row count, trigger state and context of a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        formatter.print_table_info(cli_ctx.get_db().describe_table(name))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("create")
def tables_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name (e.g. travelers)")],
    columns: Annotated[
        list[str] | None,
        typer.Option(
            "--field",
            "-f",
            help="Column spec: name:TYPE[:notnull]. Can be repeated.",
        ),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", help='Load columns from JSON: {"columns": [...]}'),
    ] = None,
) -> None:
    """Create a table.

    Examples:

        tablesmith tables create travelers -f "name:VARCHAR(255):notnull" -f "age:INTEGER"

        tablesmith tables create travelers --from-file travelers.json
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if from_file:
            document = read_json_file(from_file)
            specs = document.get("columns", []) if isinstance(document, dict) else document
        else:
            specs = [parse_column_spec(spec) for spec in columns or []]

        info = cli_ctx.get_db().create_table(name, specs)
        formatter.print_success(
            f"Table '{info.name}' ready",
            {"name": info.name, "columns": len(info.columns)},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("alter")
def tables_alter(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    column_spec: Annotated[str, typer.Argument(help="Column spec: name:TYPE[:notnull]")],
) -> None:
    """Add a column to a table.

    Examples:

        tablesmith tables alter travelers "email:VARCHAR(255)"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        column = cli_ctx.get_db().alter_table(name, parse_column_spec(column_spec))
        formatter.print_success(
            f"Added column '{column.name}' to '{name}'",
            {"type": column.type, "nullable": column.nullable},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("drop")
def tables_drop(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    force: Annotated[
        bool,
        typer.Option("--force", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Drop a table with all its rows and its context."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    if not force and not cli_ctx.json_output:
        if not typer.confirm(f"Drop table '{name}' and all of its rows?"):
            typer.echo("Cancelled.")
            raise typer.Exit(code=0)

    try:
        dropped = cli_ctx.get_db().drop_table(name)
        if dropped:
            formatter.print_success(f"Table '{name}' dropped")
        else:
            formatter.print_success(f"Table '{name}' did not exist", {"dropped": False})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
