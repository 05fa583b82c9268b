"""Row CRUD commands."""

from typing import Annotated

import typer

from tablesmith.cli.context import CLIContext
from tablesmith.cli.output import OutputFormatter
from tablesmith.cli.parsing import parse_json_object, read_json_file, read_jsonl_file

app = typer.Typer(help="Insert, list, update and delete rows")


@app.command("insert")
def data_insert(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    data_json: Annotated[
        str | None,
        typer.Argument(help="Row as JSON object"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", "-f", help="Load rows from a JSON or JSONL file"),
    ] = None,
    batch: Annotated[
        bool,
        typer.Option("--batch", help="Treat --from-file as JSONL, one row per line"),
    ] = False,
) -> None:
    """Insert one or many rows.

    Examples:

        tablesmith data insert travelers '{"name": "Ada", "age": 36}'

        tablesmith data insert travelers --from-file travelers.jsonl --batch
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if not from_file and not data_json:
            raise typer.BadParameter("Either provide the row as JSON or use --from-file")

        table = cli_ctx.get_db().table(table_name)
        if from_file and batch:
            rows = table.insert_many(read_jsonl_file(from_file))
            formatter.print_success(
                f"Inserted {len(rows)} rows",
                {"count": len(rows), "ids": [r["id"] for r in rows[:5]]},
            )
        else:
            data = read_json_file(from_file) if from_file else parse_json_object(data_json or "")
            if isinstance(data, list):
                rows = table.insert_many(data)
                formatter.print_success(f"Inserted {len(rows)} rows", {"count": len(rows)})
            else:
                row = table.insert(data)
                formatter.print_success("Inserted row", {"id": row["id"]})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("list")
def data_list(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Rows per page", min=0)] = 100,
    offset: Annotated[int, typer.Option("--offset", help="Rows to skip", min=0)] = 0,
) -> None:
    """List rows ordered by id."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        db = cli_ctx.get_db()
        page = db.table(table_name).select(limit=limit, offset=offset)

        if cli_ctx.json_output:
            formatter.print_data(page.model_dump())
        else:
            columns = ["id", *[c.name for c in db.get_schema(table_name)], "updated_at"]
            formatter.print_table(
                f"{table_name} ({len(page.rows)} of {page.total_count})", page.rows, columns
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("update")
def data_update(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    record_id: Annotated[int, typer.Argument(help="Row id")],
    data_json: Annotated[str, typer.Argument(help="Columns to change, as JSON object")],
) -> None:
    """Update some columns of a row.

    Examples:

        tablesmith data update travelers 1 '{"age": 37}'
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        row = cli_ctx.get_db().table(table_name).update(record_id, parse_json_object(data_json))
        formatter.print_success(f"Updated row {record_id}", {"updated_at": row["updated_at"]})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("delete")
def data_delete(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    record_id: Annotated[int, typer.Argument(help="Row id")],
) -> None:
    """Delete a row (deleting a missing row is not an error)."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        deleted = cli_ctx.get_db().table(table_name).delete(record_id)
        formatter.print_success(f"Deleted {deleted} row(s)", {"deleted": deleted})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
