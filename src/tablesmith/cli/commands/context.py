"""Table context commands."""

from typing import Annotated

import typer

from tablesmith.cli.context import CLIContext
from tablesmith.cli.output import OutputFormatter

app = typer.Typer(help="Describe tables in plain language and search the descriptions")


@app.command("save")
def context_save(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    description: Annotated[str, typer.Argument(help="What the table holds")],
) -> None:
    """Save (or replace) a table's description and embed it.

    Examples:

        tablesmith context save travelers "Passengers booked on summer charters"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        context = cli_ctx.get_db().save_context(table_name, description)
        formatter.print_success(
            f"Saved context for '{table_name}'",
            {"model": context.model, "dimensions": context.dimensions},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("get")
def context_get(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    with_embedding: Annotated[
        bool, typer.Option("--with-embedding", help="Include the raw vector")
    ] = False,
) -> None:
    """Show a table's saved context."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        context = cli_ctx.get_db().get_context(table_name)
        formatter.print_data(context.to_public(include_embedding=with_embedding))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("list")
def context_list(ctx: typer.Context) -> None:
    """List saved contexts."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        contexts = [c.to_public() for c in cli_ctx.get_db().list_contexts()]
        formatter.print_table(
            f"Contexts ({len(contexts)} total)",
            contexts,
            ["table_name", "description", "model", "dimensions"],
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("delete")
def context_delete(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
) -> None:
    """Delete a table's context (the table itself is kept)."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        deleted = cli_ctx.get_db().delete_context(table_name)
        formatter.print_success(
            f"Context for '{table_name}' {'deleted' if deleted else 'did not exist'}",
            {"deleted": deleted},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("search")
def context_search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Natural-language question")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results", min=0)] = 5,
) -> None:
    """Find the tables whose descriptions best match a question.

    Examples:

        tablesmith context search "who is flying in July?"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        results = cli_ctx.get_db().search_contexts(query, limit)
        rows = [
            {
                "table_name": r.context.table_name,
                "distance": round(r.distance, 4),
                "score": round(r.score, 4),
                "description": r.context.description,
            }
            for r in results
        ]
        formatter.print_table(
            f"Results for '{query}'", rows, ["table_name", "distance", "description"]
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
