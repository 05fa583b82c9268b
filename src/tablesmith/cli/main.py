"""Tablesmith CLI - Main entry point."""

import logging
import sys
from typing import Annotated

import typer

import tablesmith
from tablesmith.cli.context import CLIContext
from tablesmith.core.config import ENV_PREFIX, Settings

app = typer.Typer(
    name="tablesmith",
    help="Tablesmith CLI - runtime-defined tables with semantic context",
    no_args_is_help=True,
)

# Store CLI context globally (set in callback)
state: dict[str, CLIContext] = {}


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar=f"{ENV_PREFIX}URL",
            help="Database URL (PostgreSQL or SQLite)",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    settings = Settings.from_env(database_url=database, echo=echo or None)
    cli_ctx = CLIContext(settings=settings, json_output=json_output)

    ctx.obj = cli_ctx
    state["cli_ctx"] = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"Tablesmith v{tablesmith.__version__}")


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    ] = None,
) -> None:
    """Run the REST API server."""
    import uvicorn

    from tablesmith.api import create_app

    cli_ctx: CLIContext = ctx.obj
    settings = cli_ctx.settings
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    db = cli_ctx.get_db()
    try:
        uvicorn.run(
            create_app(db),
            host=host or settings.host,
            port=port or settings.port,
            log_level=level.lower(),
        )
    finally:
        cli_ctx.close()


# Register command groups
from tablesmith.cli.commands import context, data, tables  # noqa: E402

app.add_typer(tables.app, name="tables")
app.add_typer(data.app, name="data")
app.add_typer(context.app, name="context")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
