"""schemaforge CLI - SQL schemas to ER diagrams."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable
import structlog

from schemaforge import __version__
from schemaforge.config import SchemaForgeConfig, validate_config
from schemaforge.core.errors import ClassifiedError, ConfigError, classify_error
from schemaforge.diagrams import DiagramFormat, render
from schemaforge.llm.response import SqlResponseParser
from schemaforge.logging import setup_logging
from schemaforge.parser import ParsedSchema, parse_schema
from schemaforge.session import SchemaSession

log = structlog.get_logger()

console = Console()
err_console = Console(stderr=True)

FORMAT_CHOICES = [f.value for f in DiagramFormat]


def _fail(error: ClassifiedError):
    """Print a classified error and exit with status 1."""
    err_console.print(f"[red]✗ {escape(error.message)}[/]")
    if error.suggestion:
        err_console.print(f"[dim]  {escape(error.suggestion)}[/dim]")
    sys.exit(1)


def _read_source(source: str) -> str:
    """Read text from a file path, or stdin for '-'."""
    if source == "-":
        return click.get_text_stream("stdin").read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.error("source_read_failed", path=source, error=str(e))
        _fail(classify_error(e, f"Cannot read {source}"))


def _load_sql(config: SchemaForgeConfig, source: str, from_response: bool) -> str:
    text = _read_source(source)
    if not from_response:
        return text

    sql = SqlResponseParser(config.sql_tool_names).extract(text)
    if sql is None:
        err_console.print("[red]✗ No SQL found in model response[/]")
        sys.exit(1)
    return sql


def _print_schema(schema: ParsedSchema):
    """Print tables and relations as rich tables."""
    for table in schema.tables:
        grid = RichTable(
            title=f"{escape(table.name)} [dim]#{table.id}[/dim]",
            show_header=True,
            header_style="bold magenta",
            title_justify="left",
        )
        grid.add_column("Column", style="cyan")
        grid.add_column("Type", style="yellow")
        grid.add_column("Keys", style="green")

        for column in table.columns:
            keys = []
            if column.is_primary_key:
                keys.append("PK")
            if column.is_foreign_key:
                keys.append("FK")
            grid.add_row(escape(column.name), escape(column.type) or "[dim]?[/dim]", " ".join(keys))

        console.print(grid)

    if schema.relations:
        console.print("\n[bold]Relations:[/]")
        for rel in schema.relations:
            console.print(
                escape(f"  {rel.from_table}.{rel.from_column} → {rel.to_table}.{rel.to_column}")
            )

    console.print(
        f"\n[dim]{len(schema.tables)} table(s), {len(schema.relations)} relation(s)[/dim]"
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False),
    help="Config file (default: ./schemaforge.toml or ~/.schemaforge/config.toml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx, config_path: Optional[str] = None, log_level: Optional[str] = None):
    """schemaforge - SQL schemas to ER diagrams"""
    setup_logging(log_level or "WARNING")

    try:
        config = SchemaForgeConfig.load(config_path)
    except ConfigError as e:
        _fail(classify_error(e))

    if log_level:
        config.log_level = log_level.upper()

    setup_logging(
        config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        json_format=config.json_logs,
    )
    ctx.obj = config


@cli.command()
@click.argument("source", default="-", type=click.Path(dir_okay=False, allow_dash=True))
@click.option("--response", "-r", "from_response", is_flag=True,
              help="Treat input as a model response and extract its SQL")
@click.option("--json", "as_json", is_flag=True, help="Print the schema as JSON")
@click.pass_obj
def parse(config: SchemaForgeConfig, source: str, from_response: bool, as_json: bool):
    """Parse CREATE TABLE statements from SOURCE (file or '-' for stdin)."""
    schema = parse_schema(_load_sql(config, source, from_response))

    if as_json:
        click.echo(schema.to_json())
        return

    if schema.is_empty:
        console.print("[yellow]No schema to display.[/]")
        return

    _print_schema(schema)


@cli.command()
@click.argument("source", default="-", type=click.Path(dir_okay=False, allow_dash=True))
@click.option("--format", "-f", "fmt", type=click.Choice(FORMAT_CHOICES),
              help="Output format (default from config)")
@click.option("--title", "-t", help="Diagram title")
@click.option("--no-types", is_flag=True, help="Hide column types")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the diagram to a file")
@click.option("--response", "-r", "from_response", is_flag=True,
              help="Treat input as a model response and extract its SQL")
@click.pass_obj
def diagram(
    config: SchemaForgeConfig,
    source: str,
    fmt: Optional[str],
    title: Optional[str],
    no_types: bool,
    output: Optional[str],
    from_response: bool,
):
    """Render an ER diagram for the tables in SOURCE."""
    schema = parse_schema(_load_sql(config, source, from_response))
    if schema.is_empty:
        err_console.print("[red]✗ No tables found[/]")
        err_console.print("[dim]  Each table needs the shape: CREATE TABLE name ( ... );[/dim]")
        sys.exit(1)

    fmt = fmt or config.diagram.format.value
    rendered = render(
        schema,
        fmt,
        show_types=config.diagram.show_types and not no_types,
        title=title or config.diagram.title,
        layout=config.layout.to_options(),
    )

    if output:
        try:
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(rendered if rendered.endswith("\n") else rendered + "\n", encoding="utf-8")
        except OSError as e:
            _fail(classify_error(e, f"Cannot write {output}"))
        console.print(f"[green]✓ Diagram saved to {output}[/] [dim]({fmt}, {len(schema.tables)} tables)[/dim]")
        return

    click.echo(rendered.rstrip("\n"))


@cli.command()
@click.argument("source", default="-", type=click.Path(dir_okay=False, allow_dash=True))
@click.pass_obj
def extract(config: SchemaForgeConfig, source: str):
    """Print the SQL carried by a model response in SOURCE."""
    click.echo(_load_sql(config, source, from_response=True))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the final schema as JSON")
@click.option("--quiet", "-q", is_flag=True, help="Only print the final schema")
@click.pass_obj
def stream(config: SchemaForgeConfig, as_json: bool, quiet: bool):
    """Follow a model response streamed on stdin, re-parsing as it grows."""
    session = SchemaSession(response_parser=SqlResponseParser(config.sql_tool_names))

    if not quiet and not as_json:
        def report(schema: ParsedSchema):
            console.print(
                f"[dim]rev {session.revision}:[/dim] "
                f"{len(schema.tables)} table(s), {len(schema.relations)} relation(s)"
            )

        session.subscribe(report)

    for chunk in click.get_text_stream("stdin"):
        session.feed(chunk)

    if as_json:
        click.echo(session.schema.to_json())
    elif session.schema.is_empty:
        console.print("[yellow]No schema to display.[/]")
    else:
        _print_schema(session.schema)


@cli.command("config")
@click.option("--init", "init_path", type=click.Path(dir_okay=False),
              help="Write a default config file to this path")
@click.option("--force", is_flag=True, help="Overwrite an existing file with --init")
@click.pass_obj
def config_cmd(config: SchemaForgeConfig, init_path: Optional[str], force: bool):
    """Show the effective configuration, or write a default one."""
    if init_path:
        if Path(init_path).exists() and not force:
            err_console.print(f"[red]✗ {init_path} already exists[/] [dim](use --force)[/dim]")
            sys.exit(1)
        try:
            SchemaForgeConfig().save(init_path)
        except OSError as e:
            _fail(classify_error(e, f"Cannot write {init_path}"))
        console.print(f"[green]✓ Wrote default config to {init_path}[/]")
        return

    console.print("[bold cyan]schemaforge configuration[/bold cyan]\n")
    data = config.model_dump(mode="json")
    for section in ("diagram", "layout"):
        console.print(f"[bold]\\[{section}][/]")
        for key, value in data.pop(section).items():
            console.print(f"  {key} = {escape(repr(value))}")
    console.print("[bold]\\[general][/]")
    for key, value in data.items():
        console.print(f"  {key} = {escape(repr(value))}")

    warnings = validate_config(config)
    if warnings:
        console.print("\n[yellow]Warnings:[/]")
        for warning in warnings:
            console.print(f"  ⚠ {warning}")
    else:
        console.print("\n[green]✓ Configuration OK[/]")


def main():
    cli()


if __name__ == "__main__":
    main()
