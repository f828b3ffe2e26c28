"""
Click-based CLI for ddlforge.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from .config import DEFAULT_DRIVER, ExecutorConfiguration
from .db_types import TYPE_ALIASES, DbType, requires_length
from .exceptions import DDLForgeError
from .executor import MigrationExecutor
from .output import ScriptCollector
from .providers import ProviderRegistry
from .schema import Schema, load_schema
from .snapshot import DataSchema, write_snapshot

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="ddlforge")
@click.option("--verbose", "-v", is_flag=True, help="Log every stage of the run")
def cli(verbose: bool) -> None:
    """ddlforge: schema-diff migration scripts for MySQL, PostgreSQL, SQLite and SQL Server"""
    configure_logging(verbose)


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--driver",
    "-d",
    default=DEFAULT_DRIVER,
    envvar="DDLFORGE_DRIVER",
    show_default=True,
    help="Target dialect (see 'ddlforge drivers')",
)
@click.option(
    "--connection-string",
    "-c",
    envvar="DDLFORGE_CONNECTION_STRING",
    help="Connection string of the migration target",
)
@click.option(
    "--current-snapshot",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Diff against a snapshot file instead of the live database",
)
@click.option(
    "--no-constraints-or-indexes",
    is_flag=True,
    help="Leave foreign keys and indexes untouched",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file path (default: stdout)",
)
def migrate(
    schema_file: Path,
    driver: str,
    connection_string: Optional[str],
    current_snapshot: Optional[Path],
    no_constraints_or_indexes: bool,
    output: Optional[Path],
) -> None:
    """Generate the script that migrates the target to SCHEMA_FILE"""
    configuration = ExecutorConfiguration(
        schema_file=schema_file,
        connection_string=connection_string,
        no_constraints_or_indexes=no_constraints_or_indexes,
        driver=driver,
        current_snapshot=current_snapshot,
    )
    collector = ScriptCollector()

    try:
        MigrationExecutor(configuration, collector).run()
    except DDLForgeError as e:
        err_console.print(f"[red]✗ Error:[/red] {e}")
        sys.exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(collector.script)
        console.print(f"[green]✓[/green] SQL written to {output}")
    else:
        console.print(Syntax(collector.script, "sql", theme="monokai", line_numbers=False))


@cli.command()
@click.option(
    "--driver",
    "-d",
    default=DEFAULT_DRIVER,
    envvar="DDLFORGE_DRIVER",
    show_default=True,
    help="Dialect whose reader captures the snapshot",
)
@click.option(
    "--connection-string",
    "-c",
    envvar="DDLFORGE_CONNECTION_STRING",
    help="Connection string of the database to capture",
)
@click.option(
    "--schema",
    "schema_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Project this schema file instead of reading a database",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Snapshot file to write",
)
def snapshot(
    driver: str,
    connection_string: Optional[str],
    schema_file: Optional[Path],
    output: Path,
) -> None:
    """Capture a snapshot file for offline diffs (--current-snapshot)"""
    try:
        provider = ProviderRegistry.require(driver)
        if schema_file is not None:
            generator = provider.get_sql_generator(load_schema(schema_file))
            captured = DataSchema.from_schema(generator.schema, generator)
        else:
            generator = provider.get_sql_generator(Schema(name="main"))
            captured = generator.capture(connection_string)
    except DDLForgeError as e:
        err_console.print(f"[red]✗ Error:[/red] {e}")
        sys.exit(1)

    write_snapshot(captured, output)
    console.print(
        f"[green]✓[/green] Snapshot of {len(captured.tables)} table(s) written to {output}"
    )


@cli.command()
def drivers() -> None:
    """List available drivers"""
    table = Table(title="Drivers")
    table.add_column("Driver", style="cyan")
    table.add_column("Name")
    table.add_column("Live reader")
    table.add_column("Description")

    for provider in ProviderRegistry.get_all():
        live = provider.capabilities.features.get("live_reader", False)
        table.add_row(
            provider.info.id,
            provider.info.name,
            "[green]yes[/green]" if live else "no",
            provider.info.description,
        )
    console.print(table)


@cli.command()
def types() -> None:
    """List canonical column types and their accepted spellings"""
    table = Table(title="Column types")
    table.add_column("Type", style="cyan")
    table.add_column("Length")
    table.add_column("Spellings")

    for db_type in DbType:
        if db_type == DbType.UNSET:
            continue
        spellings = sorted(alias for alias, target in TYPE_ALIASES.items() if target == db_type)
        table.add_row(
            db_type.value,
            "required" if requires_length(db_type) else "",
            ", ".join(spellings),
        )
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
