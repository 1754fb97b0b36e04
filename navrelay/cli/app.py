"""Main Typer application — imports and registers all CLI commands.

Entry point: ``navrelay`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from navrelay.cli.commands.features import features_cmd
from navrelay.cli.commands.publish import delete_cmd, publish_cmd
from navrelay.config import RelayConfig
from navrelay.models.domains import PublicationDomain
from navrelay.models.features import FEATURE_SCHEMAS

app = typer.Typer(
    name="navrelay",
    help="navrelay: geospatial publish/subscribe relay for S-100 maritime data.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="publish", help="Publish a record to viewers and the feature store.")(publish_cmd)
app.command(name="delete", help="Delete a published record from the feature store.")(delete_cmd)
app.command(name="features", help="List features held in the local feature store.")(features_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Override NAVRELAY_LOG_LEVEL and NAVRELAY_DEBUG."),
) -> None:
    """Configure logging for every command."""
    level = (log_level or RelayConfig().effective_log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command(name="domains", help="List the publication domains.")
def domains_cmd() -> None:
    """Show every publication domain and its deletion pairing."""
    console = Console()
    table = Table(title="Publication Domains")
    table.add_column("Tag", style="cyan")
    table.add_column("Deletion", justify="center")
    table.add_column("Identifier")
    table.add_column("Feature Type", style="green")

    for domain in PublicationDomain:
        deletion = "[yellow]Yes[/yellow]" if domain.is_deletion else "No"
        table.add_row(domain.tag, deletion, domain.identifier_attribute, domain.type_name)

    console.print(table)


@app.command(name="schemas", help="Show the feature-store schema of every domain.")
def schemas_cmd() -> None:
    """Print the encoded type of each feature schema."""
    console = Console()
    table = Table(title="Feature Schemas")
    table.add_column("Type Name", style="green")
    table.add_column("Domain", style="cyan")
    table.add_column("Attributes")

    for schema in FEATURE_SCHEMAS.values():
        table.add_row(schema.type_name, schema.domain.tag, schema.encode_type())

    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
