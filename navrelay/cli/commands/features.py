"""``navrelay features`` — list features held in the local feature store."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from navrelay.config import RelayConfig
from navrelay.core.geometry_codec import to_filter_literal
from navrelay.models.domains import PublicationDomain
from navrelay.store.engine import StoreEngineError
from navrelay.store.sqlite_engine import SQLiteFeatureStore

console = Console()


def parse_bbox(raw: str) -> tuple[float, float, float, float]:
    parts = [p for p in raw.replace(",", " ").split() if p]
    if len(parts) != 4:
        raise typer.BadParameter("Bounding box must be 'minx,miny,maxx,maxy'")
    try:
        minx, miny, maxx, maxy = (float(p) for p in parts)
    except ValueError as exc:
        raise typer.BadParameter(f"Bounding box must be numbers: {raw!r}") from exc
    return minx, miny, maxx, maxy


def features_cmd(
    domain: str = typer.Argument(..., help="Domain tag, e.g. 'aton'."),
    bbox: str = typer.Option(
        "", "--bbox", "-b", help="Only features intersecting 'minx,miny,maxx,maxy'."
    ),
    width: int = typer.Option(40, "--width", help="Characters of content to show."),
) -> None:
    """List the stored features of a domain."""
    resolved = PublicationDomain.from_tag(domain)
    if resolved is None:
        raise typer.BadParameter(f"Unknown domain {domain!r}")
    box = parse_bbox(bbox) if bbox else None

    config = RelayConfig()
    try:
        store = SQLiteFeatureStore(config.store_path)
        try:
            registered = {row[0] for row in store.list_schemas()}
            features = (
                store.get_features(resolved.type_name, bbox=box)
                if resolved.type_name in registered
                else []
            )
        finally:
            store.dispose()
    except StoreEngineError as exc:
        console.print(f"[red]Feature store error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if not features:
        console.print(f"[dim]No {resolved.type_name} features stored.[/dim]")
        return

    table = Table(title=f"{resolved.type_name} features ({resolved.creation_variant().tag})")
    table.add_column("ID", style="cyan")
    table.add_column("Geometry", style="green")
    table.add_column("Content")

    for feature in features:
        content = feature.content.replace("\n", " ")
        if len(content) > width:
            content = content[: width - 3] + "..."
        table.add_row(feature.id, to_filter_literal(feature.geometry), content)

    console.print(table)
