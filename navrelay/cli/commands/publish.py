"""``navrelay publish`` / ``navrelay delete`` — push records through the relay.

Both commands assemble a relay from the environment configuration, with
pushed envelopes written to the local push directory, publish one
envelope, and shut the relay down.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from navrelay.config import RelayConfig
from navrelay.core import geometry_codec
from navrelay.core.relay import Relay
from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.routing.sinks.local_file import LocalFilePushTransport

console = Console()


def parse_coordinates(raw: str) -> list[float]:
    """Parse ``"x1,y1,x2,y2"`` (commas and/or spaces) into floats."""
    parts = [p for p in raw.replace(",", " ").split() if p]
    try:
        return [float(p) for p in parts]
    except ValueError as exc:
        raise typer.BadParameter(f"Coordinates must be numbers: {raw!r}") from exc


def _resolve_domain(tag: str) -> PublicationDomain:
    domain = PublicationDomain.from_tag(tag)
    if domain is None:
        known = ", ".join(d.tag for d in PublicationDomain.creation_domains())
        raise typer.BadParameter(f"Unknown domain {tag!r} (expected one of: {known})")
    return domain


def _open_relay() -> Relay:
    config = RelayConfig()
    return Relay(config, transport=LocalFilePushTransport(config.push_events_path))


def publish_cmd(
    domain: str = typer.Argument(..., help="Domain tag, e.g. 'aton'."),
    id: str = typer.Argument(..., help="Identifier of the record, e.g. an AtoN UID."),
    content_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="File holding the encoded content."
    ),
    coords: str = typer.Option(
        "", "--coords", "-c", help="Coordinates as 'x1,y1,x2,y2,...'."
    ),
    lat_lon: bool = typer.Option(
        False, "--lat-lon", help="Coordinates are given as latitude,longitude."
    ),
) -> None:
    """Publish a record with its geometry to viewers and the feature store."""
    resolved = _resolve_domain(domain)
    if resolved.is_deletion:
        raise typer.BadParameter(f"{resolved.tag} is a deletion domain; use 'delete'")

    try:
        geometry = geometry_codec.encode(parse_coordinates(coords))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if lat_lon:
        geometry = geometry_codec.invert_coordinates(geometry)

    content = content_file.read_text(encoding="utf-8")
    envelope = Envelope.creation(resolved, id, geometry, content)

    with _open_relay() as relay:
        delivered = relay.bus.publish(envelope)
        store = "live" if relay.store_live else "disabled"

    console.print(
        Panel(
            "\n".join([
                f"[bold green]Published {resolved.tag}[/bold green] {id}",
                f"Geometry: {geometry_codec.to_filter_literal(geometry)}",
                f"Subscribers: {delivered}  Store: {store}",
            ]),
            title="navrelay publish",
            border_style="green",
        )
    )


def delete_cmd(
    domain: str = typer.Argument(..., help="Domain tag, e.g. 'aton' or 'aton-delete'."),
    id: str = typer.Argument(..., help="Identifier of the record to delete."),
) -> None:
    """Delete a previously published record from the feature store."""
    resolved = _resolve_domain(domain)

    with _open_relay() as relay:
        envelope = relay.publisher.delete(resolved, id)
        store = "live" if relay.store_live else "disabled"

    console.print(
        f"[bold yellow]Deletion published[/bold yellow] {envelope.domain.tag} {id} "
        f"(store: {store})"
    )
