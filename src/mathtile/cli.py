"""Click CLI for mathtile — serve and render math markup as tiled RGBA images."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from mathtile.config.hierarchy import load_service_config

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> int:
    """Configure logging based on verbosity level and return the chosen level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )
    return level


@click.group()
@click.version_option(package_name="mathtile")
def cli() -> None:
    """mathtile — math markup to tiled raster images."""


@cli.command()
@click.option("--host", type=str, default=None, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def serve(host: str | None, port: int | None, verbose: int) -> None:
    """Run the HTTP render server."""
    import uvicorn

    from mathtile.server.app import create_app

    config = load_service_config(host=host, port=port)
    level = _setup_logging(verbose, config.log_level)

    console.print(f"[green]mathtile render server on {config.host}:{config.port}[/green]")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=logging.getLevelName(level).lower(),
    )


@cli.command()
@click.argument("markup")
@click.option("--font-size", type=float, default=None, help="Font size in points.")
@click.option("--density", type=float, default=None, help="Pixel density (1 = 72 dpi).")
@click.option("--tile-size", type=int, default=None, help="Maximum tile edge in pixels.")
@click.option("-o", "--output", type=click.Path(), help="Write the reassembled image as PNG.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def render(
    markup: str,
    font_size: float | None,
    density: float | None,
    tile_size: int | None,
    output: str | None,
    verbose: int,
) -> None:
    """Render MARKUP once and report the tiling."""
    from mathtile.core import RenderService
    from mathtile.errors.exceptions import InvalidRequestError

    config = load_service_config(max_tile_size=tile_size)
    _setup_logging(verbose, config.log_level)
    service = RenderService(config)

    try:
        outcome = asyncio.run(service.render(markup, font_size=font_size, pixel_density=density))
    except InvalidRequestError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        service.close()

    if not outcome.ok or outcome.result is None:
        error_console.print(
            f"[red]Render failed after {outcome.attempts} attempts:[/red] {outcome.error}"
        )
        sys.exit(1)

    result = outcome.result
    table = Table(title="Render Summary", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Size", f"{result.width}x{result.height}")
    table.add_row("Pixel density", f"{result.pixel_density:g}")
    table.add_row("Attempts", str(outcome.attempts))
    table.add_row("Tiles", str(len(result.tiles)))
    table.add_row("Tile widths", ", ".join(str(w) for w in result.tile_widths))
    table.add_row("Tile heights", ", ".join(str(h) for h in result.tile_heights))
    console.print(table)

    if output:
        from mathtile.utils.image import save_png

        path = save_png(result, output)
        console.print(f"[green]Written to {path}[/green]")


@cli.command("config")
def show_config() -> None:
    """Show the resolved configuration."""
    config = load_service_config()

    table = Table(title="Resolved Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in config.model_dump().items():
        table.add_row(key, str(value))

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
