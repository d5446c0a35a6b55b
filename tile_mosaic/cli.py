"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from tile_mosaic.color_utils import to_hex
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import MosaicError
from tile_mosaic.image_io import make_comparison_grid, open_image
from tile_mosaic.loader import ImageLoader
from tile_mosaic.mosaic import Mosaic
from tile_mosaic.picture import TilePicture

app = typer.Typer(
    name="tile-mosaic",
    help="Rebuild an image as a grid of small tile pictures.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- build command -----------------------------------------------------

@app.command()
def build(
    target: Path = typer.Argument(..., help="Path to the target image"),
    tiles_dir: Path = typer.Option(
        _DEFAULTS.tiles_dir, "--tiles", "-t", help="Folder with tile images",
    ),
    output: Path = typer.Option(
        _DEFAULTS.output_dir / f"mosaic.{_DEFAULTS.output_format}",
        "--output", "-o", help="Where to save the mosaic",
    ),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W", help="Output width in pixels"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H", help="Output height in pixels"),
    columns: int = typer.Option(_DEFAULTS.columns, "--columns", "-c", help="Grid columns"),
    rows: int = typer.Option(_DEFAULTS.rows, "--rows", "-r", help="Grid rows"),
    blend: float = typer.Option(
        _DEFAULTS.color_blending, "--blend", "-b",
        help="0 = tiles only, 1 = flat colours only",
    ),
    workers: int = typer.Option(
        _DEFAULTS.max_workers, "--workers", "-w", help="Parallel image decoders",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Also save an Original | Mosaic comparison",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build a mosaic of TARGET out of the images in the tiles folder."""
    _setup_logging(verbose)
    logger = logging.getLogger("tile_mosaic")

    cfg = MosaicConfig(
        width=width,
        height=height,
        columns=columns,
        rows=rows,
        color_blending=blend,
        max_workers=workers,
        save_comparison=comparison,
        tiles_dir=tiles_dir,
        output_dir=output.parent,
    )

    tile_paths = _collect_images(tiles_dir, cfg.SUPPORTED_EXTENSIONS)
    if not tile_paths and cfg.color_blending < 1:
        console.print(f"\n[yellow]No tile images found in {tiles_dir}/[/yellow]")
        console.print("Add .jpg / .png / ... files there or use --blend 1.\n")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold]TILE MOSAIC[/bold]\n"
        f"Canvas: {cfg.width}x{cfg.height}  |  Grid: {cfg.columns}x{cfg.rows}\n"
        f"Blending: {cfg.color_blending:.2f}  |  Tiles: {len(tile_paths)}",
        border_style="cyan",
    ))

    t_total = time.perf_counter()
    try:
        mosaic = Mosaic(cfg)
        added = mosaic.add_to_grid_from_paths(tile_paths)
        logger.info("Pool: %d distinct colours from %d tiles", mosaic.pool_size, added)

        if not mosaic.set_source_from_path(target):
            raise typer.Exit(1)
        if mosaic.pool.target is None:
            console.print("[red]No usable tiles, nothing was drawn.[/red]")
            raise typer.Exit(1)

        output.parent.mkdir(parents=True, exist_ok=True)
        mosaic.save(output)

        if cfg.save_comparison:
            comp_path = output.with_name(f"{output.stem}_comparison{output.suffix}")
            make_comparison_grid(open_image(target), mosaic.surface, comp_path)
            logger.info("Comparison saved to %s", comp_path)
    except MosaicError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    elapsed = time.perf_counter() - t_total
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{cfg.columns}x{cfg.rows} cells  time={elapsed:.1f}s[/dim]"
    )


# -- tiles command -----------------------------------------------------

@app.command()
def tiles(
    tiles_dir: Path = typer.Option(_DEFAULTS.tiles_dir, "--tiles", "-t"),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H"),
    columns: int = typer.Option(_DEFAULTS.columns, "--columns", "-c"),
    rows: int = typer.Option(_DEFAULTS.rows, "--rows", "-r"),
    workers: int = typer.Option(_DEFAULTS.max_workers, "--workers", "-w"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """List every tile with its average colour at the grid's cell size."""
    _setup_logging(verbose)

    if columns < 1 or rows < 1 or width < columns or height < rows:
        console.print("[red]Canvas must be at least one pixel per cell.[/red]")
        raise typer.Exit(1)

    tile_paths = _collect_images(tiles_dir, _DEFAULTS.SUPPORTED_EXTENSIONS)
    if not tile_paths:
        console.print(f"\n[yellow]No tile images found in {tiles_dir}/[/yellow]\n")
        raise typer.Exit(0)

    cell_w, cell_h = width // columns, height // rows
    table = Table(title=f"Tiles at {cell_w}x{cell_h} px")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Average")
    table.add_column("", width=4)

    loader = ImageLoader(workers)
    for result in sorted(loader.load_many(tile_paths), key=lambda r: str(r.source)):
        name = Path(result.source).name
        if not result.ok:
            table.add_row(name, "-", "[red]unreadable[/red]", "")
            continue
        picture = TilePicture(result.image, cell_w, cell_h)
        color = to_hex(picture.average_color)
        table.add_row(
            name,
            f"{result.image.natural_width}x{result.image.natural_height}",
            color,
            f"[on {color}]    [/]",
        )

    console.print(table)


if __name__ == "__main__":
    app()
