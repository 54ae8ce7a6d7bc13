"""Command line entry point: plan a single route or serve the JSON API.

``plan`` builds terrain (synthetic hills, or a GeoTIFF when ``--heightfield``
is given), runs one search and prints the cells with a cost breakdown.
``serve`` starts the Flask app with the same settings.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from pydantic import ValidationError

from .config import PathfinderSettings, get_settings
from .costs import cost_breakdown
from .logging_utils import configure_root_logger
from .service import PathfindingService

cli = typer.Typer(help="Height-aware A* routes for flying agents.")


def _parse_cell(value: str) -> List[int]:
    try:
        x, y = (int(v) for v in value.split(","))
    except ValueError as error:
        raise typer.BadParameter(f"expected 'x,y', got '{value}'") from error
    return [x, y]


@cli.command()
def plan(
    start: str = typer.Argument(..., help="Start cell as x,y."),
    end: str = typer.Argument(..., help="End cell as x,y."),
    size: Optional[int] = typer.Option(None, help="Cells per side."),
    seed: Optional[int] = typer.Option(None, help="Synthetic terrain seed."),
    pool: Optional[int] = typer.Option(None, help="Max-pool terrain to this many cells per side."),
    heightfield: Optional[str] = typer.Option(None, help="GeoTIFF path or COG URL."),
    fly_cost: Optional[float] = typer.Option(None, help="Climb penalty per unit of ascent."),
    corner_rule: Optional[str] = typer.Option(None, help="Diagonal corner rule: any or both."),
    no_clamp: bool = typer.Option(False, help="Reject out-of-range cells instead of clamping."),
    log_level: Optional[str] = typer.Option(None, help="Logging level."),
) -> None:
    """Plan one route and print it."""

    overrides = {
        "grid_size": size,
        "synthetic_seed": seed,
        "pool_samples": pool,
        "heightfield_source": heightfield,
        "fly_cost_multiplier": fly_cost,
        "corner_rule": corner_rule,
        "log_level": log_level,
    }
    updates = {k: v for k, v in overrides.items() if v is not None}
    if no_clamp:
        updates["clamp_to_bounds"] = False
    try:
        settings = PathfinderSettings(**{**get_settings().model_dump(), **updates})
    except ValidationError as error:
        raise typer.BadParameter(str(error)) from error
    configure_root_logger(settings.log_level)

    service = PathfindingService.from_settings(settings)
    result = service.find_path(_parse_cell(start), _parse_cell(end))
    if not result.success:
        typer.echo(f"No route: {result.error.value} ({result.error_message})", err=True)
        raise typer.Exit(code=1)

    path = result.path
    parts = cost_breakdown(service.grid, list(path), settings.fly_cost_multiplier)
    typer.echo(" -> ".join(f"({c.x},{c.y})" for c in path))
    typer.echo(
        f"cells={len(path)} cost={path.cost:.3f} distance={parts.distance:.3f} "
        f"climb_penalty={parts.climb:.3f} ascent={parts.ascent:.2f} "
        f"time_ms={result.calculation_time * 1000.0:.2f}"
    )


@cli.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host interface to bind."),
    port: Optional[int] = typer.Option(None, help="Port to listen on."),
) -> None:
    """Start the Flask API."""

    from .app import create_app

    settings = get_settings()
    effective_host = host or settings.host
    effective_port = port or settings.port
    typer.echo(f"Serving sky_pathfinder on http://{effective_host}:{effective_port}")
    create_app(settings).run(host=effective_host, port=effective_port, threaded=True)


if __name__ == "__main__":
    cli()
