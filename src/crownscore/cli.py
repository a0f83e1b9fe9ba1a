"""crownscore CLI — Command-line interface for tree-crown scoring.

Commands:
  crownscore score        — Score labeled clusters and accept / reject trees
  crownscore show-config  — Print the effective configuration
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="crownscore",
    help="crownscore — Tree crown plausibility scoring for LiDAR clusters",
    add_completion=False,
)
console = Console()

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@app.command()
def score(
    input_csv: Optional[str] = typer.Argument(None, help="Labeled point CSV (x, y, z, cluster[, point_id])"),
    k: Optional[int] = typer.Option(None, "--k", "-k", min=1, help="Neighbour count for the size threshold"),
    min_points: Optional[int] = typer.Option(None, "--min-points", help="Reject segments with fewer points"),
    min_score: Optional[float] = typer.Option(None, "--min-score", help="Minimum aggregate score to accept"),
    wkt: bool = typer.Option(False, "--wkt", help="Also print each accepted boundary as WKT"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Build a segment per cluster, score it and report accepted trees."""
    _setup_logging(verbose)
    from crownscore.config import load_config
    from crownscore.ingest.points_csv import read_labeled_points
    from crownscore.pipeline import build_segments, score_segments
    from crownscore.pointcloud.registry import SegmentRegistry

    cfg = load_config(config)
    scoring = cfg.scoring
    k = k if k is not None else scoring.k_neighbors
    min_points = min_points if min_points is not None else scoring.min_points
    min_score = min_score if min_score is not None else scoring.min_score

    csv_path = Path(input_csv) if input_csv else _PROJECT_ROOT / cfg.paths.input_csv
    if not csv_path.exists():
        console.print(f"  [red]✗[/red] Point CSV not found: {csv_path}")
        raise typer.Exit(1)

    try:
        xyz, labels, point_ids = read_labeled_points(csv_path)
    except ValueError as exc:
        console.print(f"  [red]✗[/red] {exc}")
        raise typer.Exit(1)

    segments = build_segments(xyz, labels, point_ids, noise_label=cfg.segmentation.noise_label)
    registry = SegmentRegistry(int(point_ids.max()) + 1 if len(point_ids) else 0)
    results = score_segments(
        segments,
        k=k,
        min_points=min_points,
        min_score=min_score,
        registry=registry,
    )

    table = Table(title=f"Segments ({csv_path.name}, k={k})")
    table.add_column("Cluster", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Area", justify="right")
    for name in ("Size", "Orient.", "Regul.", "Circ.", "Aggregate"):
        table.add_column(name, justify="right")
    table.add_column("Tree", justify="center")

    for r in results:
        s = r.scores
        table.add_row(
            str(r.label),
            str(r.segment.count),
            f"{r.segment.area:.2f}",
            f"{s.size:.3f}",
            f"{s.orientation:.3f}",
            f"{s.regularity:.3f}",
            f"{s.circularity:.3f}",
            f"{s.aggregate:.3f}",
            f"[green]#{r.segment_id}[/green]" if r.accepted else "[red]✗[/red]",
        )
    console.print(table)

    if wkt:
        for r in results:
            if r.accepted:
                console.print(f"{r.segment_id}\t{r.boundary_wkt}", soft_wrap=True)

    n_accepted = sum(r.accepted for r in results)
    console.print(
        f"\n[green]✓ {n_accepted} of {len(results)} segments accepted as trees, "
        f"{registry.n_unassigned} points unassigned.[/green]"
    )


@app.command("show-config")
def show_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Print the effective configuration."""
    from crownscore.config import load_config

    cfg = load_config(config)
    console.print_json(cfg.model_dump_json())


if __name__ == "__main__":
    app()
