"""Top-level Typer app wiring for the tileplot CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl
import typer

from tileplot.clients.tile import TileClient
from tileplot.utils.trace import LinePlot, lineplot

from . import cli_plot
from .cli_help import APP_HELP

app = typer.Typer(help=APP_HELP)

_SESSION: Optional["TileSession"] = None


def read_frame(path: Path) -> pl.DataFrame:
    """Load a CSV or parquet file."""
    if not path.exists():
        raise FileNotFoundError(f"No data file at '{path}'.")
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix in {".csv", ".txt"}:
        return pl.read_csv(path)
    raise ValueError(f"Unsupported data file '{path.name}'; use .csv or .parquet.")


def build_trace(
    df: pl.DataFrame,
    x: str,
    y: str,
    lower: Optional[str] = None,
    upper: Optional[str] = None,
    simulates: Optional[str] = None,
    levels: Optional[List[float]] = None,
    marks: Optional[List[str]] = None,
    fit: Optional[str] = None,
    span: Optional[float] = None,
    weights: Optional[str] = None,
    col: Optional[str] = None,
) -> LinePlot:
    """Map data-file columns and CLI options onto lineplot arguments."""
    wanted = [name for name in (x, y, lower, upper, weights) if name]
    missing = [name for name in wanted if name not in df.columns]
    if missing:
        raise KeyError(
            f"Unknown column(s) {', '.join(missing)}. Available: {', '.join(df.columns)}"
        )

    params: Dict[str, Any] = {"x": df[x].to_numpy(), "y": df[y].to_numpy()}
    # One-sided bounds go through so check_trace can report the missing side
    if lower:
        params["lower"] = df[lower].to_numpy()
    if upper:
        params["upper"] = df[upper].to_numpy()
    if simulates:
        params["simulates"] = simulates

    ci: Dict[str, Any] = {}
    if levels:
        ci["levels"] = list(levels)
    if marks:
        ci["mark"] = list(marks)

    if fit:
        fit_params: Dict[str, Any] = {"method": fit}
        if ci.get("levels"):
            fit_params["ci"] = ci["levels"]
        if ci.get("mark"):
            fit_params["mark"] = ci["mark"]
        if span is not None:
            fit_params["span"] = span
        if weights:
            fit_params["weights"] = df[weights].to_numpy()
        if col:
            fit_params["col"] = col
        params["fit"] = fit_params
    elif ci:
        params["ci"] = ci

    if col:
        params["col"] = col
    params["plot"] = 1
    return lineplot(**params)


class TileSession:
    """Holds the clients shared by CLI commands."""

    def __init__(self):
        self.tile_client = TileClient()


def get_session() -> TileSession:
    global _SESSION
    if _SESSION is None:
        _SESSION = TileSession()
    return _SESSION


cli_plot.register(app, get_session, read_frame, build_trace)


def run() -> None:
    """Entry point for the `tileplot` console script."""

    app()


__all__ = ["app", "run", "get_session", "build_trace", "read_frame", "TileSession"]
