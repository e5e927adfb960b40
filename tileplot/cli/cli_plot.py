"""CLI bindings for building and rendering line traces."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from tileplot import config
from tileplot.clients.fit import FitError
from tileplot.utils.options import TraceError

from .cli_help import DESCRIBE_HELP, LINE_HELP, LINE_OPTION_HELP, TRACE_OPTION_HELP

CONSOLE = Console()


def register(
    app: typer.Typer,
    get_session: Callable[[], "TileSession"],
    read_frame: Callable,
    build_trace: Callable,
) -> None:
    """Attach trace commands to the main Typer app."""

    def _load_trace(data: Path, **options):
        try:
            df = read_frame(data)
        except (FileNotFoundError, ValueError) as exc:
            typer.secho(str(exc), fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc
        try:
            return build_trace(df, **options)
        except KeyError as exc:
            typer.secho(exc.args[0], fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

    @app.command("line", help=LINE_HELP)
    def line_command(
        data: Path = typer.Argument(..., help=TRACE_OPTION_HELP["data"]),
        x: str = typer.Option(..., "--x", help=TRACE_OPTION_HELP["x"]),
        y: str = typer.Option(..., "--y", help=TRACE_OPTION_HELP["y"]),
        lower: Optional[str] = typer.Option(None, "--lower", help=TRACE_OPTION_HELP["lower"]),
        upper: Optional[str] = typer.Option(None, "--upper", help=TRACE_OPTION_HELP["upper"]),
        simulates: Optional[str] = typer.Option(None, "--simulates", help=TRACE_OPTION_HELP["simulates"]),
        levels: List[float] = typer.Option([], "--level", "-l", help=TRACE_OPTION_HELP["level"]),
        marks: List[str] = typer.Option([], "--mark", "-m", help=TRACE_OPTION_HELP["mark"]),
        fit: Optional[str] = typer.Option(None, "--fit", "-f", help=TRACE_OPTION_HELP["fit"]),
        span: Optional[float] = typer.Option(None, "--span", help=TRACE_OPTION_HELP["span"]),
        weights: Optional[str] = typer.Option(None, "--weights", help=TRACE_OPTION_HELP["weights"]),
        col: Optional[str] = typer.Option(None, "--col", "-c", help=TRACE_OPTION_HELP["col"]),
        title: Optional[str] = typer.Option(None, "--title", "-t", help=LINE_OPTION_HELP["title"]),
        theme: Optional[str] = typer.Option(None, "--theme", help=LINE_OPTION_HELP["theme"]),
        output: Optional[Path] = typer.Option(None, "--output", "-o", help=LINE_OPTION_HELP["output"]),
        show: bool = typer.Option(False, "--show", help=LINE_OPTION_HELP["show"]),
    ) -> None:
        """Render a lineplot from a data file."""

        trace = _load_trace(
            data, x=x, y=y, lower=lower, upper=upper, simulates=simulates,
            levels=levels, marks=marks, fit=fit, span=span, weights=weights, col=col,
        )

        if output is None and not show:
            output = config.output_dir() / f"{data.stem}-lineplot.html"

        session = get_session()
        try:
            fig = session.tile_client.tile(
                trace,
                xaxistitle=x,
                yaxistitle=y,
                maintitle=title,
                gridlines="xy",
                theme=theme,
                output=None,
                show=show,
            )
        except (TraceError, FitError) as exc:
            typer.secho(str(exc), fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

        if output is not None:
            path = session.tile_client.write(fig, output)
            typer.secho(f"Wrote lineplot of {y} against {x} to '{path}'.", fg=typer.colors.GREEN)

    @app.command("describe", help=DESCRIBE_HELP)
    def describe_command(
        data: Path = typer.Argument(..., help=TRACE_OPTION_HELP["data"]),
        x: str = typer.Option(..., "--x", help=TRACE_OPTION_HELP["x"]),
        y: str = typer.Option(..., "--y", help=TRACE_OPTION_HELP["y"]),
        lower: Optional[str] = typer.Option(None, "--lower", help=TRACE_OPTION_HELP["lower"]),
        upper: Optional[str] = typer.Option(None, "--upper", help=TRACE_OPTION_HELP["upper"]),
        simulates: Optional[str] = typer.Option(None, "--simulates", help=TRACE_OPTION_HELP["simulates"]),
        fit: Optional[str] = typer.Option(None, "--fit", "-f", help=TRACE_OPTION_HELP["fit"]),
        col: Optional[str] = typer.Option(None, "--col", "-c", help=TRACE_OPTION_HELP["col"]),
    ) -> None:
        """List the entries of the trace a data file would produce."""

        trace = _load_trace(data, x=x, y=y, lower=lower, upper=upper, simulates=simulates, fit=fit, col=col)

        table = Table(title=f"{trace['graphic']} trace ({', '.join(trace.classes)})")
        table.add_column("Key", style="cyan")
        table.add_column("Type")
        table.add_column("Length", justify="right")
        for key, value in trace.items():
            length = str(len(value)) if isinstance(value, np.ndarray) else "-"
            table.add_row(key, type(value).__name__, length)
        CONSOLE.print(table)


__all__ = ["register"]
