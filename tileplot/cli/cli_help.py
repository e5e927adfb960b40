"""Shared help strings for the tileplot CLI."""

from __future__ import annotations

from typing import Dict

APP_HELP = "tileplot CLI for turning tabular results into tiled line plots."
LINE_HELP = "Build a lineplot trace from a CSV or parquet file and render it with plotly."
DESCRIBE_HELP = "Build a lineplot trace from a data file and list its contents without drawing."

TRACE_OPTION_HELP: Dict[str, str] = {
    "data": "CSV or parquet file holding the columns to plot.",
    "x": "Column drawn on the horizontal axis.",
    "y": "Column drawn on the vertical axis.",
    "lower": "Column of user-supplied lower bounds.",
    "upper": "Column of user-supplied upper bounds.",
    "simulates": "Axis ('x' or 'y') whose column holds simulation draws to summarize.",
    "level": "Confidence level for intervals. Repeat for several levels.",
    "mark": "Interval style: shaded or dashed. Repeat to style each level.",
    "fit": "Fit to draw instead of the raw line: linear, wls, robust, mmest or loess.",
    "span": "Bandwidth for loess fits.",
    "weights": "Column of weights for wls fits.",
    "col": "Line colour.",
}

LINE_OPTION_HELP: Dict[str, str] = {
    "title": "Main title of the figure.",
    "theme": "Figure theme: professional, dark or default.",
    "output": "File to write (.html unless another suffix is given).",
    "show": "Open the figure in the browser once rendered.",
}


__all__ = [
    "APP_HELP",
    "DESCRIBE_HELP",
    "LINE_HELP",
    "LINE_OPTION_HELP",
    "TRACE_OPTION_HELP",
]
