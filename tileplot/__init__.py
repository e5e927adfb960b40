"""
tileplot package initialization.

Exposes the current package version and the trace constructors.
"""

from importlib import metadata

from tileplot.utils.trace import lineplot, lines_tile, points_tile, text_tile


def __getattr__(name):
    if name == "__version__":
        try:
            return metadata.version("tileplot")
        except metadata.PackageNotFoundError:
            return "0.0.0"
    raise AttributeError(f"module 'tileplot' has no attribute {name!r}")


__all__ = ["__version__", "lineplot", "lines_tile", "points_tile", "text_tile"]
