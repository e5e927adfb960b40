"""
Plotting traces - declarative descriptions of what to draw on a tile.

A trace does no computation and no drawing. It packages its keyword
arguments, tags them with the kind of graphic they describe, and is handed
unevaluated to ``TileClient.tile`` which checks, summarizes and renders it.
"""
from collections.abc import Mapping
from enum import Enum

TRACE_CLASS = "tileTrace"


class TraceKind(str, Enum):
    """Discriminant identifying the graphic a trace describes."""

    LINEPLOT = "lineplot"
    LINES = "lines"
    POINTS = "points"
    TEXT = "text"


class Trace(Mapping):
    """Base class for plotting traces.

    Behaves as a read-only ordered mapping of the options it was built with,
    plus an injected ``graphic`` entry naming its kind.
    """

    __slots__ = ("_params",)
    kind: TraceKind = None

    def __init__(self, /, **params):
        self._params = dict(params)
        self._params["graphic"] = self.kind.value

    def __getitem__(self, key):
        return self._params[key]

    def __iter__(self):
        return iter(self._params)

    def __len__(self):
        return len(self._params)

    @property
    def classes(self) -> tuple:
        """Capability tags, generic first: ``("tileTrace", <kind>)``."""
        return (TRACE_CLASS, self.kind.value)

    def __repr__(self):
        keys = ", ".join(self._params)
        return f"{type(self).__name__}({keys})"


class LinePlot(Trace):
    """Line with optional confidence bands, fits and extrapolation clipping."""

    __slots__ = ()
    kind = TraceKind.LINEPLOT


class LinesTile(Trace):
    """Plain polyline annotation."""

    __slots__ = ()
    kind = TraceKind.LINES


class PointsTile(Trace):
    """Markers at the given coordinates."""

    __slots__ = ()
    kind = TraceKind.POINTS


class TextTile(Trace):
    """Text labels at the given coordinates."""

    __slots__ = ()
    kind = TraceKind.TEXT


def lineplot(**kwargs) -> LinePlot:
    """Create a ``lineplot`` trace summarizing inferences as a line.

    Must eventually include exactly one horizontal dimension (``x`` or
    ``top``) and one vertical dimension (``y`` or ``right``), passed by name.
    Recognized options:

    - ``lower`` / ``upper``: user-supplied bounds on the vertical field, one
      column per interval; ignored when ``simulates`` is set.
    - ``simulates``: name of the axis field holding raw simulation draws; the
      orthogonal field then groups draws into scenarios.
    - ``ci``: mapping with ``levels`` (default ``(0.67, 0.95)``) and ``mark``
      (``"shaded"`` or ``"dashed"`` per level).
    - ``fit``: mapping with ``method`` (``linear``, ``wls``, ``robust``,
      ``mmest``, ``loess``), ``ci``, ``mark``, ``col``, ``span``, ``weights``.
    - ``extrapolate``: mapping with ``data``, ``cfact``, optional ``formula``
      and ``omit.extrapolated`` (default True) for convex hull clipping.
    - ``plot``: target plot number(s), row-by-row from the top left.

    Any other styling option (``col``, ``lwd``, ``lty``, ``name``...) is kept
    untouched. Nothing is checked here; see ``check_trace``.
    """
    return LinePlot(**kwargs)


def lines_tile(**kwargs) -> LinesTile:
    """Create a trace drawing a plain line through the given points."""
    return LinesTile(**kwargs)


def points_tile(**kwargs) -> PointsTile:
    """Create a trace drawing markers."""
    return PointsTile(**kwargs)


def text_tile(**kwargs) -> TextTile:
    """Create a trace drawing ``labels`` at the given coordinates."""
    return TextTile(**kwargs)


def is_trace(obj) -> bool:
    return isinstance(obj, Trace)


def has_class(trace, name: str) -> bool:
    return is_trace(trace) and name in trace.classes


# Usage example
if __name__ == "__main__":
    # Traces define WHAT to display; TileClient decides how
    trace = lineplot(x=[0, 1, 2], y=[5, 6, 7], col="blue", plot=1)
    print(dict(trace), trace.classes)
