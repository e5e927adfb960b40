"""
Trace checks and option resolution.

``lineplot`` and its siblings accept anything. The tile engine calls
``check_trace`` when it consumes a trace, then resolves the ``ci``, ``fit``
and ``extrapolate`` entries into option objects with their defaults filled in.
"""
import math
from collections.abc import Mapping
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Callable, NamedTuple, Optional, Tuple

import numpy as np

from tileplot import config

HORIZONTAL_KEYS = ("x", "top")
VERTICAL_KEYS = ("y", "right")


class TraceError(ValueError):
    """Raised when a trace cannot be drawn as given."""


class AxisPair(NamedTuple):
    horizontal: str
    vertical: str


@dataclass(frozen=True)
class CIOptions:
    levels: Tuple[float, ...] = config.DEFAULT_CI_LEVELS
    mark: Tuple[str, ...] = config.DEFAULT_CI_MARK


@dataclass(frozen=True)
class FitOptions:
    method: str = config.DEFAULT_FIT_METHOD
    ci: Tuple[float, ...] = config.DEFAULT_FIT_CI
    mark: Tuple[str, ...] = config.DEFAULT_FIT_MARK
    col: str = config.DEFAULT_FIT_COL
    span: float = config.DEFAULT_FIT_SPAN
    weights: Optional[Any] = None


@dataclass(frozen=True)
class ExtrapolateOptions:
    data: Any
    cfact: Any
    formula: Optional[Callable] = None
    omit_extrapolated: bool = True


def resolve_axes(trace: Mapping) -> AxisPair:
    """Return the (horizontal, vertical) field names used by a trace."""
    horizontal = [key for key in HORIZONTAL_KEYS if key in trace]
    vertical = [key for key in VERTICAL_KEYS if key in trace]
    if len(horizontal) != 1:
        raise TraceError(
            f"trace needs exactly one horizontal field (x or top), got {horizontal or 'none'}"
        )
    if len(vertical) != 1:
        raise TraceError(
            f"trace needs exactly one vertical field (y or right), got {vertical or 'none'}"
        )
    return AxisPair(horizontal[0], vertical[0])


def field_length(trace: Mapping, key: str) -> int:
    values = np.asarray(trace[key])
    if values.ndim == 0:
        raise TraceError(f"'{key}' must be a sequence, got a scalar")
    return values.shape[0]


def bound_columns(values) -> np.ndarray:
    """Bounds as a float matrix with one row per point and one column per interval."""
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr


def _as_tuple(value, default):
    if value is None:
        return tuple(default)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Real):
        return (value,)
    return tuple(value)


def _levels(value, default, key: str) -> Tuple[float, ...]:
    levels = []
    for level in _as_tuple(value, default):
        if level is None or (isinstance(level, Real) and math.isnan(level)):
            continue
        level = float(level)
        if not 0 < level < 1:
            raise TraceError(f"'{key}' levels must lie strictly between 0 and 1, got {level}")
        levels.append(level)
    return tuple(levels)


def _marks(value, default, key: str) -> Tuple[str, ...]:
    marks = _as_tuple(value, default)
    unknown = [mark for mark in marks if mark not in config.CI_MARKS]
    if unknown:
        raise TraceError(f"'{key}' marks must be 'shaded' or 'dashed', got {unknown}")
    return marks or tuple(default)


def _section(trace: Mapping, key: str) -> Optional[Mapping]:
    section = trace.get(key)
    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise TraceError(f"'{key}' must be a mapping of options, got {type(section).__name__}")
    return section


def resolve_ci(trace: Mapping) -> CIOptions:
    """CI options for a trace; defaults apply when ``ci`` is absent."""
    section = _section(trace, "ci") or {}
    return CIOptions(
        levels=_levels(section.get("levels"), config.DEFAULT_CI_LEVELS, "ci"),
        mark=_marks(section.get("mark"), config.DEFAULT_CI_MARK, "ci.mark"),
    )


def resolve_fit(trace: Mapping) -> Optional[FitOptions]:
    section = _section(trace, "fit")
    if section is None:
        return None

    method = section.get("method", config.DEFAULT_FIT_METHOD)
    if method not in config.FIT_METHODS:
        raise TraceError(f"Unknown fit method '{method}'. Use one of {', '.join(config.FIT_METHODS)}")

    # ci=None (or NaN) turns the fit bands off
    if "ci" in section:
        ci = _levels(section["ci"], (), "fit.ci")
    else:
        ci = config.DEFAULT_FIT_CI

    span = float(section.get("span", config.DEFAULT_FIT_SPAN))
    if not 0 < span <= 1:
        raise TraceError(f"'fit.span' must lie in (0, 1], got {span}")

    weights = section.get("weights")
    if method == "wls" and weights is None:
        raise TraceError("fit method 'wls' requires 'weights'")

    return FitOptions(
        method=method,
        ci=ci,
        mark=_marks(section.get("mark"), config.DEFAULT_FIT_MARK, "fit.mark"),
        col=section.get("col", config.DEFAULT_FIT_COL),
        span=span,
        weights=weights,
    )


def resolve_extrapolate(trace: Mapping) -> Optional[ExtrapolateOptions]:
    section = _section(trace, "extrapolate")
    if section is None:
        return None
    missing = [key for key in ("data", "cfact") if section.get(key) is None]
    if missing:
        raise TraceError(f"'extrapolate' needs {' and '.join(missing)}")
    omit = section.get("omit.extrapolated", section.get("omit_extrapolated", True))
    return ExtrapolateOptions(
        data=section["data"],
        cfact=section["cfact"],
        formula=section.get("formula"),
        omit_extrapolated=bool(omit),
    )


def resolve_plots(trace: Mapping) -> Tuple[int, ...]:
    """Plot numbers a trace goes to, 1-based, defaulting to the first plot."""
    value = trace.get("plot", 1)
    if isinstance(value, (Real, np.number)) or value is None:
        plots = (value,)
    else:
        try:
            plots = tuple(value)
        except TypeError:
            raise TraceError(f"'plot' must be a positive integer or a sequence of them, got {value!r}") from None
    checked = []
    for plot in plots:
        # Whole-number floats such as 1.0 name the same plot
        if isinstance(plot, Real) and not isinstance(plot, (bool, Integral)) and float(plot).is_integer():
            plot = int(plot)
        if isinstance(plot, bool) or not isinstance(plot, Integral) or plot < 1:
            raise TraceError(f"'plot' must hold positive integers, got {plot!r}")
        checked.append(int(plot))
    return tuple(checked)


def check_trace(trace: Mapping) -> AxisPair:
    """Check a trace before drawing it and return its axis pair.

    Raises TraceError naming the offending key.
    """
    axes = resolve_axes(trace)
    n = field_length(trace, axes.horizontal)
    if field_length(trace, axes.vertical) != n:
        raise TraceError(
            f"'{axes.horizontal}' and '{axes.vertical}' must have the same length"
        )

    simulates = trace.get("simulates")
    if simulates is not None and simulates not in axes:
        raise TraceError(
            f"'simulates' must name one of {axes.horizontal!r} or {axes.vertical!r}, got {simulates!r}"
        )

    has_lower, has_upper = "lower" in trace, "upper" in trace
    if simulates is None and (has_lower or has_upper):
        if has_lower != has_upper:
            raise TraceError("'lower' and 'upper' must be supplied together")
        lower, upper = bound_columns(trace["lower"]), bound_columns(trace["upper"])
        if lower.shape != upper.shape:
            raise TraceError("'lower' and 'upper' must have the same shape")
        if lower.shape[0] != n:
            raise TraceError(f"'lower' and 'upper' need one row per '{axes.vertical}' value")

    resolve_ci(trace)
    fit = resolve_fit(trace)
    if fit is not None and fit.method == "wls":
        weights = np.asarray(fit.weights)
        if weights.ndim == 0 or weights.shape[0] != n:
            raise TraceError("'fit.weights' must have one weight per point")
    resolve_extrapolate(trace)
    resolve_plots(trace)
    return axes


__all__ = [
    "AxisPair",
    "CIOptions",
    "ExtrapolateOptions",
    "FitOptions",
    "TraceError",
    "bound_columns",
    "check_trace",
    "field_length",
    "resolve_axes",
    "resolve_ci",
    "resolve_extrapolate",
    "resolve_fit",
    "resolve_plots",
]
