import polars as pl
import numpy as np
from dataclasses import dataclass
from typing import Mapping, Sequence

from tileplot.utils.options import AxisPair, bound_columns


@dataclass
class LineData:
    """Coordinates of one line and its bands, ready to draw.

    ``pos`` runs along the scenario axis and ``center`` / ``lower`` / ``upper``
    along the other one. ``horizontal`` is True when the summarized values lie
    on the horizontal axis (simulates on ``x`` or ``top``).
    """
    pos: np.ndarray
    center: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    horizontal: bool = False

    @property
    def intervals(self) -> int:
        return self.lower.shape[1]


class SimulationClient:
    """Client for turning simulation draws into point estimates and intervals."""

    def __init__(self):
        pass

    def summarize(self,
                  scenario: Sequence,
                  draws: Sequence,
                  levels: Sequence[float]) -> pl.DataFrame:
        """
        Summarize draws scenario by scenario.

        Args:
            scenario: Scenario code of each draw (same length as draws)
            draws: Simulated values, stacked across scenarios
            levels: Confidence levels (e.g., 0.67, 0.95)

        Returns:
            DataFrame sorted by scenario with columns scenario, pe and
            lower_<i> / upper_<i> for the i-th level (1-based)
        """
        scenario = np.asarray(scenario)
        draws = np.asarray(draws, dtype=float)
        if scenario.shape != draws.shape:
            raise ValueError(
                f"Scenario codes and draws must have the same length ({len(scenario)} != {len(draws)})"
            )

        df = pl.DataFrame({'scenario': scenario, 'draw': draws})
        df = df.filter(pl.col('draw').is_not_null() & pl.col('draw').is_not_nan())

        aggregations = [pl.col('draw').mean().alias('pe')]
        for i, level in enumerate(levels, start=1):
            tail = (1 - level) / 2
            aggregations.append(
                pl.col('draw').quantile(tail, interpolation='linear').alias(f'lower_{i}')
            )
            aggregations.append(
                pl.col('draw').quantile(1 - tail, interpolation='linear').alias(f'upper_{i}')
            )

        return df.group_by('scenario').agg(aggregations).sort('scenario')

    def line_data(self, trace: Mapping, axes: AxisPair, levels: Sequence[float]) -> LineData:
        """
        Build drawable coordinates for a line trace.

        With ``simulates`` set, draws are summarized at the requested levels;
        otherwise the trace's own values and any ``lower``/``upper`` bounds are
        used as given.
        """
        simulates = trace.get('simulates')

        if simulates is None:
            center = np.asarray(trace[axes.vertical], dtype=float)
            if 'lower' in trace and 'upper' in trace:
                lower = bound_columns(trace['lower'])
                upper = bound_columns(trace['upper'])
            else:
                lower = upper = np.empty((len(center), 0))
            return LineData(
                pos=np.asarray(trace[axes.horizontal]),
                center=center,
                lower=lower,
                upper=upper,
            )

        horizontal = simulates == axes.horizontal
        scenario_key = axes.vertical if horizontal else axes.horizontal
        summary = self.summarize(trace[scenario_key], trace[simulates], levels)

        n = len(summary)
        if levels:
            lower = np.column_stack([summary[f'lower_{i}'].to_numpy() for i in range(1, len(levels) + 1)])
            upper = np.column_stack([summary[f'upper_{i}'].to_numpy() for i in range(1, len(levels) + 1)])
        else:
            lower = upper = np.empty((n, 0))

        return LineData(
            pos=summary['scenario'].to_numpy(),
            center=summary['pe'].to_numpy(),
            lower=lower,
            upper=upper,
            horizontal=horizontal,
        )
