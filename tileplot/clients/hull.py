import polars as pl
import numpy as np
from typing import Callable, List, Optional, Tuple
from scipy.optimize import linprog


def as_matrix(values) -> np.ndarray:
    """Covariates as a float matrix with one row per observation."""
    if isinstance(values, pl.DataFrame):
        values = values.to_numpy()
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr


class HullClient:
    """Client for convex hull tests on counterfactual covariates.

    A counterfactual lies inside the hull of the observed covariates when it
    can be written as a convex combination of observed rows. The test is a
    linear programming feasibility problem, so it works in any dimension.
    """

    def __init__(self):
        pass

    def in_hull(self,
                data,
                cfact,
                formula: Optional[Callable] = None) -> np.ndarray:
        """
        Flag which counterfactual rows lie inside the convex hull of data.

        Args:
            data: Observed covariates (matrix, DataFrame or 1-D sequence)
            cfact: Counterfactual covariates, one row per scenario
            formula: Optional callable mapping covariates to the model
                matrix, applied to both data and cfact first

        Returns:
            Boolean array, True where the counterfactual is inside the hull
        """
        if formula is not None:
            data, cfact = formula(data), formula(cfact)

        X = as_matrix(data)
        C = as_matrix(cfact)
        if X.shape[1] != C.shape[1]:
            raise ValueError(
                f"data and cfact must have the same number of columns ({X.shape[1]} != {C.shape[1]})"
            )

        X = X[np.all(np.isfinite(X), axis=1)]
        inside = np.zeros(len(C), dtype=bool)
        if len(X) == 0:
            return inside

        X = np.unique(X, axis=0)

        # Rescale columns; convex combinations survive affine maps
        offset = X.mean(axis=0)
        scale = X.std(axis=0)
        scale[scale == 0] = 1.0
        X = (X - offset) / scale
        C = (C - offset) / scale

        lo, hi = X.min(axis=0), X.max(axis=0)
        tol = 1e-9
        for i, point in enumerate(C):
            if not np.all(np.isfinite(point)):
                continue
            if np.any(point < lo - tol) or np.any(point > hi + tol):
                continue
            inside[i] = self._is_convex_combination(X, point)

        return inside

    def _is_convex_combination(self, X: np.ndarray, point: np.ndarray) -> bool:
        n = len(X)
        A_eq = np.vstack([X.T, np.ones(n)])
        b_eq = np.append(point, 1.0)
        result = linprog(
            np.zeros(n),
            A_eq=A_eq,
            b_eq=b_eq,
            bounds=(0, None),
            method='highs',
        )
        return result.status == 0

    def segments(self, mask) -> List[Tuple[int, int, bool]]:
        """
        Split positions into runs of equal hull status.

        Returns:
            List of (start, stop, inside) with stop exclusive
        """
        mask = np.asarray(mask, dtype=bool)
        runs: List[Tuple[int, int, bool]] = []
        start = 0
        for i in range(1, len(mask) + 1):
            if i == len(mask) or mask[i] != mask[start]:
                runs.append((start, i, bool(mask[start])))
                start = i
        return runs
