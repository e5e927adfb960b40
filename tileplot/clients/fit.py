import numpy as np
import statsmodels.api as sm
from dataclasses import dataclass
from typing import Optional, Tuple
from scipy import stats
from statsmodels.nonparametric.smoothers_lowess import lowess

from tileplot import config
from tileplot.utils.options import FitOptions


class FitError(ValueError):
    """Raised when the data cannot support the requested fit."""


@dataclass
class FitResult:
    method: str
    x: np.ndarray
    fit: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    levels: Tuple[float, ...]


class FitClient:
    """Client for simple bivariate fits: linear, weighted, robust and loess."""

    def __init__(self, bootstrap: int = config.DEFAULT_LOESS_BOOTSTRAP, seed: Optional[int] = 0):
        self.bootstrap = bootstrap
        self.seed = seed

    def fit(self,
            x,
            y,
            options: FitOptions,
            grid: Optional[np.ndarray] = None) -> FitResult:
        """
        Fit y on x and evaluate the fit with its confidence bands.

        Args:
            x: Horizontal values
            y: Vertical values
            options: Resolved fit options (method, ci levels, span, weights)
            grid: Points at which to evaluate the fit (default: evenly
                spaced across the observed range of x)

        Returns:
            FitResult with one row per grid point and one band column per level
        """
        if options.method not in config.FIT_METHODS:
            raise ValueError(f"Unknown method: {options.method}. Use one of {', '.join(config.FIT_METHODS)}")

        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.shape != y.shape:
            raise FitError(f"x and y must have the same length ({len(x)} != {len(y)})")

        mask = np.isfinite(x) & np.isfinite(y)
        weights = None
        if options.method == 'wls':
            weights = np.asarray(options.weights, dtype=float)
            if weights.shape != x.shape:
                raise FitError("weights must have one value per point")
            mask &= np.isfinite(weights) & (weights > 0)
            weights = weights[mask]
        x, y = x[mask], y[mask]

        if len(x) < 3:
            raise FitError(f"Need at least 3 complete points for a {options.method} fit, got {len(x)}")
        if np.ptp(x) == 0:
            raise FitError("x has no spread; cannot fit a line")

        if grid is None:
            grid = np.linspace(x.min(), x.max(), config.DEFAULT_FIT_GRID)
        grid = np.asarray(grid, dtype=float)
        levels = tuple(options.ci)

        if options.method == 'loess':
            center, lower, upper = self._loess(x, y, grid, options.span, levels)
        else:
            results = self._linear_model(options.method, x, y, weights)
            center, lower, upper = self._linear_bands(options.method, results, grid, levels)

        return FitResult(
            method=options.method,
            x=grid,
            fit=center,
            lower=lower,
            upper=upper,
            levels=levels,
        )

    def _linear_model(self, method: str, x: np.ndarray, y: np.ndarray, weights: Optional[np.ndarray]):
        X = sm.add_constant(x, has_constant='add')

        if method == 'linear':
            return sm.OLS(y, X).fit()

        elif method == 'wls':
            return sm.WLS(y, X, weights=weights).fit()

        elif method == 'robust':
            # M-estimator with Huber's psi
            return sm.RLM(y, X, M=sm.robust.norms.HuberT()).fit()

        elif method == 'mmest':
            # Bisquare redescent from the Huber fit, scale held at the start value
            start = sm.RLM(y, X, M=sm.robust.norms.HuberT()).fit()
            return sm.RLM(y, X, M=sm.robust.norms.TukeyBiweight()).fit(
                start_params=start.params,
                update_scale=False,
            )

        raise ValueError(f"Unknown method: {method}")

    def _linear_bands(self, method: str, results, grid: np.ndarray, levels: Tuple[float, ...]):
        X0 = np.column_stack([np.ones_like(grid), grid])
        params = np.asarray(results.params)
        cov = np.asarray(results.cov_params())

        center = X0 @ params
        se = np.sqrt(np.einsum('ij,jk,ik->i', X0, cov, X0))

        lower = np.empty((len(grid), len(levels)))
        upper = np.empty((len(grid), len(levels)))
        for i, level in enumerate(levels):
            if method in ('linear', 'wls'):
                crit = stats.t.ppf(1 - (1 - level) / 2, results.df_resid)
            else:
                crit = stats.norm.ppf(1 - (1 - level) / 2)
            lower[:, i] = center - crit * se
            upper[:, i] = center + crit * se

        return center, lower, upper

    def _loess(self, x: np.ndarray, y: np.ndarray, grid: np.ndarray, span: float, levels: Tuple[float, ...]):
        center = lowess(y, x, frac=span, xvals=grid)

        lower = np.empty((len(grid), len(levels)))
        upper = np.empty((len(grid), len(levels)))
        if not levels:
            return center, lower, upper

        # Residual bootstrap around the smooth at the observed points
        fitted = lowess(y, x, frac=span, xvals=x)
        residuals = y - fitted
        rng = np.random.default_rng(self.seed)
        curves = np.empty((self.bootstrap, len(grid)))
        for b in range(self.bootstrap):
            resampled = fitted + rng.choice(residuals, size=len(residuals), replace=True)
            curves[b] = lowess(resampled, x, frac=span, xvals=grid)

        for i, level in enumerate(levels):
            tail = (1 - level) / 2
            lower[:, i] = np.nanquantile(curves, tail, axis=0)
            upper[:, i] = np.nanquantile(curves, 1 - tail, axis=0)

        return center, lower, upper
