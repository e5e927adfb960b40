"""Pytest configuration and fixtures."""

import numpy as np
import polars as pl
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def linear_data(rng):
    """Noisy points around y = 2x + 1."""
    x = np.linspace(0, 10, 60)
    y = 2 * x + 1 + rng.normal(0, 0.5, size=len(x))
    return x, y


@pytest.fixture
def simulated_draws(rng):
    """1,000 draws for each of 5 scenarios, stacked."""
    scenarios = np.repeat(np.arange(1, 6, dtype=float), 1000)
    draws = scenarios * 10 + rng.normal(0, 1, size=len(scenarios))
    return scenarios, draws


@pytest.fixture
def csv_file(tmp_path, linear_data):
    x, y = linear_data
    path = tmp_path / "results.csv"
    pl.DataFrame({
        "size": x,
        "estimate": y,
        "lo": y - 1,
        "hi": y + 1,
        "w": np.ones_like(x),
    }).write_csv(path)
    return path


@pytest.fixture(autouse=True)
def isolated_output(tmp_path, monkeypatch):
    """Keep default figure output out of the home directory."""
    monkeypatch.setenv("TILEPLOT_OUTPUT_DIR", str(tmp_path / "figures"))
