"""Tests for bivariate fits."""

import numpy as np
import pytest

from tileplot.clients.fit import FitClient, FitError
from tileplot.utils.options import FitOptions


@pytest.fixture
def client():
    return FitClient(bootstrap=50, seed=1)


class TestLinearFits:
    """Tests for linear, wls and robust fits."""

    def test_linear_recovers_line(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions())

        assert result.method == "linear"
        assert len(result.x) == 100
        assert result.x[0] == pytest.approx(0)
        assert result.x[-1] == pytest.approx(10)
        np.testing.assert_allclose(result.fit, 2 * result.x + 1, atol=0.6)
        assert result.lower.shape == (100, 1)
        assert np.all(result.lower[:, 0] < result.fit)
        assert np.all(result.upper[:, 0] > result.fit)

    def test_wider_level_wider_band(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions(ci=(0.67, 0.95)))
        narrow = result.upper[:, 0] - result.lower[:, 0]
        wide = result.upper[:, 1] - result.lower[:, 1]
        assert np.all(wide > narrow)

    def test_no_bands(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions(ci=()))
        assert result.lower.shape == (100, 0)

    def test_custom_grid(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions(), grid=[2.0, 4.0])
        np.testing.assert_allclose(result.fit, [5.0, 9.0], atol=0.6)

    def test_wls(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions(method="wls", weights=np.linspace(1, 2, len(x))))
        np.testing.assert_allclose(result.fit, 2 * result.x + 1, atol=0.7)

    def test_wls_weight_length(self, client, linear_data):
        x, y = linear_data
        with pytest.raises(FitError, match="weights"):
            client.fit(x, y, FitOptions(method="wls", weights=[1.0, 2.0]))

    @pytest.mark.parametrize("method", ["robust", "mmest"])
    def test_robust_resists_outliers(self, client, linear_data, method):
        x, y = linear_data
        y = y.copy()
        y[-5:] += 60
        ols = client.fit(x, y, FitOptions())
        robust = client.fit(x, y, FitOptions(method=method))
        truth = 2 * robust.x + 1
        assert np.abs(robust.fit - truth).max() < np.abs(ols.fit - truth).max()
        assert np.abs(robust.fit - truth).max() < 1.5

    def test_missing_values_dropped(self, client, linear_data):
        x, y = linear_data
        y = y.copy()
        y[3] = np.nan
        result = client.fit(x, y, FitOptions())
        assert np.all(np.isfinite(result.fit))


class TestLoess:
    """Tests for the loess smoother."""

    def test_follows_curve(self, client):
        x = np.linspace(0, 2 * np.pi, 80)
        y = np.sin(x)
        result = client.fit(x, y, FitOptions(method="loess", span=0.2))
        np.testing.assert_allclose(result.fit, np.sin(result.x), atol=0.1)

    def test_bootstrap_bands(self, client, linear_data):
        x, y = linear_data
        result = client.fit(x, y, FitOptions(method="loess", span=0.75))
        assert result.lower.shape == (100, 1)
        assert np.all(result.lower[:, 0] <= result.upper[:, 0])

    def test_seeded(self, linear_data):
        x, y = linear_data
        first = FitClient(bootstrap=20, seed=3).fit(x, y, FitOptions(method="loess"))
        second = FitClient(bootstrap=20, seed=3).fit(x, y, FitOptions(method="loess"))
        np.testing.assert_array_equal(first.lower, second.lower)


class TestFitErrors:
    """Tests for unfittable input."""

    def test_too_few_points(self, client):
        with pytest.raises(FitError, match="at least 3"):
            client.fit([1, 2], [1, 2], FitOptions())

    def test_no_spread(self, client):
        with pytest.raises(FitError, match="spread"):
            client.fit([1, 1, 1], [1, 2, 3], FitOptions())

    def test_unknown_method(self, client):
        with pytest.raises(ValueError, match="Unknown method"):
            client.fit([1, 2, 3], [1, 2, 3], FitOptions(method="spline"))

    def test_shape_mismatch(self, client):
        with pytest.raises(FitError):
            client.fit([1, 2, 3], [1, 2], FitOptions())
