"""Tests for convex hull extrapolation checks."""

import numpy as np
import polars as pl
import pytest

from tileplot.clients.hull import HullClient, as_matrix


@pytest.fixture
def client():
    return HullClient()


@pytest.fixture
def square():
    return np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0], [0.5, 0.5]])


class TestInHull:
    """Tests for HullClient.in_hull."""

    def test_square(self, client, square):
        cfact = np.array([[0.5, 0.5], [0.9, 0.1], [1.0, 1.0], [1.5, 0.5], [-0.1, 0.2]])
        inside = client.in_hull(square, cfact)
        assert inside.tolist() == [True, True, True, False, False]

    def test_inside_box_outside_hull(self, client):
        triangle = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
        inside = client.in_hull(triangle, [[0.9, 0.9], [0.2, 0.2]])
        assert inside.tolist() == [False, True]

    def test_one_dimension(self, client):
        inside = client.in_hull([1.0, 2.0, 5.0], [0.0, 1.0, 3.0, 5.0, 6.0])
        assert inside.tolist() == [False, True, True, True, False]

    def test_polars_frames(self, client):
        data = pl.DataFrame({"size": [1.0, 2.0, 3.0], "female": [0.0, 1.0, 0.0]})
        cfact = pl.DataFrame({"size": [2.0, 4.0], "female": [0.5, 0.0]})
        assert client.in_hull(data, cfact).tolist() == [True, False]

    def test_formula(self, client):
        def squares(values):
            values = as_matrix(values)
            return np.column_stack([values[:, 0], values[:, 0] ** 2])

        data = [-1.0, 0.0, 1.0]
        # 0.5 lies in [-1, 1] but (0.5, 0.25) falls below the edge from (0, 0) to (1, 1)
        assert client.in_hull(data, [0.5]).tolist() == [True]
        assert client.in_hull(data, [0.5], formula=squares).tolist() == [False]

    def test_constant_column(self, client):
        data = np.array([[1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
        inside = client.in_hull(data, [[2.5, 0.0], [2.5, 1.0]])
        assert inside.tolist() == [True, False]

    def test_column_mismatch(self, client, square):
        with pytest.raises(ValueError, match="columns"):
            client.in_hull(square, [[1.0, 2.0, 3.0]])

    def test_empty_data(self, client):
        assert client.in_hull(np.empty((0, 2)), [[0.0, 0.0]]).tolist() == [False]


class TestSegments:
    """Tests for HullClient.segments."""

    def test_runs(self, client):
        mask = [True, True, False, False, True]
        assert client.segments(mask) == [(0, 2, True), (2, 4, False), (4, 5, True)]

    def test_single_run(self, client):
        assert client.segments([False] * 3) == [(0, 3, False)]

    def test_empty(self, client):
        assert client.segments([]) == []
