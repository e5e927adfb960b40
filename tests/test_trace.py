"""Tests for trace constructors."""

import numpy as np
import pytest

from tileplot import lineplot, lines_tile, points_tile, text_tile
from tileplot.utils.trace import (
    TRACE_CLASS,
    LinePlot,
    Trace,
    TraceKind,
    has_class,
    is_trace,
)


class TestLineplot:
    """Tests for the lineplot constructor."""

    def test_example_bundle(self):
        trace = lineplot(x=[0, 1, 2], y=[5, 6, 7], col="blue", plot=1)
        assert dict(trace) == {
            "x": [0, 1, 2],
            "y": [5, 6, 7],
            "col": "blue",
            "plot": 1,
            "graphic": "lineplot",
        }
        assert trace.classes == ("tileTrace", "lineplot")

    def test_keeps_values_unchanged(self):
        x = np.arange(5)
        weights = [1, 2, 3]
        trace = lineplot(x=x, y=x * 2, fit={"weights": weights}, lwd=3)
        assert trace["x"] is x
        assert trace["fit"]["weights"] is weights
        assert trace["lwd"] == 3

    def test_keys_in_call_order_with_graphic_last(self):
        trace = lineplot(y=[1], x=[2], simulates="y")
        assert list(trace) == ["y", "x", "simulates", "graphic"]

    def test_graphic_always_lineplot(self):
        assert lineplot()["graphic"] == "lineplot"
        assert lineplot(graphic="points")["graphic"] == "lineplot"

    def test_empty_call(self):
        trace = lineplot()
        assert dict(trace) == {"graphic": "lineplot"}
        assert trace.kind is TraceKind.LINEPLOT
        assert TRACE_CLASS in trace.classes

    def test_calls_are_independent(self):
        first = lineplot(x=[1, 2], y=[3, 4])
        second = lineplot(x=[1, 2], y=[3, 4])
        assert first is not second
        first["x"].append(3)
        assert second["x"] == [1, 2]

    def test_sections_passed_through_together(self):
        ci = {"levels": [0.9], "mark": "dashed"}
        fit = {"method": "loess", "span": 0.5}
        extrapolate = {"data": [[1], [2]], "cfact": [[1.5]], "omit.extrapolated": False}
        trace = lineplot(x=[1], y=[2], ci=ci, fit=fit, extrapolate=extrapolate)
        assert trace["ci"] is ci
        assert trace["fit"] is fit
        assert trace["extrapolate"] is extrapolate

    def test_no_validation(self):
        trace = lineplot(x=[1, 2, 3], top=[1], y="nonsense", lower=[1], unknown=object())
        assert trace["y"] == "nonsense"
        assert "unknown" in trace

    def test_read_only(self):
        trace = lineplot(x=[1], y=[2])
        with pytest.raises(TypeError):
            trace["x"] = [5]
        with pytest.raises(AttributeError):
            trace.extra = 1

    def test_dotted_option_names(self):
        trace = lineplot(**{"omit.extrapolated": True})
        assert trace["omit.extrapolated"] is True

    def test_is_line_trace(self):
        trace = lineplot(x=[1], y=[1])
        assert isinstance(trace, LinePlot)
        assert isinstance(trace, Trace)
        assert is_trace(trace)
        assert has_class(trace, "lineplot")
        assert has_class(trace, "tileTrace")
        assert not has_class(trace, "points")


class TestSiblingTraces:
    """Tests for the annotation trace constructors."""

    @pytest.mark.parametrize(
        "factory, graphic",
        [(lines_tile, "lines"), (points_tile, "points"), (text_tile, "text")],
    )
    def test_graphic_and_tags(self, factory, graphic):
        trace = factory(x=[1], y=[2], col="red")
        assert trace["graphic"] == graphic
        assert trace.classes == ("tileTrace", graphic)
        assert trace["col"] == "red"

    def test_plain_mapping_is_not_a_trace(self):
        assert not is_trace({"graphic": "lineplot"})
        assert not has_class({"graphic": "lineplot"}, "lineplot")
