import numpy as np
import plotly.graph_objects as go
from pathlib import Path
from plotly.subplots import make_subplots
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from tileplot import config
from tileplot.utils.trace import Trace, TraceKind
from tileplot.utils.options import (
    AxisPair,
    TraceError,
    check_trace,
    resolve_ci,
    resolve_extrapolate,
    resolve_fit,
    resolve_plots,
)
from tileplot.clients.simulation import LineData, SimulationClient
from tileplot.clients.fit import FitClient
from tileplot.clients.hull import HullClient

# R-style line types mapped to plotly dash names
LINE_TYPES = {
    1: 'solid', 'solid': 'solid',
    2: 'dash', 'dashed': 'dash',
    3: 'dot', 'dotted': 'dot',
    4: 'dashdot', 'dotdash': 'dashdot',
    5: 'longdash', 'longdash': 'longdash',
    6: 'longdashdot', 'twodash': 'longdashdot',
}


def _labels(value, count: int) -> List[str]:
    """Expand a title option (str, list or {'labels': ...}) to one label per plot."""
    if value is None:
        return [''] * count
    if isinstance(value, Mapping):
        value = value.get('labels', '')
    if isinstance(value, str):
        return [value] * count
    labels = [str(label) for label in value]
    return (labels + [''] * count)[:count]


def _axis_ref(letter: str, number: int) -> str:
    return letter if number == 1 else f'{letter}{number}'


def _layout_key(ref: str) -> str:
    # 'x3' -> 'xaxis3', 'y' -> 'yaxis'
    return f'{ref[0]}axis{ref[1:]}'


class TileClient:
    """Client composing traces into a tiled arrangement of plots."""

    def __init__(self):
        self.simulation_client = SimulationClient()
        self.fit_client = FitClient()
        self.hull_client = HullClient()

    def tile(self,
             *traces: Trace,
             rxc: Tuple[int, int] = (1, 1),
             limits: Optional[Sequence[float]] = None,
             xaxistitle=None,
             yaxistitle=None,
             plottitle=None,
             maintitle=None,
             gridlines: Optional[Union[str, Mapping]] = None,
             theme: Optional[str] = None,
             output: Optional[Union[str, Path, Mapping]] = None,
             show: bool = False,
             height: Optional[int] = None,
             width: Optional[int] = None) -> go.Figure:
        """
        Draw traces on an R x C grid of plots.

        Args:
            traces: Traces built by lineplot, lines_tile, points_tile, text_tile
            rxc: Rows and columns of the tiling; plots are numbered
                row-by-row from the top left, starting at 1
            limits: (xmin, xmax, ymin, ymax) applied to every plot
            xaxistitle / yaxistitle / plottitle: one label, a list with one
                label per plot, or a mapping with 'labels'
            maintitle: Title of the whole figure
            gridlines: 'x', 'y' or 'xy' (or {'type': ...})
            theme: 'professional', 'dark' or 'default'
            output: Path (or {'file': path}) to write; .html unless another
                suffix is given
            show: Open the figure in the default renderer

        Returns:
            The plotly Figure
        """
        rows, cols = rxc
        n_plots = rows * cols

        checked = []
        for trace in traces:
            axes = check_trace(trace)
            plots = resolve_plots(trace)
            beyond = [plot for plot in plots if plot > n_plots]
            if beyond:
                raise TraceError(f"'plot' {beyond} is outside the {rows}x{cols} tiling")
            checked.append((trace, axes, plots))

        print(f"Composing {len(traces)} traces on a {rows}x{cols} tile")

        fig = make_subplots(
            rows=rows, cols=cols,
            subplot_titles=_labels(plottitle, n_plots) if plottitle is not None else None,
            horizontal_spacing=0.08,
            vertical_spacing=0.1,
        )

        # Overlay axes made by this call, keyed by (letter, plot)
        overlays: Dict[Tuple[str, int], str] = {}

        for trace, axes, plots in checked:
            for plot in plots:
                xref, yref = self._trace_axes(fig, plot, axes, overlays, n_plots)
                kind = getattr(trace, 'kind', None)
                if kind is TraceKind.LINEPLOT:
                    self._draw_lineplot(fig, trace, axes, xref, yref)
                elif kind is TraceKind.POINTS:
                    self._draw_points(fig, trace, axes, xref, yref)
                elif kind is TraceKind.LINES:
                    self._draw_lines(fig, trace, axes, xref, yref)
                elif kind is TraceKind.TEXT:
                    self._draw_text(fig, trace, axes, xref, yref)
                else:
                    raise TraceError(f"Don't know how to draw a '{trace.get('graphic')}' trace")

        self._format(fig, rows, cols, limits, xaxistitle, yaxistitle, maintitle,
                     gridlines, theme, height, width)

        if output is not None:
            path = self.write(fig, output)
            print(f"Wrote figure to {path}")
        if show:
            fig.show()

        return fig

    def write(self, fig: go.Figure, output: Union[str, Path, Mapping]) -> Path:
        if isinstance(output, Mapping):
            output = output['file']
        path = Path(output)
        if not path.suffix:
            path = path.with_suffix('.html')
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix == '.html':
            fig.write_html(path)
        else:
            # Static formats go through plotly's image export (kaleido)
            fig.write_image(path)
        return path

    # ========== Axes ==========

    def _trace_axes(self, fig: go.Figure, plot: int, axes: AxisPair,
                    overlays: Dict[Tuple[str, int], str], n_plots: int) -> Tuple[str, str]:
        """Axis references for a trace in a plot; top/right get overlay axes."""
        xref = _axis_ref('x', plot)
        yref = _axis_ref('y', plot)
        cell_x, cell_y = xref, yref

        if axes.horizontal == 'top':
            xref = self._overlay_axis(fig, overlays, n_plots, 'x', plot, overlaying=cell_x, anchor=cell_y, side='top')
        if axes.vertical == 'right':
            yref = self._overlay_axis(fig, overlays, n_plots, 'y', plot, overlaying=cell_y, anchor=cell_x, side='right')
        return xref, yref

    def _overlay_axis(self, fig: go.Figure, overlays: Dict[Tuple[str, int], str], n_plots: int,
                      letter: str, plot: int, overlaying: str, anchor: str, side: str) -> str:
        key = (letter, plot)
        if key not in overlays:
            # Overlay axes are numbered after the cell axes
            made = sum(1 for made_letter, _ in overlays if made_letter == letter)
            ref = _axis_ref(letter, n_plots + made + 1)
            fig.update_layout({
                _layout_key(ref): dict(overlaying=overlaying, anchor=anchor, side=side, showgrid=False)
            })
            overlays[key] = ref
        return overlays[key]

    # ========== Line traces ==========

    def _draw_lineplot(self, fig: go.Figure, trace: Trace, axes: AxisPair, xref: str, yref: str) -> None:
        fit = resolve_fit(trace)
        extrapolate = resolve_extrapolate(trace)

        order = None
        if fit is not None:
            grid = None
            if extrapolate is not None:
                # Evaluate at the trace's own points, left to right; cfact rows follow the same order
                grid = np.asarray(trace[axes.horizontal], dtype=float)
                order = np.argsort(grid, kind='stable')
                grid = grid[order]
            result = self.fit_client.fit(trace[axes.horizontal], trace[axes.vertical], fit, grid=grid)
            line = LineData(pos=result.x, center=result.fit, lower=result.lower, upper=result.upper)
            color = fit.col
            marks = fit.mark
        else:
            ci = resolve_ci(trace)
            line = self.simulation_client.line_data(trace, axes, ci.levels)
            color = trace.get('col', config.DEFAULT_LINE_COL)
            marks = ci.mark

        n = len(line.pos)
        inside = np.ones(n, dtype=bool)
        omit = False
        if extrapolate is not None:
            inside = self.hull_client.in_hull(extrapolate.data, extrapolate.cfact, extrapolate.formula)
            omit = extrapolate.omit_extrapolated
            if len(inside) != n:
                raise TraceError(
                    f"'extrapolate.cfact' has {len(inside)} rows but the trace draws {n} points"
                )
            if order is not None:
                inside = inside[order]

        name = trace.get('name')
        for start, stop, is_inside in self.hull_client.segments(inside):
            if not is_inside and omit:
                continue
            if not is_inside:
                # Reach into neighbouring runs so flagged pieces join the line
                start, stop = max(start - 1, 0), min(stop + 1, n)
            idx = slice(start, stop)
            self._draw_bands(fig, line, idx, marks, color, xref, yref, faded=not is_inside)
            self._draw_center(fig, trace, line, idx, color, xref, yref,
                              faded=not is_inside, name=name if is_inside else None)
            if is_inside:
                name = None

    def _coords(self, line: LineData, idx: slice, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        if line.horizontal:
            return values, line.pos[idx]
        return line.pos[idx], values

    def _draw_bands(self, fig: go.Figure, line: LineData, idx: slice, marks: Sequence[str],
                    color: str, xref: str, yref: str, faded: bool = False) -> None:
        if line.intervals == 0:
            return

        # Widest interval first so narrower ones sit on top
        widths = np.nanmean(line.upper[idx] - line.lower[idx], axis=0)
        order = np.argsort(-np.nan_to_num(widths, nan=-np.inf), kind='stable')

        for j in order:
            mark = marks[j % len(marks)]
            lower = line.lower[idx, j]
            upper = line.upper[idx, j]

            if mark == 'shaded':
                pos = line.pos[idx]
                band_pos = np.concatenate([pos, pos[::-1]])
                band_vals = np.concatenate([upper, lower[::-1]])
                if line.horizontal:
                    x, y = band_vals, band_pos
                else:
                    x, y = band_pos, band_vals
                fig.add_trace(go.Scatter(
                    x=x, y=y,
                    xaxis=xref, yaxis=yref,
                    mode='lines',
                    fill='toself',
                    fillcolor=color,
                    line=dict(width=0, color=color),
                    opacity=config.FADED_BAND_OPACITY if faded else config.BAND_OPACITY,
                    hoverinfo='skip',
                    showlegend=False,
                ))
            else:
                for bound in (lower, upper):
                    x, y = self._coords(line, idx, bound)
                    fig.add_trace(go.Scatter(
                        x=x, y=y,
                        xaxis=xref, yaxis=yref,
                        mode='lines',
                        line=dict(color=color, width=1, dash='dot' if faded else 'dash'),
                        opacity=config.FADED_LINE_OPACITY if faded else 1.0,
                        hoverinfo='skip',
                        showlegend=False,
                    ))

    def _draw_center(self, fig: go.Figure, trace: Trace, line: LineData, idx: slice, color: str,
                     xref: str, yref: str, faded: bool = False, name: Optional[str] = None) -> None:
        x, y = self._coords(line, idx, line.center[idx])
        dash = 'dot' if faded else LINE_TYPES.get(trace.get('lty', 'solid'), trace.get('lty'))
        fig.add_trace(go.Scatter(
            x=x, y=y,
            xaxis=xref, yaxis=yref,
            mode='lines+markers' if trace.get('marker') else 'lines',
            marker=dict(symbol=trace.get('marker'), color=color) if trace.get('marker') else None,
            line=dict(color=color, width=trace.get('lwd', config.DEFAULT_LINE_WIDTH), dash=dash),
            opacity=config.FADED_LINE_OPACITY if faded else 1.0,
            name=name,
            showlegend=name is not None,
        ))

    # ========== Annotation traces ==========

    def _draw_points(self, fig: go.Figure, trace: Trace, axes: AxisPair, xref: str, yref: str) -> None:
        fig.add_trace(go.Scatter(
            x=trace[axes.horizontal], y=trace[axes.vertical],
            xaxis=xref, yaxis=yref,
            mode='markers',
            marker=dict(
                symbol=trace.get('marker', 'circle'),
                size=trace.get('size', 8),
                color=trace.get('col', config.DEFAULT_LINE_COL),
            ),
            name=trace.get('name'),
            showlegend=trace.get('name') is not None,
        ))

    def _draw_lines(self, fig: go.Figure, trace: Trace, axes: AxisPair, xref: str, yref: str) -> None:
        lty = trace.get('lty', 'solid')
        fig.add_trace(go.Scatter(
            x=trace[axes.horizontal], y=trace[axes.vertical],
            xaxis=xref, yaxis=yref,
            mode='lines',
            line=dict(
                color=trace.get('col', config.DEFAULT_LINE_COL),
                width=trace.get('lwd', config.DEFAULT_LINE_WIDTH),
                dash=LINE_TYPES.get(lty, lty),
            ),
            name=trace.get('name'),
            showlegend=trace.get('name') is not None,
        ))

    def _draw_text(self, fig: go.Figure, trace: Trace, axes: AxisPair, xref: str, yref: str) -> None:
        labels = trace.get('labels', '')
        fig.add_trace(go.Scatter(
            x=trace[axes.horizontal], y=trace[axes.vertical],
            xaxis=xref, yaxis=yref,
            mode='text',
            text=[labels] if isinstance(labels, str) else list(labels),
            textfont=dict(
                color=trace.get('col', config.DEFAULT_LINE_COL),
                size=12 * trace.get('cex', 1),
            ),
            showlegend=False,
        ))

    # ========== Layout ==========

    def _format(self, fig: go.Figure, rows: int, cols: int, limits, xaxistitle, yaxistitle,
                maintitle, gridlines, theme: Optional[str], height: Optional[int], width: Optional[int]) -> None:
        style = config.get_theme(theme)

        if isinstance(gridlines, Mapping):
            gridlines = gridlines.get('type', '')
        gridlines = gridlines or ''

        title = maintitle.get('labels') if isinstance(maintitle, Mapping) else maintitle
        fig.update_layout(
            title={
                'text': f'<b>{title}</b>' if title else '',
                'x': 0.5,
                'xanchor': 'center',
                'font': {'size': style['title_font_size'], 'family': style['font_family']}
            },
            template=style['template'],
            height=height or 350 * rows + 100,
            width=width,
            showlegend=True,
            plot_bgcolor=style['bg_color'],
            paper_bgcolor=style['paper_bg'],
            font={'family': style['font_family'], 'size': style['axis_font_size']},
            margin=dict(l=60, r=40, t=80, b=50)
        )

        xtitles = _labels(xaxistitle, rows * cols)
        ytitles = _labels(yaxistitle, rows * cols)
        for plot in range(1, rows * cols + 1):
            row, col = (plot - 1) // cols + 1, (plot - 1) % cols + 1
            axis_style = dict(
                showline=True,
                linewidth=1,
                linecolor=style['grid_color'],
                mirror=True,
                ticks='outside',
                tickcolor=style['grid_color'],
                gridcolor=style['grid_color'],
            )
            fig.update_xaxes(title_text=xtitles[plot - 1], showgrid='x' in gridlines,
                             row=row, col=col, **axis_style)
            fig.update_yaxes(title_text=ytitles[plot - 1], showgrid='y' in gridlines,
                             row=row, col=col, **axis_style)

        if limits is not None:
            xmin, xmax, ymin, ymax = limits
            for ref in self._all_axes(fig, 'x'):
                fig.layout[ref].range = [xmin, xmax]
            for ref in self._all_axes(fig, 'y'):
                fig.layout[ref].range = [ymin, ymax]

    def _all_axes(self, fig: go.Figure, letter: str) -> List[str]:
        return [key for key in fig.layout.to_plotly_json() if key.startswith(f'{letter}axis')]


# Usage example
if __name__ == "__main__":
    from tileplot.utils.trace import lineplot

    x = np.linspace(0, 10, 50)
    trace = lineplot(x=x, y=np.sin(x), lower=np.sin(x) - 0.3, upper=np.sin(x) + 0.3,
                     ci={'mark': 'shaded'}, col='steelblue', plot=1)
    TileClient().tile(trace, maintitle='Example', gridlines='xy', show=True)
