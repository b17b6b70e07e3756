from __future__ import annotations
import pathlib
from typing import Sequence, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.ticker import MaxNLocator

from .charts import BarChart, LineChart
from .config import ChartCfg
from .errors import EmptyAggregationError, PerfStatIOError

Chart = Union[LineChart, BarChart]


def draw_line_chart(ax, chart: LineChart):
    for ln in chart.lines:
        xs = [p[0] for p in ln.points]
        ys = [p[1] for p in ln.points]
        ax.plot(xs, ys, label=ln.legend, color=ln.color, linewidth=ln.line_width,
                marker=ln.marker, markersize=ln.point_size, solid_joinstyle="round")
    ax.set_xlabel(chart.x_label)
    ax.set_ylabel(chart.y_label)
    ax.set_ylim(*chart.y_range)
    ax.yaxis.set_major_locator(MaxNLocator(nbins=chart.y_max_ticks))
    ax.legend(loc="best", fontsize="small")
    ax.grid(True, alpha=0.3)


def draw_bar_chart(ax, chart: BarChart):
    labels = [b.label for b in chart.bars]
    ax.bar(labels, [b.value for b in chart.bars], color=[b.color for b in chart.bars])
    ax.set_xlabel(chart.x_label)


def save_charts(charts: Sequence[Chart], save_to, cfg: ChartCfg, logger=None) -> pathlib.Path:
    """Draw the charts stacked vertically in one figure and write it to ``save_to``.

    The image format follows the file extension (svg, png, pdf, ...).
    """
    if not charts:
        raise EmptyAggregationError("nothing to render")
    out = pathlib.Path(save_to)
    fig, axes = plt.subplots(len(charts), 1, squeeze=False,
                             figsize=(cfg.width_in, cfg.height_in * len(charts)))
    try:
        for ax, chart in zip(axes[:, 0], charts):
            if isinstance(chart, BarChart):
                draw_bar_chart(ax, chart)
            else:
                draw_line_chart(ax, chart)
        fig.tight_layout()
        try:
            fig.savefig(out, dpi=cfg.dpi)
        except (OSError, ValueError) as e:
            # ValueError: unsupported image format for the file extension
            raise PerfStatIOError(f"cannot write {out}: {e}") from e
    finally:
        plt.close(fig)
    if logger is not None:
        logger.write({"type": "info", "msg": "chart_saved", "data": {"path": str(out), "charts": len(charts)}})
    return out
