"""Build plot-ready chart descriptions from branching/branchless perf-stat runs.

Nothing here draws; ``render`` turns these into figures.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

from . import aggregate as agg
from .compose import Point, drop_zero, pair_by_x, scale_keyed, total_by_x
from .config import AppCfg, VariantStyle
from .errors import EmptyAggregationError
from .magnitude import shared_magnitude
from .records import CounterRecord

# exact event compared in the branch/branchless bar chart
INSTRUCTIONS_EVENT = "cpu_core/instructions:u/"


class PlotType(str, Enum):
    CPU_INSTRUCTIONS = "cpu-instructions"
    TIME_BRANCH_MISSES = "time-branch-misses"
    MERGED = "merged"


@dataclass
class Line:
    points: List[Point]
    legend: str
    color: str
    line_width: float
    point_size: float
    marker: str = "o"


@dataclass
class LineChart:
    lines: List[Line]
    x_label: str
    y_label: str
    y_range: Tuple[float, float]
    y_max_ticks: int


@dataclass
class Bar:
    label: str
    value: float
    color: str


@dataclass
class BarChart:
    bars: List[Bar] = field(default_factory=list)
    x_label: str = ""


def _cpu_line(points: List[Point], style: VariantStyle, cpu: str) -> Line:
    s = style.series(cpu)
    return Line(points, s.legend, s.color, s.line_width, s.point_size, style.marker)


def cpu_instructions_chart(x_values: Sequence, br_runs: agg.Runs, bl_runs: agg.Runs,
                           cfg: AppCfg, logger=None) -> LineChart:
    """Total/core/atom instruction counts of both variants on one shared scale."""
    br_core = agg.aggregate(br_runs, agg.CORE_INSTRUCTIONS, logger)
    bl_core = agg.aggregate(bl_runs, agg.CORE_INSTRUCTIONS, logger)
    br_atom = agg.aggregate(br_runs, agg.ATOM_INSTRUCTIONS, logger)
    bl_atom = agg.aggregate(bl_runs, agg.ATOM_INSTRUCTIONS, logger)

    mag = shared_magnitude(br_core.magnitude, bl_core.magnitude)
    y_max = max(br_core.max_value + br_atom.max_value, bl_core.max_value + bl_atom.max_value) / mag.scale()

    lines: List[Line] = []
    for runs, style in ((br_runs, cfg.branching), (bl_runs, cfg.branchless)):
        core = scale_keyed(agg.keyed_by_x(x_values, runs, agg.CORE_INSTRUCTIONS), mag)
        atom = scale_keyed(agg.keyed_by_x(x_values, runs, agg.ATOM_INSTRUCTIONS), mag)
        lines.append(_cpu_line(total_by_x(x_values, core, atom), style, "total"))
        lines.append(_cpu_line(pair_by_x(x_values, core), style, "core"))
        lines.append(_cpu_line(drop_zero(pair_by_x(x_values, atom)), style, "atom"))

    chart = LineChart(
        lines=lines,
        x_label=cfg.chart.x_label,
        y_label=f"Instructions {mag.suffix}".rstrip(),
        y_range=(0.0, y_max),
        y_max_ticks=cfg.chart.instructions_max_ticks,
    )
    if logger is not None:
        logger.write({"type": "info", "msg": "chart_built", "data": {
            "chart": PlotType.CPU_INSTRUCTIONS.value, "magnitude": mag.name, "y_max": y_max,
        }})
    return chart


def time_branch_misses_chart(x_values: Sequence, br_runs: agg.Runs, bl_runs: agg.Runs,
                             cfg: AppCfg, logger=None) -> LineChart:
    """Branch-miss fraction and wall-clock duration of both variants."""
    misses: List[Line] = []
    durations: List[Line] = []
    for runs, style in ((br_runs, cfg.branching), (bl_runs, cfg.branchless)):
        frac = agg.keyed_by_x(x_values, runs, agg.CORE_BRANCH_MISSES, agg.branch_miss_fractions)
        secs = agg.keyed_by_x(x_values, runs, agg.DURATION, agg.durations_s)
        misses.append(Line(pair_by_x(x_values, frac), f"{style.label}: Branch misses",
                           style.branch_misses_color, 2.0, 1.0, "o"))
        durations.append(Line(pair_by_x(x_values, secs), f"{style.label}: Duration [s]",
                              style.core.color, 2.0, 1.0, "o"))
    chart = LineChart(
        lines=misses + durations,
        x_label=cfg.chart.x_label,
        y_label="Branch misses / Duration [s]",
        y_range=(0.0, cfg.chart.time_misses_y_max),
        y_max_ticks=cfg.chart.time_misses_max_ticks,
    )
    if logger is not None:
        logger.write({"type": "info", "msg": "chart_built", "data": {"chart": PlotType.TIME_BRANCH_MISSES.value}})
    return chart


def build_line_charts(plot_type: PlotType, x_values: Sequence, br_runs: agg.Runs, bl_runs: agg.Runs,
                      cfg: AppCfg, logger=None) -> List[LineChart]:
    if not x_values:
        raise EmptyAggregationError("no x values given")
    plot_type = PlotType(plot_type)
    if plot_type is PlotType.CPU_INSTRUCTIONS:
        return [cpu_instructions_chart(x_values, br_runs, bl_runs, cfg, logger)]
    if plot_type is PlotType.TIME_BRANCH_MISSES:
        return [time_branch_misses_chart(x_values, br_runs, bl_runs, cfg, logger)]
    return [
        cpu_instructions_chart(x_values, br_runs, bl_runs, cfg, logger),
        time_branch_misses_chart(x_values, br_runs, bl_runs, cfg, logger),
    ]


def instruction_count(run: Sequence[CounterRecord], event: str = INSTRUCTIONS_EVENT) -> int:
    """Counter value of ``event`` (exact match) in one run; the last reading wins."""
    vals = [agg.decode_counter(r) for r in run if r.event == event]
    if not vals:
        raise EmptyAggregationError(f"no {event!r} record in run")
    return vals[-1]


def instructions_bar_chart(br_run: Sequence[CounterRecord], bl_run: Sequence[CounterRecord],
                           cfg: AppCfg, logger=None) -> BarChart:
    br = instruction_count(br_run)
    bl = instruction_count(bl_run)
    if logger is not None:
        logger.write({"type": "info", "msg": "instructions_compared", "data": {
            "branching": br, "branchless": bl,
        }})
    return BarChart(
        bars=[
            Bar(cfg.branching.label, float(br), cfg.branching.core.color),
            Bar(cfg.branchless.label, float(bl), cfg.branchless.core.color),
        ],
        x_label="Instructions",
    )
