from __future__ import annotations
import dataclasses, yaml
from dataclasses import dataclass, field
from typing import Optional, List, Any, Dict

from .errors import MalformedInputError, PerfStatIOError

@dataclass
class SeriesStyle:
    color: str = "#000000"
    line_width: float = 1.0
    point_size: float = 2.0
    legend: str = ""

@dataclass
class VariantStyle:
    """Styling for one compared variant (branching or branchless)."""
    label: str
    # matplotlib marker: "o" circle, "s" square
    marker: str
    total: SeriesStyle
    core: SeriesStyle
    atom: SeriesStyle
    branch_misses_color: str

    def series(self, cpu: str) -> SeriesStyle:
        # cpu is one of "total", "core", "atom"
        return getattr(self, cpu)

def _variant(label: str, marker: str, total: str, core: str, atom: str, misses: str) -> VariantStyle:
    return VariantStyle(
        label=label,
        marker=marker,
        total=SeriesStyle(total, 3.0, 4.0, f"{label} TOTAL"),
        core=SeriesStyle(core, 1.5, 2.5, f"{label} CORE"),
        atom=SeriesStyle(atom, 1.0, 2.0, f"{label} ATOM"),
        branch_misses_color=misses,
    )

def default_branching() -> VariantStyle:
    return _variant("Branching", "o", "#e59000", "#e5a73e", "#e4ca9d", "#d14419")

def default_branchless() -> VariantStyle:
    return _variant("Branchless", "s", "#0369c5", "#1691ff", "#88bae7", "#5d00d1")

@dataclass
class ChartCfg:
    x_label: str = "Ratio [True/False]"
    time_misses_y_max: float = 3.5
    instructions_max_ticks: int = 20
    time_misses_max_ticks: int = 16
    dpi: int = 150
    width_in: float = 10.0
    height_in: float = 6.0

@dataclass
class LoggingCfg:
    dir: str = "./logs"
    file_prefix: str = "perfstat"
    # 'regular' drops debug records unless whitelisted; 'verbose' emits everything.
    mode: str = "regular"
    verbose_whitelist: Optional[List[str]] = None
    # When enabled, every record (debug included) also goes to `dir/debug`.
    dual_file: bool = False
    debug_subdir: Optional[str] = "debug"
    enabled: bool = True

@dataclass
class AppCfg:
    branching: VariantStyle = field(default_factory=default_branching)
    branchless: VariantStyle = field(default_factory=default_branchless)
    chart: ChartCfg = field(default_factory=ChartCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)

def default_config() -> AppCfg:
    return AppCfg()

def _as_float(d, key, default):
    v = d.get(key, default)
    try:
        return float(v)
    except (TypeError, ValueError):
        return default

def _as_int(d, key, default):
    v = d.get(key, default)
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def _section(raw, key: str) -> Dict[str, Any]:
    v = raw.get(key)
    if v is None:
        return {}
    if not isinstance(v, dict):
        raise MalformedInputError(f"config section '{key}' must be a mapping, got {type(v).__name__}")
    return v

def _series(raw: Dict[str, Any], base: SeriesStyle) -> SeriesStyle:
    return SeriesStyle(
        color=str(raw.get("color", base.color)),
        line_width=_as_float(raw, "line_width", base.line_width),
        point_size=_as_float(raw, "point_size", base.point_size),
        legend=str(raw.get("legend", base.legend)),
    )

def _variant_from(raw: Dict[str, Any], base: VariantStyle) -> VariantStyle:
    return VariantStyle(
        label=str(raw.get("label", base.label)),
        marker=str(raw.get("marker", base.marker)),
        total=_series(_section(raw, "total"), base.total),
        core=_series(_section(raw, "core"), base.core),
        atom=_series(_section(raw, "atom"), base.atom),
        branch_misses_color=str(raw.get("branch_misses_color", base.branch_misses_color)),
    )

def load_config(path: Optional[str]) -> AppCfg:
    """Load a YAML config; absent keys keep their defaults. ``None`` means all defaults."""
    if path is None:
        return default_config()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise PerfStatIOError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise MalformedInputError(f"invalid config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise MalformedInputError(f"config {path} must be a mapping")

    ch_raw = _section(raw, "chart")
    chart = ChartCfg(
        x_label=str(ch_raw.get("x_label", ChartCfg.x_label)),
        time_misses_y_max=_as_float(ch_raw, "time_misses_y_max", ChartCfg.time_misses_y_max),
        instructions_max_ticks=_as_int(ch_raw, "instructions_max_ticks", ChartCfg.instructions_max_ticks),
        time_misses_max_ticks=_as_int(ch_raw, "time_misses_max_ticks", ChartCfg.time_misses_max_ticks),
        dpi=_as_int(ch_raw, "dpi", ChartCfg.dpi),
        width_in=_as_float(ch_raw, "width_in", ChartCfg.width_in),
        height_in=_as_float(ch_raw, "height_in", ChartCfg.height_in),
    )
    try:
        log = LoggingCfg(**_section(raw, "logging"))
    except TypeError as e:
        raise MalformedInputError(f"invalid logging section in {path}: {e}") from e
    return AppCfg(
        branching=_variant_from(_section(raw, "branching"), default_branching()),
        branchless=_variant_from(_section(raw, "branchless"), default_branchless()),
        chart=chart,
        logging=log,
    )

def as_dict(cfg: AppCfg) -> Dict[str, Any]:
    return dataclasses.asdict(cfg)
