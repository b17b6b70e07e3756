from __future__ import annotations
import json
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import MalformedInputError, PerfStatIOError

NOT_COUNTED = "<not counted>"

# JSON field name -> CounterRecord attribute
_FIELDS = {
    "counter-value": "counter_value",
    "unit": "unit",
    "event": "event",
    "variance": "variance",
    "event-runtime": "event_runtime",
    "pcnt-running": "pcnt_running",
    "metric-value": "metric_value",
    "metric-unit": "metric_unit",
}
_OPTIONAL = {"variance"}


@dataclass(frozen=True)
class CounterRecord:
    """One perf-stat counter reading, as exported by ``perf stat -j``."""
    counter_value: str
    unit: str
    event: str
    variance: Optional[float]
    event_runtime: int
    pcnt_running: float
    metric_value: str
    metric_unit: str

    @property
    def not_counted(self) -> bool:
        return self.counter_value == NOT_COUNTED

    def matches(self, event_filter: str) -> bool:
        # substring match: "cpu_core/instructions" selects "cpu_core/instructions:u/"
        return event_filter in self.event

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "CounterRecord":
        if not isinstance(obj, dict):
            raise MalformedInputError(f"expected a JSON object, got {type(obj).__name__}")
        kwargs: Dict[str, Any] = {}
        for key, attr in _FIELDS.items():
            if key not in obj:
                if key in _OPTIONAL:
                    kwargs[attr] = None
                    continue
                raise MalformedInputError(f"missing field '{key}' in record {obj!r}")
            kwargs[attr] = obj[key]
        try:
            if kwargs["variance"] is not None:
                kwargs["variance"] = float(kwargs["variance"])
            kwargs["event_runtime"] = int(kwargs["event_runtime"])
            kwargs["pcnt_running"] = float(kwargs["pcnt_running"])
        except (TypeError, ValueError) as e:
            raise MalformedInputError(f"bad numeric field in record {obj!r}: {e}") from e
        for attr in ("counter_value", "unit", "event", "metric_value", "metric_unit"):
            if not isinstance(kwargs[attr], str):
                raise MalformedInputError(f"field '{attr}' must be a string in record {obj!r}")
        return cls(**kwargs)


def parse_records(text: str) -> List[CounterRecord]:
    """Decode a JSON array of perf-stat objects (already repaired) into records."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise MalformedInputError(f"expected a JSON array of records, got {type(raw).__name__}")
    return [CounterRecord.from_dict(o) for o in raw]


def read_text(path) -> str:
    p = pathlib.Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except OSError as e:
        raise PerfStatIOError(f"cannot read {p}: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"{p} is not valid UTF-8: {e}") from e


def load_run(path) -> List[CounterRecord]:
    try:
        return parse_records(read_text(path))
    except MalformedInputError as e:
        raise MalformedInputError(f"{path}: {e}") from e


def load_runs(paths: Iterable) -> List[List[CounterRecord]]:
    """One run per file, in the order the paths are given."""
    return [load_run(p) for p in paths]


def sweep_file(json_dir, prefix: str, x) -> pathlib.Path:
    return pathlib.Path(json_dir) / f"{prefix}{x}.json"


def sweep_files(json_dir, prefix: str, x_values: Sequence) -> List[pathlib.Path]:
    """Resolve ``<json_dir>/<prefix><x>.json`` for every x, failing on the first missing one."""
    d = pathlib.Path(json_dir)
    if not d.is_dir():
        raise PerfStatIOError(f"{d} does not exist or is not a directory")
    out: List[pathlib.Path] = []
    for x in x_values:
        f = sweep_file(d, prefix, x)
        if not f.exists():
            raise PerfStatIOError(
                f"{f} does not exist - expected one file per x value, e.g. {prefix}{x}.json"
            )
        out.append(f)
    return out
