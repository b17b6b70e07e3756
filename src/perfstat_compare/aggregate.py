from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .errors import CounterParseError, EmptyAggregationError, LengthMismatchError
from .magnitude import Magnitude
from .records import CounterRecord

CORE_INSTRUCTIONS = "cpu_core/instructions"
ATOM_INSTRUCTIONS = "cpu_atom/instructions"
CORE_BRANCH_MISSES = "cpu_core/branch-misses"
DURATION = "duration_time"

NS_PER_S = 1_000_000_000

U64_MAX = 2**64 - 1

# same rules as an unsigned 64-bit parse: optional "+", ASCII digits
_UNSIGNED = re.compile(r"\+?[0-9]+")

Runs = Sequence[Sequence[CounterRecord]]
Extractor = Callable[[Runs, str], List[float]]


@dataclass(frozen=True)
class AggregatedSeries:
    values: List[float]
    magnitude: Magnitude  # classification of the smallest value
    max_value: int

    def scaled(self, magnitude: Optional[Magnitude] = None) -> List[float]:
        m = magnitude if magnitude is not None else self.magnitude
        return [v / m.scale() for v in self.values]


def matching(runs: Runs, event_filter: str) -> Iterator[CounterRecord]:
    """Records whose event contains ``event_filter``, run order then record order."""
    for run in runs:
        for rec in run:
            if rec.matches(event_filter):
                yield rec


def truncate_counter(text: str) -> int:
    """Integer part of a counter value; "1234.999" -> 1234 (never rounded)."""
    head = text.split(".", 1)[0]
    if not _UNSIGNED.fullmatch(head):
        raise CounterParseError(f"counter value {text!r} is not an unsigned number")
    v = int(head)
    if v > U64_MAX:
        raise CounterParseError(f"counter value {text!r} does not fit in 64 bits")
    return v


def decode_counter(rec: CounterRecord) -> int:
    if rec.not_counted:
        return 0
    return truncate_counter(rec.counter_value)


def counter_values(runs: Runs, event_filter: str) -> List[int]:
    return [decode_counter(r) for r in matching(runs, event_filter)]


def aggregate(runs: Runs, event_filter: str, logger=None) -> AggregatedSeries:
    """Collect the integer counter values of every record matching ``event_filter``.

    Returns the values in encounter order together with the magnitude of the
    minimum and the raw maximum. Raises EmptyAggregationError when nothing matches.
    """
    vals = counter_values(runs, event_filter)
    if not vals:
        raise EmptyAggregationError(f"no record matched event filter {event_filter!r}")
    lo, hi = min(vals), max(vals)
    mag = Magnitude.classify(float(lo))
    if logger is not None:
        logger.write({"type": "debug", "msg": "aggregate", "data": {
            "filter": event_filter, "count": len(vals), "min": lo, "max": hi, "magnitude": mag.name,
        }})
    return AggregatedSeries(values=[float(v) for v in vals], magnitude=mag, max_value=hi)


def branch_miss_fractions(runs: Runs, event_filter: str = CORE_BRANCH_MISSES) -> List[float]:
    """Branch misses as a fraction of all branches (perf reports a percentage in metric-value)."""
    out: List[float] = []
    for rec in matching(runs, event_filter):
        if rec.not_counted:
            out.append(0.0)
            continue
        try:
            out.append(float(rec.metric_value) / 100.0)
        except ValueError as e:
            raise CounterParseError(f"metric value {rec.metric_value!r} of {rec.event} is not a number") from e
    return out


def durations_s(runs: Runs, event_filter: str = DURATION) -> List[float]:
    # duration_time is reported in ns
    return [decode_counter(r) / NS_PER_S for r in matching(runs, event_filter)]


def keyed_by_x(x_values: Sequence, runs: Runs, event_filter: str,
               extract: Extractor = counter_values) -> Dict:
    """Map each x to the single value its own run yields for ``event_filter``.

    Runs line up with ``x_values`` one to one. A run without a matching record
    leaves its x out of the result; a run with several is an error.
    """
    if len(x_values) != len(runs):
        raise LengthMismatchError(f"{len(x_values)} x values but {len(runs)} runs")
    out: Dict = {}
    for x, run in zip(x_values, runs):
        vals = extract([run], event_filter)
        if not vals:
            continue
        if len(vals) > 1:
            raise LengthMismatchError(
                f"run for x={x} has {len(vals)} records matching {event_filter!r}, expected one"
            )
        out[x] = float(vals[0])
    return out

