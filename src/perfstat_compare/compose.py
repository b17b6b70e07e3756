from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .errors import LengthMismatchError, MissingSweepValueError
from .magnitude import Magnitude

Point = Tuple[float, float]


def scale_values(values: Iterable[float], magnitude: Magnitude) -> List[float]:
    s = magnitude.scale()
    return [v / s for v in values]


def scale_keyed(by_x: Mapping, magnitude: Magnitude) -> Dict:
    s = magnitude.scale()
    return {x: v / s for x, v in by_x.items()}


def sum_series(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Element-wise a + b; unequal lengths mean misaligned runs and raise."""
    if len(a) != len(b):
        raise LengthMismatchError(f"cannot sum series of length {len(a)} and {len(b)}")
    return [x + y for x, y in zip(a, b)]


def pair(x_values: Sequence, ys: Sequence[float]) -> List[Point]:
    """Positional pairing: the i-th x with the i-th y."""
    if len(x_values) != len(ys):
        raise LengthMismatchError(f"{len(x_values)} x values but {len(ys)} y values")
    return [(float(x), float(y)) for x, y in zip(x_values, ys)]


def pair_by_x(x_values: Sequence, by_x: Mapping) -> List[Point]:
    """Pair every x with its keyed value, in ``x_values`` order."""
    out: List[Point] = []
    for x in x_values:
        if x not in by_x:
            raise MissingSweepValueError(f"no value recorded for x={x}")
        out.append((float(x), float(by_x[x])))
    return out


def total_series(x_values: Sequence, core: Sequence[float], atom: Sequence[float]) -> List[Point]:
    """(x, core + atom) for a composite "total" line."""
    return pair(x_values, sum_series(core, atom))


def total_by_x(x_values: Sequence, core: Mapping, atom: Mapping) -> List[Point]:
    core_pts = pair_by_x(x_values, core)
    atom_pts = pair_by_x(x_values, atom)
    return total_series(x_values, [y for _, y in core_pts], [y for _, y in atom_pts])


def drop_zero(points: Iterable[Point]) -> List[Point]:
    """Remove points whose y is 0, e.g. atom counters the hardware never populated."""
    return [(x, y) for x, y in points if y != 0.0]
