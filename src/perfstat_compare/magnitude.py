from __future__ import annotations
import math
from enum import IntEnum

from .errors import MagnitudeRangeError


class Magnitude(IntEnum):
    """Decimal decade buckets, valued by their exponent so they order naturally.

    Two magnitudes compare by exponent, so ``min(a, b)`` picks the smaller
    shared display unit for a chart.
    """
    EMINUS9 = -9
    EMINUS6 = -6
    EMINUS3 = -3
    E0 = 0
    E3 = 3
    E6 = 6
    E9 = 9
    E12 = 12
    E15 = 15
    E18 = 18
    E21 = 21
    E24 = 24
    E27 = 27

    @property
    def exponent(self) -> int:
        return int(self.value)

    @property
    def suffix(self) -> str:
        # unit bucket carries no suffix in axis labels
        if self is Magnitude.E0:
            return ""
        return f"E{self.value}"

    def scale(self) -> float:
        return 10.0 ** self.value

    def __str__(self) -> str:
        return self.suffix

    @classmethod
    def classify(cls, num: float) -> "Magnitude":
        """Return the bucket whose exponent is the largest multiple of 3 <= floor(log10(|num|)).

        0 maps to E0. Exponents >= 27 collapse into E27; anything below 1e-9
        raises MagnitudeRangeError.
        """
        if num == 0:
            return cls.E0
        exponent = math.floor(math.log10(abs(num)))
        if exponent >= 27:
            return cls.E27
        if exponent < -9:
            raise MagnitudeRangeError(f"value out of supported range: num={num!r} (exponent {exponent})")
        # floor to a multiple of 3, e.g. 5 -> 3, -1 -> -3
        return cls(3 * (exponent // 3))


def classify(num: float) -> Magnitude:
    return Magnitude.classify(num)


def shared_magnitude(*mags: Magnitude) -> Magnitude:
    """Smallest of the given magnitudes; used as the common unit for a chart."""
    if not mags:
        raise ValueError("shared_magnitude() needs at least one magnitude")
    return min(mags)
