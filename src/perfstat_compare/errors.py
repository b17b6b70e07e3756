from __future__ import annotations


class PerfStatError(Exception):
    """Base class for every failure the pipeline reports to the caller."""


class MalformedInputError(PerfStatError):
    """Document is not valid JSON after repair, or an object does not match the record schema."""


class CounterParseError(PerfStatError, ValueError):
    pass


class EmptyAggregationError(PerfStatError):
    pass


class LengthMismatchError(PerfStatError, ValueError):
    pass


class MissingSweepValueError(PerfStatError, LookupError):
    pass


class MagnitudeRangeError(PerfStatError, ArithmeticError):
    """Value is below the smallest supported decade (1e-9)."""


class PerfStatIOError(PerfStatError, OSError):
    pass
