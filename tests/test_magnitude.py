import pytest

from perfstat_compare.errors import MagnitudeRangeError
from perfstat_compare.magnitude import Magnitude, classify, shared_magnitude


def test_bucket_boundaries():
    assert classify(0) is Magnitude.E0
    assert classify(1) is Magnitude.E0
    assert classify(500) is Magnitude.E0
    assert classify(999) is Magnitude.E0
    assert classify(1000) is Magnitude.E3
    assert classify(1_000_000) is Magnitude.E6
    assert classify(2.5e9) is Magnitude.E9
    assert classify(0.5) is Magnitude.EMINUS3
    assert classify(1e-9) is Magnitude.EMINUS9


def test_negative_values_use_absolute_value():
    assert classify(-4200) is Magnitude.E3


def test_large_values_collapse_into_e27():
    assert classify(1e27) is Magnitude.E27
    assert classify(1e40) is Magnitude.E27


def test_below_range_is_an_error():
    with pytest.raises(MagnitudeRangeError):
        classify(1e-10)


def test_scale_brackets_value():
    mags = list(Magnitude)
    for lo, hi in zip(mags, mags[1:]):
        for x in (1.5 * lo.scale(), 2 * lo.scale(), 0.999 * hi.scale()):
            m = classify(x)
            assert m is lo
            assert m.scale() <= x
            assert x < hi.scale()


def test_scaled_value_lands_in_unit_bucket():
    for x in (7, 4321, 123_456_789, 5.5e15, 0.042):
        scaled = x / classify(x).scale()
        assert 1 <= scaled < 1000
        assert classify(scaled) is Magnitude.E0


def test_ordering_and_shared_magnitude():
    assert Magnitude.E6 < Magnitude.E9
    assert shared_magnitude(Magnitude.E9, Magnitude.E6) is Magnitude.E6
    assert shared_magnitude(Magnitude.E0) is Magnitude.E0


def test_suffix():
    assert str(Magnitude.E0) == ""
    assert str(Magnitude.E9) == "E9"
    assert str(Magnitude.EMINUS3) == "E-3"
