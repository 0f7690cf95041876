import math
from typing import List, Tuple

import pytest
from hypothesis import given

from expohisto.errors import (
    ConfigurationError,
    IndexOverflowError,
    IndexUnderflowError,
    InvalidArgumentError,
    OutOfRangeError,
)
from expohisto.exponent import ExponentMapping
from expohisto.float_bits import MAX_VALUE, MIN_VALUE
from tests.strategies import exponent_scales, invalid_values, values


def check_mapping(m: ExponentMapping, expected: List[Tuple[float, int]]) -> None:
    for value, index in expected:
        assert m.MapToIndex(value) == index, "value: {!r}".format(value)


def test_exponent_mapping_zero() -> None:
    check_mapping(
        ExponentMapping(0),
        [
            (4, 2),
            (3, 1),
            (2, 1),
            (1.5, 0),
            (1, 0),
            (0.75, -1),
            (0.5, -1),
            (0.25, -2),
        ],
    )


def test_exponent_mapping_neg_one() -> None:
    check_mapping(
        ExponentMapping(-1),
        [
            (16, 2),
            (15, 1),
            (9, 1),
            (8, 1),
            (5, 1),
            (4, 1),
            (3, 0),
            (2, 0),
            (1.5, 0),
            (1, 0),
            (0.75, -1),
            (0.5, -1),
            (0.25, -1),
            (0.20, -2),
            (0.13, -2),
            (0.125, -2),
            (0.10, -2),
            (0.0625, -2),
            (0.06, -3),
        ],
    )


def test_exponent_mapping_neg_four() -> None:
    m = ExponentMapping(-4)
    for value, expected in [
        (float(0x1), 0),
        (float(0x10), 0),
        (float(0x10000), 1),  # Base == 2**16
        (float(0x100000000), 2),
        (1 / float(0x10), -1),
        (1 / float(0x10000), -1),
        (1 / float(0x100000), -2),
        (math.ldexp(1.0, 1023), 63),
        (math.ldexp(1.0, 1008), 63),
        (math.ldexp(1.0, 1007), 62),
        (math.ldexp(1.0, -1072), -67),
        (math.ldexp(1.0, -1057), -67),
        (math.ldexp(1.0, -1056), -66),
        # Min and subnormal values
        (math.ldexp(1.0, -1074), -68),
        (math.ldexp(1.0, -1073), -68),
    ]:
        index = m.MapToIndex(value)
        assert index == expected, "value: {!r}".format(value)

        lb = m.LowerBoundary(index)
        assert lb != 0.0
        assert math.isfinite(lb)
        assert lb <= value
        if index < m.maxIndex:
            ub = m.LowerBoundary(index + 1)
            assert ub != 0.0
            assert math.isfinite(ub)
            assert ub > value


@pytest.mark.parametrize("scale", range(-10, 1))
def test_lower_boundary_is_power_of_two(scale: int) -> None:
    m = ExponentMapping(scale)
    assert m.Scale() == scale
    for index in range(m.minIndex + 1, m.maxIndex + 1):
        assert m.LowerBoundary(index) == math.ldexp(1.0, index << -scale)
        # A boundary opens its own bucket.
        assert m.MapToIndex(m.LowerBoundary(index)) == index


@pytest.mark.parametrize("scale", range(-10, 1))
def test_index_range(scale: int) -> None:
    m = ExponentMapping(scale)
    assert m.MapToIndex(MIN_VALUE) == m.minIndex
    assert m.MapToIndex(MAX_VALUE) == m.maxIndex
    assert m.LowerBoundary(m.minIndex) > 0.0
    assert m.LowerBoundary(m.maxIndex) <= MAX_VALUE

    with pytest.raises(IndexUnderflowError):
        m.LowerBoundary(m.minIndex - 1)
    with pytest.raises(IndexOverflowError):
        m.LowerBoundary(m.maxIndex + 1)
    with pytest.raises(OutOfRangeError):
        m.LowerBoundary(-(2**63))


@given(scale=exponent_scales, value=values)
def test_containment(scale: int, value: float) -> None:
    m = ExponentMapping(scale)
    index = m.MapToIndex(value)
    assert m.minIndex <= index <= m.maxIndex
    assert m.LowerBoundary(index) <= value
    if index < m.maxIndex:
        assert value < m.LowerBoundary(index + 1)


@given(scale=exponent_scales, a=values, b=values)
def test_monotonic(scale: int, a: float, b: float) -> None:
    m = ExponentMapping(scale)
    if a > b:
        a, b = b, a
    assert m.MapToIndex(a) <= m.MapToIndex(b)


@pytest.mark.parametrize("value", invalid_values)
def test_invalid_values(value: float) -> None:
    with pytest.raises(InvalidArgumentError):
        ExponentMapping(0).MapToIndex(value)


def test_invalid_index() -> None:
    m = ExponentMapping(-2)
    for index in [1.0, "1", None, True]:
        with pytest.raises(InvalidArgumentError):
            m.LowerBoundary(index)


@pytest.mark.parametrize("scale", [1, 20, -11, 0.5, "0", None])
def test_invalid_scale(scale) -> None:
    with pytest.raises(ConfigurationError):
        ExponentMapping(scale)
