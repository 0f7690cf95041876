import struct

import numpy as np

from expohisto.errors import InvalidArgumentError

#===================================================================================================
# IEEE-754 binary64
#===================================================================================================

MANTISSA_WIDTH = 52
EXPONENT_WIDTH = 11

EXPONENT_BIAS = 2**(EXPONENT_WIDTH - 1) - 1
EXPONENT_MASK = 2**EXPONENT_WIDTH - 1
MANTISSA_MASK = 2**MANTISSA_WIDTH - 1
HIDDEN_BIT = 2**MANTISSA_WIDTH
SIGN_BIT = 2**63

MIN_NORMAL_EXPONENT = 1 - EXPONENT_BIAS                         # -1022
MAX_NORMAL_EXPONENT = EXPONENT_MASK - 1 - EXPONENT_BIAS         #  1023
MIN_SUBNORMAL_EXPONENT = MIN_NORMAL_EXPONENT - MANTISSA_WIDTH   # -1074

MIN_VALUE = float(np.finfo(np.float64).smallest_subnormal)
MAX_VALUE = float(np.finfo(np.float64).max)

INFINITY_BITS = EXPONENT_MASK << MANTISSA_WIDTH

_DOUBLE = struct.Struct('<d')
_UINT64 = struct.Struct('<Q')

def FloatToBits(value):
    return _UINT64.unpack(_DOUBLE.pack(value))[0]

def BitsToFloat(bits):
    assert bits >= 0
    assert bits < 2**64
    return _DOUBLE.unpack(_UINT64.pack(bits))[0]

def GetSign(value):
    return FloatToBits(value) >> 63

def GetBiasedExponent(value):
    return (FloatToBits(value) >> MANTISSA_WIDTH) & EXPONENT_MASK

def GetMantissa(value):
    return FloatToBits(value) & MANTISSA_MASK

def IsPositiveFinite(value):
    # Zero, negatives (sign bit set), infinity and NaN all fall outside.
    return 0 < FloatToBits(value) < INFINITY_BITS

def IsPowerOfTwo(value):
    bits = FloatToBits(value)
    return (bits & MANTISSA_MASK) == 0 and ((bits >> MANTISSA_WIDTH) & EXPONENT_MASK) > 0

#---------------------------------------------------------------------------------------------------
# Normalized decomposition
#---------------------------------------------------------------------------------------------------

def DecomposeBits(bits):
    """Splits the bits of a positive finite double into (e, m) such that the value
    equals (1 + m / 2^52) * 2^e, shifting subnormals into normal position."""

    assert 0 < bits < INFINITY_BITS

    biased = bits >> MANTISSA_WIDTH
    mantissa = bits & MANTISSA_MASK
    if biased != 0:
        return biased - EXPONENT_BIAS, mantissa

    # Subnormal: value = mantissa * 2^-1074, leading bit at position p.
    p = mantissa.bit_length() - 1
    return p + MIN_SUBNORMAL_EXPONENT, (mantissa << (MANTISSA_WIDTH - p)) & MANTISSA_MASK

def GetNormalizedExponent(value):
    return DecomposeBits(FloatToBits(value))[0]

def GetNormalizedMantissa(value):
    return DecomposeBits(FloatToBits(value))[1]

#---------------------------------------------------------------------------------------------------
# Assembly
#---------------------------------------------------------------------------------------------------

def SetExponent(significand, exponent):
    """Returns significand * 2^(exponent - 52) for a 53-bit significand.

    Exact for normal results. Below 2^-1022 the result is rounded up to the
    subnormal grid, so it never falls below the real number it stands for."""

    assert significand >= HIDDEN_BIT
    assert significand < 2 * HIDDEN_BIT
    assert exponent <= MAX_NORMAL_EXPONENT

    if exponent >= MIN_NORMAL_EXPONENT:
        return BitsToFloat(((exponent + EXPONENT_BIAS) << MANTISSA_WIDTH) | (significand & MANTISSA_MASK))

    shift = MIN_NORMAL_EXPONENT - exponent
    assert shift <= MANTISSA_WIDTH + 1
    # Ceil(significand / 2^shift); a carry into bit 52 yields exactly 2^-1022.
    return BitsToFloat(-(-significand >> shift))

def CheckValue(value):
    """Returns the bits of value, which must be a positive finite double."""

    try:
        bits = FloatToBits(value)
    except (struct.error, OverflowError):
        raise InvalidArgumentError("value must be a float, got {!r}".format(value)) from None
    if not 0 < bits < INFINITY_BITS:
        raise InvalidArgumentError("value must be positive and finite, got {!r}".format(value))
    return bits
