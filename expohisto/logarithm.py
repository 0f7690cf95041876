import math

from expohisto.errors import IndexOverflowError, IndexUnderflowError
from expohisto.float_bits import (
    BitsToFloat,
    CheckValue,
    DecomposeBits,
    EXPONENT_BIAS,
    HIDDEN_BIT,
    MANTISSA_WIDTH,
    MAX_NORMAL_EXPONENT,
    MIN_SUBNORMAL_EXPONENT,
    MIN_VALUE,
    SetExponent,
)
from expohisto.scale import CheckIndex, CheckScale, MAX_SCALE

#===================================================================================================
# Logarithm mapping, scale > 0
#===================================================================================================

LN_2 = math.log(2)

class LogarithmMapping:
    __slots__ = ('scale', 'subBucketMask', 'scaleFactor', 'inverseScaleFactor', 'minIndex', 'maxIndex')

    def __init__(self, scale):
        self.scale = CheckScale(scale, 1, MAX_SCALE)
        self.subBucketMask = (1 << self.scale) - 1
        # 2^scale / ln(2) and its inverse; both multiply exactly by 2^scale.
        self.scaleFactor = math.ldexp(1.0 / LN_2, self.scale)
        self.inverseScaleFactor = math.ldexp(LN_2, -self.scale)
        # Index of 2^-1074 and of the largest finite double.
        self.minIndex = (MIN_SUBNORMAL_EXPONENT << self.scale) - 1
        self.maxIndex = ((MAX_NORMAL_EXPONENT + 1) << self.scale) - 1

    def __repr__(self):
        return 'LogarithmMapping(scale={})'.format(self.scale)

    def Scale(self):
        return self.scale

    def MapToIndex(self, value):
        bits = CheckValue(value)
        e, m = DecomposeBits(bits)
        if m == 0:
            # Exact powers of two are boundaries, which log() may round either way.
            return (e << self.scale) - 1

        # log(value) * scaleFactor == e * 2^scale + log(x) * scaleFactor with
        # x = value / 2^e in (1, 2). Taking the logarithm of x alone keeps the
        # rounding error far below one bucket and lets the sub-bucket be
        # clamped to [0, 2^scale), which is exact next to both powers of two.
        x = BitsToFloat((EXPONENT_BIAS << MANTISSA_WIDTH) | m)
        k = math.floor(math.log(x) * self.scaleFactor)
        if k < 0:
            k = 0
        elif k > self.subBucketMask:
            k = self.subBucketMask
        return (e << self.scale) + k

    def LowerBoundary(self, index):
        index = CheckIndex(index)
        if index < self.minIndex:
            raise IndexUnderflowError("index {} is below {} at scale {}".format(index, self.minIndex, self.scale))
        if index > self.maxIndex:
            raise IndexOverflowError("index {} is above {} at scale {}".format(index, self.maxIndex, self.scale))

        e = index >> self.scale
        k = index & self.subBucketMask
        if k == 0:
            return SetExponent(HIDDEN_BIT, e)

        # exp(index / scaleFactor) == 2^e * exp(k / scaleFactor), where the
        # second factor lies in (1, 2) and carries no rounding from e.
        significand = int(math.ldexp(math.exp(k * self.inverseScaleFactor), MANTISSA_WIDTH))
        significand = max(HIDDEN_BIT + 1, min(significand, 2 * HIDDEN_BIT - 1))
        lower = SetExponent(significand, e)

        # The estimate is off by a few ulps. The boundary is the smallest
        # double that MapToIndex puts at or above index.
        while self.MapToIndex(lower) < index:
            lower = math.nextafter(lower, math.inf)
        while lower > MIN_VALUE:
            below = math.nextafter(lower, 0.0)
            if self.MapToIndex(below) < index:
                break
            lower = below
        return lower
