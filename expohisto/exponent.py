import math

from expohisto.errors import IndexOverflowError, IndexUnderflowError
from expohisto.float_bits import (
    CheckValue,
    DecomposeBits,
    MAX_NORMAL_EXPONENT,
    MIN_SUBNORMAL_EXPONENT,
    MIN_VALUE,
)
from expohisto.scale import CheckIndex, CheckScale, MIN_SCALE

#===================================================================================================
# Exponent mapping, scale <= 0
#===================================================================================================

class ExponentMapping:
    """Maps values to buckets of base 2^(2^-scale) using the binary exponent only.

    Each bucket spans 2^-scale adjacent binary exponents and includes its lower
    boundary, so MapToIndex(2^e) == e >> -scale.
    """

    __slots__ = ('scale', 'shift', 'minIndex', 'maxIndex')

    def __init__(self, scale):
        self.scale = CheckScale(scale, MIN_SCALE, 0)
        self.shift = -self.scale
        self.minIndex = MIN_SUBNORMAL_EXPONENT >> self.shift
        self.maxIndex = MAX_NORMAL_EXPONENT >> self.shift

    def __repr__(self):
        return 'ExponentMapping(scale={})'.format(self.scale)

    def Scale(self):
        return self.scale

    def MapToIndex(self, value):
        e, _ = DecomposeBits(CheckValue(value))
        # Arithmetic shift: -1 >> 1 == -1.
        return e >> self.shift

    def LowerBoundary(self, index):
        index = CheckIndex(index)
        if index < self.minIndex:
            raise IndexUnderflowError("index {} is below {} at scale {}".format(index, self.minIndex, self.scale))
        if index > self.maxIndex:
            raise IndexOverflowError("index {} is above {} at scale {}".format(index, self.maxIndex, self.scale))

        e = index << self.shift
        if e < MIN_SUBNORMAL_EXPONENT:
            # The bottom bucket starts below the smallest subnormal.
            return MIN_VALUE
        return math.ldexp(1.0, e)
