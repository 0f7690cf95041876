from bisect import bisect_right

from expohisto.constants import CheckTableShape, GetTable
from expohisto.errors import IndexOverflowError, IndexUnderflowError
from expohisto.float_bits import (
    CheckValue,
    DecomposeBits,
    HIDDEN_BIT,
    MAX_NORMAL_EXPONENT,
    MIN_SUBNORMAL_EXPONENT,
    SetExponent,
)
from expohisto.scale import CheckIndex, CheckScale, MAX_SCALE

#===================================================================================================
# Lookup-table mapping, scale > 0
#===================================================================================================

class LookupTableMapping:
    """Maps values to buckets of base 2^(2^-scale) using only the bits of the value.

    Within one binary exponent, the 2^scale sub-buckets are delimited by the
    thresholds of the constants table: a normalized mantissa m belongs to the
    sub-bucket k with table[k] <= m < table[k + 1]. Exact powers of two close
    the bucket below them, like in the logarithm mapping.
    """

    __slots__ = ('scale', 'subBucketMask', 'table', 'minIndex', 'maxIndex')

    def __init__(self, scale, table=None):
        self.scale = CheckScale(scale, 1, MAX_SCALE)
        self.subBucketMask = (1 << self.scale) - 1
        if table is None:
            table = GetTable(self.scale)
        else:
            CheckTableShape(self.scale, table)
        self.table = table
        self.minIndex = (MIN_SUBNORMAL_EXPONENT << self.scale) - 1
        self.maxIndex = ((MAX_NORMAL_EXPONENT + 1) << self.scale) - 1

    def __repr__(self):
        return 'LookupTableMapping(scale={})'.format(self.scale)

    def Scale(self):
        return self.scale

    def MapToIndex(self, value):
        e, m = DecomposeBits(CheckValue(value))
        if m == 0:
            return (e << self.scale) - 1
        # table[0] == 0 < m, so the search never returns 0.
        return (e << self.scale) + bisect_right(self.table, m) - 1

    def LowerBoundary(self, index):
        index = CheckIndex(index)
        if index < self.minIndex:
            raise IndexUnderflowError("index {} is below {} at scale {}".format(index, self.minIndex, self.scale))
        if index > self.maxIndex:
            raise IndexOverflowError("index {} is above {} at scale {}".format(index, self.maxIndex, self.scale))

        e = index >> self.scale
        k = index & self.subBucketMask
        return SetExponent(HIDDEN_BIT | self.table[k], e)
