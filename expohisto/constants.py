import logging
import math
import os
import re
import threading
import time
from array import array

from expohisto.config import GetSettings
from expohisto.errors import ConfigurationError
from expohisto.float_bits import BitsToFloat, EXPONENT_BIAS, HIDDEN_BIT, MANTISSA_MASK, MANTISSA_WIDTH
from expohisto.scale import CheckScale, MAX_SCALE

logger = logging.getLogger(__name__)

#===================================================================================================
# Exact arithmetic
#===================================================================================================

def PowPow2(x, scale):
    """Returns x^(2^scale) by repeated squaring."""
    assert scale >= 0
    for _ in range(scale):
        x = x * x
    return x

def Target(scale, k):
    # 2^(52 * 2^scale + k) == (2^52 * 2^(k/2^scale))^(2^scale)
    return 1 << (MANTISSA_WIDTH * (1 << scale) + k)

def CheckThreshold(scale, k, threshold):
    """Tests that threshold + 2^52 is the smallest integer M with M^(2^scale) >= 2^(52 * 2^scale + k)."""

    assert 0 <= k < (1 << scale)
    if threshold < 0 or threshold > MANTISSA_MASK:
        return False
    normed = threshold + HIDDEN_BIT
    target = Target(scale, k)
    return PowPow2(normed, scale) >= target and PowPow2(normed - 1, scale) < target

def RefineThreshold(scale, k, normed):
    """Moves normed onto the smallest integer M with M^(2^scale) >= 2^(52 * 2^scale + k)."""

    target = Target(scale, k)
    while True:
        candidate = PowPow2(normed, scale)
        if candidate == target:
            # Only for k = 0.
            break
        if candidate < target:
            normed += 1
            continue
        # (normed - 1)^(2^scale) must fall below the target, otherwise step down.
        if PowPow2(normed - 1, scale) >= target:
            normed -= 1
            continue
        break
    assert normed >= HIDDEN_BIT
    assert normed < 2 * HIDDEN_BIT
    return normed

#===================================================================================================
# Fixed-point derivation
#===================================================================================================

# Fractional bits of the fixed-point roots.
PRECISION = 128

def ComputeRoots(scale, bits=PRECISION):
    """Returns roots[t] for t in [0, scale], an under-estimate of 2^(1/2^t) * 2^bits
    by at most t units."""

    roots = [2 << bits]
    for t in range(1, scale + 1):
        roots.append(math.isqrt(roots[-1] << bits))
    return roots

def ErrorBound(scale):
    # A product of at most scale roots, each short by at most t units and
    # each multiplication truncating once, falls short of the exact value
    # times 2^PRECISION by less than scale * (scale + 3) units.
    return scale * (scale + 3) + 1

def ThresholdFromEstimate(scale, k, x, err):
    """Turns x, an under-estimate of 2^(k/2^scale) * 2^PRECISION by at most err,
    into the table entry for k."""

    if k == 0:
        return 0

    shift = PRECISION - MANTISSA_WIDTH
    lo = x >> shift
    if ((x + err) >> shift) == lo:
        # 2^(52 + k/2^scale) is irrational, so the smallest integer above it
        # is its floor plus one.
        normed = lo + 1
    else:
        logger.debug("scale %d entry %d is within %d units of an integer, refining", scale, k, err)
        normed = RefineThreshold(scale, k, lo)

    assert normed > HIDDEN_BIT
    assert normed < 2 * HIDDEN_BIT
    return normed - HIDDEN_BIT

def ComputeThreshold(scale, k):
    assert scale >= 1
    assert 0 <= k < (1 << scale)

    roots = ComputeRoots(scale)
    # 2^(k/2^scale) is the product of 2^(1/2^(scale - j)) over the bits j of k.
    x = 1 << PRECISION
    for j in range(scale):
        if (k >> j) & 1:
            x = (x * roots[scale - j]) >> PRECISION
    return ThresholdFromEstimate(scale, k, x, ErrorBound(scale))

def ComputeTable(scale):
    """Derives the 2^scale thresholds of a scale exactly, in integer arithmetic."""

    assert scale >= 1
    assert scale <= MAX_SCALE

    roots = ComputeRoots(scale)
    err = ErrorBound(scale)

    # After step j, values[k] approximates 2^(k/2^scale) for every k < 2^(j+1).
    values = [1 << PRECISION]
    for j in range(scale):
        root = roots[scale - j]
        values += [(v * root) >> PRECISION for v in values]

    return array('Q', (ThresholdFromEstimate(scale, k, x, err) for k, x in enumerate(values)))

#===================================================================================================
# On-disk format
#===================================================================================================

def ToHexString(n, bits):
    assert bits > 0
    p = (bits + (4 - 1)) // 4       # Round up to four bits per hexit
    assert 4*p >= n.bit_length()
    return '0x{:0{}X}'.format(n, p)

def FormatTable(scale, thresholds):
    size = 1 << scale
    assert len(thresholds) == size

    lines = [
        '# Exponential histogram constants for scale {}.'.format(scale),
        '#',
        '# Entry k is the 52-bit significand of the smallest double that is not',
        '# below 2**(k/{}). See OpenTelemetry OTEP 149.'.format(size),
        '',
        'SCALE = {}'.format(scale),
        '',
        'EXPONENTIAL_CONSTANTS = (',
    ]
    for k, threshold in enumerate(thresholds):
        value = BitsToFloat((EXPONENT_BIAS << MANTISSA_WIDTH) | threshold)
        lines.append('    {},  # 2**({}/{}) == {:.16g}'.format(ToHexString(threshold, MANTISSA_WIDTH), k, size, value))
    lines.append(')')
    return '\n'.join(lines) + '\n'

_SCALE_LINE = re.compile(r'^SCALE\s*=\s*(-?\d+)\s*$', re.MULTILINE)
_ENTRY_LINE = re.compile(r'^\s*0x([0-9A-Fa-f]+)\s*,', re.MULTILINE)

def ReadTable(text):
    """Parses the output of FormatTable, returning (scale, thresholds)."""

    match = _SCALE_LINE.search(text)
    if match is None:
        raise ConfigurationError("table has no SCALE line")
    scale = CheckScale(int(match.group(1)), 1, MAX_SCALE)

    thresholds = array('Q')
    for entry in _ENTRY_LINE.finditer(text):
        value = int(entry.group(1), 16)
        if value > MANTISSA_MASK:
            raise ConfigurationError("table entry {} exceeds 52 bits".format(entry.group(0).strip()))
        thresholds.append(value)

    CheckTableShape(scale, thresholds)
    return scale, thresholds

def CheckTableShape(scale, thresholds):
    size = 1 << scale
    if len(thresholds) != size:
        raise ConfigurationError("table for scale {} has {} entries, want {}".format(scale, len(thresholds), size))
    if thresholds[0] != 0:
        raise ConfigurationError("table for scale {} does not start at 0".format(scale))
    for k in range(1, size):
        if thresholds[k] <= thresholds[k - 1]:
            raise ConfigurationError("table for scale {} is not increasing at entry {}".format(scale, k))
    if thresholds[size - 1] > MANTISSA_MASK:
        raise ConfigurationError("table for scale {} exceeds 52 bits".format(scale))

def LoadTable(path):
    with open(path, 'r', encoding='ascii') as f:
        return ReadTable(f.read())

def TableFileName(scale):
    return 'scale_{}.py'.format(scale)

#===================================================================================================
# Process-wide tables
#===================================================================================================

_tables = {}
_tablesLock = threading.Lock()

def GetTable(scale, settings=None):
    """Returns the read-only thresholds of a scale, building them on first use."""

    scale = CheckScale(scale, 1, MAX_SCALE)
    table = _tables.get(scale)
    if table is not None:
        return table

    with _tablesLock:
        table = _tables.get(scale)
        if table is None:
            table = memoryview(BuildTable(scale, settings or GetSettings())).toreadonly()
            _tables[scale] = table
    return table

def BuildTable(scale, settings):
    if settings.table_dir is not None:
        path = os.path.join(settings.table_dir, TableFileName(scale))
        if os.path.exists(path):
            loaded, thresholds = LoadTable(path)
            if loaded != scale:
                raise ConfigurationError("{} holds the table for scale {}, want {}".format(path, loaded, scale))
            logger.info("Loaded constants for scale %d from %s", scale, path)
            return thresholds

    start = time.perf_counter()
    thresholds = ComputeTable(scale)
    logger.debug("Computed %d constants for scale %d in %.3fs", len(thresholds), scale, time.perf_counter() - start)
    return thresholds
