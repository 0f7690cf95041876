"""Prints a table of constants for a lookup-table implementation of the
base-2 exponential histogram of OpenTelemetry OTEP 149.

Every entry is refined with exact integer arithmetic, which makes the
running time grow exponentially with the scale: the number of big-integer
operations per entry is O(2^scale). Scale 12 takes minutes of CPU time,
scale 16 takes CPU-days.

usage: python -m expohisto.generate SCALE > scale_SCALE.py
"""

import datetime
import decimal
import logging
import sys
import time
from array import array
from concurrent.futures import ProcessPoolExecutor, as_completed

from expohisto.config import GetSettings
from expohisto.constants import FormatTable, RefineThreshold
from expohisto.errors import ConfigurationError
from expohisto.float_bits import HIDDEN_BIT, MANTISSA_WIDTH
from expohisto.scale import CheckScale, MAX_SCALE

logger = logging.getLogger(__name__)

#===================================================================================================
# Entries
#===================================================================================================

def EstimateThreshold(scale, k, precision):
    """Returns about floor(2^(k/2^scale) * 2^52), computed as the scale-fold
    square root of 2^k in decimal arithmetic."""

    with decimal.localcontext() as ctx:
        ctx.prec = precision
        ctx.Emax = decimal.MAX_EMAX
        x = decimal.Decimal(2) ** k
        for _ in range(scale):
            x = x.sqrt()
        scaled = x * (2**MANTISSA_WIDTH)
        return int(scaled.to_integral_value(rounding=decimal.ROUND_FLOOR))

def GenerateSlice(scale, start, stop, precision):
    thresholds = []
    for k in range(start, stop):
        normed = RefineThreshold(scale, k, EstimateThreshold(scale, k, precision))
        thresholds.append(normed - HIDDEN_BIT)
    return start, thresholds

def Partition(size, count):
    count = max(1, min(size, count))
    bounds = [size * i // count for i in range(count + 1)]
    return list(zip(bounds[:-1], bounds[1:]))

#===================================================================================================
# Progress
#===================================================================================================

class Progress:
    def __init__(self, total, interval):
        self.total = total
        self.interval = interval
        self.finished = 0
        self.start = time.monotonic()
        self.lastReport = self.start

    def Add(self, count):
        self.finished += count
        now = time.monotonic()
        if now - self.lastReport < self.interval or self.finished >= self.total:
            return
        self.lastReport = now
        elapsed = now - self.start
        remaining = elapsed * (self.total - self.finished) / self.finished
        logger.info("%d @ %s: %.4f%% complete %s remaining...",
                    self.finished,
                    datetime.timedelta(seconds=round(elapsed)),
                    100.0 * self.finished / self.total,
                    datetime.timedelta(seconds=round(remaining)))

#===================================================================================================
# Generator
#===================================================================================================

def Generate(scale, settings=None):
    """Computes the 2^scale thresholds of a scale with the exact refinement."""

    settings = settings or GetSettings()
    scale = CheckScale(scale, 1, MAX_SCALE)
    size = 1 << scale

    workers = min(settings.worker_count(), size)
    slices = Partition(size, workers * settings.slices_per_worker)
    precision = settings.decimal_precision

    thresholds = array('Q', [0]) * size
    progress = Progress(size, settings.progress_interval)
    start = time.monotonic()

    if workers == 1:
        for lo, hi in slices:
            _, part = GenerateSlice(scale, lo, hi, precision)
            thresholds[lo:hi] = array('Q', part)
            progress.Add(len(part))
    else:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(GenerateSlice, scale, lo, hi, precision) for lo, hi in slices]
            for future in as_completed(futures):
                lo, part = future.result()
                thresholds[lo:lo + len(part)] = array('Q', part)
                progress.Add(len(part))

    logger.info("Generated %d constants for scale %d with %d worker(s) in %.1fs",
                size, scale, workers, time.monotonic() - start)
    return thresholds

#===================================================================================================
# Command line
#===================================================================================================

def Main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    usage = 'usage: expohisto-generate scale (an integer in [1, {}])'.format(MAX_SCALE)
    if len(argv) != 1:
        print(usage, file=sys.stderr)
        return 2
    try:
        scale = CheckScale(int(argv[0], 10), 1, MAX_SCALE)
    except (ValueError, ConfigurationError) as e:
        print('{}: {}'.format(usage, e), file=sys.stderr)
        return 2

    settings = GetSettings()
    logging.basicConfig(level=settings.log_level, stream=sys.stderr,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    thresholds = Generate(scale, settings)
    sys.stdout.write(FormatTable(scale, thresholds))
    return 0

if __name__ == '__main__':
    sys.exit(Main())
