import sys
import time

import numpy as np

from expohisto import MappingStrategy, NewMapping, MIN_SCALE, MAX_SCALE

#===================================================================================================
# Times MapToIndex for every scale and strategy; prints CSV for results/plot.py
#
#   python bench/bench.py > bench/results/mapping.csv
#===================================================================================================

def Sample(n, seed=0):
    rng = np.random.default_rng(seed)
    # Log-uniform over the normal range.
    return np.exp2(rng.uniform(-1022.0, 1023.0, n)).tolist()

def TimeMapToIndex(mapping, values, repeat=5):
    best = float('inf')
    for _ in range(repeat):
        start = time.perf_counter_ns()
        for v in values:
            mapping.MapToIndex(v)
        best = min(best, time.perf_counter_ns() - start)
    return best / len(values)

def TableBytes(mapping):
    table = getattr(mapping, 'table', None)
    return 0 if table is None else table.nbytes

def Run(n=20000):
    values = Sample(n)
    print('mapping,scale,ns,bytes')
    for scale in range(MIN_SCALE, 1):
        mapping = NewMapping(scale)
        print('exponent,{},{:.1f},0'.format(scale, TimeMapToIndex(mapping, values)))
    for scale in range(1, MAX_SCALE + 1):
        for strategy in MappingStrategy:
            mapping = NewMapping(scale, strategy)
            ns = TimeMapToIndex(mapping, values)
            print('{},{},{:.1f},{}'.format(strategy.value, scale, ns, TableBytes(mapping)))
        sys.stdout.flush()

if __name__ == '__main__':
    Run()
