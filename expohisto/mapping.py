import enum
from typing import Union

from expohisto.errors import ConfigurationError
from expohisto.exponent import ExponentMapping
from expohisto.logarithm import LogarithmMapping
from expohisto.lookup_table import LookupTableMapping
from expohisto.scale import CheckScale

# Mappers are plain values; callers hold whichever one they built.
Mapping = Union[ExponentMapping, LogarithmMapping, LookupTableMapping]


class MappingStrategy(enum.Enum):
    LOGARITHM = "logarithm"
    LOOKUP_TABLE = "lookup_table"


def NewExponentMapping(scale):
    return ExponentMapping(scale)

def NewLogarithmMapping(scale):
    return LogarithmMapping(scale)

def NewLookupTableMapping(scale):
    return LookupTableMapping(scale)

def NewMapping(scale, strategy=MappingStrategy.LOOKUP_TABLE):
    """Builds the mapping for a scale in [MIN_SCALE, MAX_SCALE].

    Scales <= 0 always use the exponent mapping; positive scales use the
    requested strategy.
    """

    scale = CheckScale(scale)
    if scale <= 0:
        return ExponentMapping(scale)
    try:
        strategy = MappingStrategy(strategy)
    except ValueError:
        raise ConfigurationError("unknown mapping strategy {!r}".format(strategy)) from None
    if strategy is MappingStrategy.LOGARITHM:
        return LogarithmMapping(scale)
    return LookupTableMapping(scale)
