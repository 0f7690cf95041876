from expohisto.errors import (
    ConfigurationError,
    ExpoHistoError,
    IndexOverflowError,
    IndexUnderflowError,
    InvalidArgumentError,
    OutOfRangeError,
)
from expohisto.exponent import ExponentMapping
from expohisto.logarithm import LogarithmMapping
from expohisto.lookup_table import LookupTableMapping
from expohisto.mapping import (
    Mapping,
    MappingStrategy,
    NewExponentMapping,
    NewLogarithmMapping,
    NewLookupTableMapping,
    NewMapping,
)
from expohisto.scale import MAX_SCALE, MIN_SCALE

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExpoHistoError",
    "ExponentMapping",
    "IndexOverflowError",
    "IndexUnderflowError",
    "InvalidArgumentError",
    "LogarithmMapping",
    "LookupTableMapping",
    "MAX_SCALE",
    "MIN_SCALE",
    "Mapping",
    "MappingStrategy",
    "NewExponentMapping",
    "NewLogarithmMapping",
    "NewLookupTableMapping",
    "NewMapping",
    "OutOfRangeError",
]
