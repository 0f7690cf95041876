import operator

from expohisto.errors import ConfigurationError, InvalidArgumentError

# Scale -10 maps every double into one of three buckets (base 2^1024),
# scale 20 splits each binary exponent into 2^20 buckets.
MIN_SCALE = -10
MAX_SCALE = 20

def CheckScale(scale, min_scale=MIN_SCALE, max_scale=MAX_SCALE):
    if isinstance(scale, bool):
        raise ConfigurationError("scale must be an integer, got {!r}".format(scale))
    try:
        scale = operator.index(scale)
    except TypeError:
        raise ConfigurationError("scale must be an integer, got {!r}".format(scale)) from None
    if scale < min_scale or scale > max_scale:
        raise ConfigurationError("scale {} is outside [{}, {}]".format(scale, min_scale, max_scale))
    return scale

def CheckIndex(index):
    # Floats, even integral ones, are rejected.
    if not isinstance(index, bool):
        try:
            return operator.index(index)
        except TypeError:
            pass
    raise InvalidArgumentError("index must be an integer, got {!r}".format(index))
