import math
from typing import Iterable, Tuple

from lhcube.errors import GenerationError

__all__ = [
    'estimate_precision',
    'estimate_precisions',
    'DEGENERATE_PRECISION'
]

# A stratum must span at least this many units of the last printed decimal, so that the jitter steps (hundredths of a
# stratum) print as distinct values.
MIN_STEPS_PER_STRATUM = 100

# Decimals used for a dimension with zero width, where every coordinate equals the lower bound.
DEGENERATE_PRECISION = 6


def estimate_precision(width: float) -> int:
    """
    Minimum number of decimals p >= 0 such that width * 10**p >= 100.

    Args:
        width: stratum width, (upper - lower) / N

    Returns:
        number of decimals

    Raises:
        GenerationError: if the width is negative or not finite.
    """
    width = float(width)
    if not math.isfinite(width) or width < 0.:
        raise GenerationError(f"Cannot estimate precision of stratum width {width}.")
    if width == 0.:
        return DEGENERATE_PRECISION
    try:
        # Closed form guess, then correct for floating point error in log10.
        precision = max(0, math.ceil(math.log10(MIN_STEPS_PER_STRATUM / width)))
        while precision > 0 and width * 10 ** (precision - 1) >= MIN_STEPS_PER_STRATUM:
            precision -= 1
        while width * 10 ** precision < MIN_STEPS_PER_STRATUM:
            precision += 1
    except (OverflowError, ZeroDivisionError) as e:
        raise GenerationError(f"Cannot estimate precision of stratum width {width}.") from e
    return precision


def estimate_precisions(widths: Iterable[float]) -> Tuple[int, ...]:
    return tuple(estimate_precision(width) for width in widths)
