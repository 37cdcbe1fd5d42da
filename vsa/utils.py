"""
Shared numeric helpers.
"""

import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero for positives (4.5 -> 5)."""
    return int(math.floor(value + 0.5))


def ceil_div(numerator: Number, denominator: Number) -> int:
    """Ceiling of numerator / denominator, 0 when the denominator is 0."""
    if not denominator:
        return 0
    return int(math.ceil(numerator / denominator))
