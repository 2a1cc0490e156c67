"""
Sum-to-zero identifiability constraints.

Item difficulties and step difficulties are identified by requiring each set
to sum to zero. The free values are the first n-1 entries; the last entry is
derived as the negated sum of the others.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.constants import SUM_TO_ZERO_ATOL
from ratingscale.core.errors import InvalidParameterError


def sum_to_zero(free: ArrayLike) -> NDArray[np.float64]:
    """
    Complete a free parameter sequence with its derived last value.

    Args:
        free: The n-1 free values.

    Returns:
        Array of n values whose sum is zero.
    """
    arr = np.asarray(free, dtype=np.float64).ravel()
    result: NDArray[np.float64] = np.append(arr, -np.sum(arr))
    return result


def check_sum_to_zero(
    values: ArrayLike, name: str, atol: float = SUM_TO_ZERO_ATOL
) -> None:
    """
    Raise InvalidParameterError if values do not sum to zero.

    The tolerance is relative to the magnitude of the values, max(1, Σ|x|),
    so rounding in large sequences built by sum_to_zero is accepted.
    """
    arr = np.asarray(values, dtype=np.float64)
    total = float(np.sum(arr))
    scale = max(1.0, float(np.sum(np.abs(arr))))
    if abs(total) > atol * scale:
        raise InvalidParameterError(
            f"{name} must sum to zero, got sum {total:.3g}"
        )


def free_parameters(
    full: ArrayLike, name: str = "parameters"
) -> NDArray[np.float64]:
    """
    Drop the derived last value of a constrained sequence.

    Args:
        full: The n constrained values.
        name: Label used in error messages.

    Returns:
        The first n-1 values.

    Raises:
        InvalidParameterError: If the values do not sum to zero.
    """
    arr = np.asarray(full, dtype=np.float64).ravel()
    if len(arr) == 0:
        raise InvalidParameterError(f"{name} must not be empty")
    check_sum_to_zero(arr, name)
    result: NDArray[np.float64] = arr[:-1].copy()
    return result
