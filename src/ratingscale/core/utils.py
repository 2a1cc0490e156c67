"""
Random number handling shared by simulation and sampling code.
"""

import numpy as np
from numpy.random import Generator


def get_rng(seed: int | Generator | None = None) -> Generator:
    """
    Resolve a seed into a numpy Generator.

    Args:
        seed: Integer seed for a reproducible stream, an existing Generator
            (returned as is, so callers can share one stream), or None for
            fresh OS entropy.

    Returns:
        A numpy Generator.
    """
    if isinstance(seed, Generator):
        return seed
    return np.random.default_rng(seed)
