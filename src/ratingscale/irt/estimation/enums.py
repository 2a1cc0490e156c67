from enum import Enum


class ConvergenceStatus(str, Enum):
    """How an EM run ended."""

    # Relative log-likelihood change fell below the tolerance
    CONVERGED = "converged"
    # Iteration cap reached first; estimates may still be usable
    MAX_ITERATIONS = "max_iterations"
    # Marginal log-likelihood became non-finite
    FAILED = "failed"
