"""
Exceptions raised by the rating scale models.
"""


class InvalidParameterError(ValueError):
    """
    Raised when model parameters are outside their valid domain.

    Covers non-positive discriminations, malformed step-difficulty vectors,
    non-finite inputs and violated sum-to-zero constraints. The computation
    is deterministic, so the same input always fails the same way.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
