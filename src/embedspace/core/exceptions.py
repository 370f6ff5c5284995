"""Exceptions and warnings raised by embedspace.

Contract violations (bad dimensions, bad scale, broken alignment) are hard
errors. Numerical edge cases are reported as ProjectionWarning instances on
the projection result and never raised.
"""


class EmbedSpaceError(Exception):
    """Base exception for all embedspace errors."""
    pass


class EmptyInputError(EmbedSpaceError):
    """
    No present vectors to project.

    Raised when:
    - The embedding set is empty
    - Every entry is still pending
    """
    pass


class DimensionMismatchError(EmbedSpaceError, ValueError):
    """
    Vectors of differing lengths were supplied together.

    This is a programming error; inputs are never truncated or padded.
    """

    def __init__(self, message: str, expected: int = None, actual: int = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidScaleError(EmbedSpaceError, ValueError):
    """Scale factor is not a positive finite number."""
    pass


class AlignmentError(EmbedSpaceError):
    """Projected points could not be aligned 1:1 with present keys."""
    pass


class DuplicateKeyError(EmbedSpaceError, KeyError):
    """The same key appeared twice while building an embedding set."""
    pass


class ProjectionWarning(UserWarning):
    """Base class for non-fatal conditions observed during projection."""

    def __init__(self, message: str, axis_index: int = None):
        super().__init__(message)
        self.message = message
        self.axis_index = axis_index

    def __str__(self) -> str:
        return self.message


class NumericDegeneracyWarning(ProjectionWarning):
    """
    Input had too little variance (or non-finite values) to recover an axis.

    The engine substituted a safe default and continued.
    """
    pass


class NonConvergenceWarning(ProjectionWarning):
    """Power iteration hit its iteration cap before reaching tolerance."""

    def __init__(self, message: str, axis_index: int = None, residual: float = None):
        super().__init__(message, axis_index=axis_index)
        self.residual = residual
