"""Exceptions raised by filter design and filtering."""


class FilterDesignError(Exception):
    """Base exception for pybiquad errors."""

    pass


class InvalidParameter(FilterDesignError, ValueError):
    """Raised when a design request is out of range.

    This occurs when:
    - Order is not a positive integer
    - A cutoff, center frequency or band edge is outside (0, 1)
    - Bandwidth is outside (0, 1), or the low edge is not below the high edge
    """

    pass


class DesignFailure(FilterDesignError, ArithmeticError):
    """Raised when a design produced non-finite coefficients.

    Valid Butterworth requests never trigger this; seeing it means an
    internal invariant broke and the coefficients must not be used.
    """

    pass


class NotConfigured(FilterDesignError, RuntimeError):
    """Raised when a filter is used before coefficients were assigned."""

    pass
