"""Exceptions raised by the CFLP solver package."""


class ParseError(ValueError):
    """Raised when an instance file is missing, unreadable or malformed."""


class UnknownStrategyError(ValueError):
    """Raised when a solving strategy is requested by an unknown name."""


class InfeasibleProblemError(ValueError):
    """Raised when no set of open facilities can cover the total demand."""
