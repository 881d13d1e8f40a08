"""
Exception types for the pass predictor.

Propagation and initialization faults are raised; a pass search that finds
nothing returns None instead of raising.
"""

from typing import Optional


class PassPredictorError(Exception):
    """Base class for all pass predictor errors."""


class TLEFormatError(PassPredictorError, ValueError):
    """Raised when two-line element text cannot be decoded."""


class InitError(PassPredictorError, ValueError):
    """Raised when an element set is malformed or physically invalid."""


class PropagationError(PassPredictorError):
    """
    Raised when an orbit cannot be propagated to the requested time.

    Attributes:
        code: Numeric failure code (1 mean eccentricity, 2 mean motion,
            3 perturbed eccentricity, 4 semi-latus rectum, 6 decayed)
        minutes_since_epoch: Time offset that failed
    """

    def __init__(
        self, message: str, code: int, minutes_since_epoch: Optional[float] = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.minutes_since_epoch = minutes_since_epoch


class OptimizerExhausted(PassPredictorError):
    """Raised internally when bracketing or root finding runs out of budget."""


class PredictorStateError(PassPredictorError, RuntimeError):
    """Raised when a search is requested before the cursor has been seeded."""
