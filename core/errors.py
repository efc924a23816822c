"""
Error taxonomy for the projection and simulation engine.

All of these are local input/programming errors: the engine does no I/O, so
nothing here is transient or worth retrying.
"""

from __future__ import annotations


class InvalidInput(ValueError):
    """Raised for inputs the engine cannot compute on (empty scenario set, bad trial count)."""


class DivisionUndefined(ZeroDivisionError):
    """Raised when a percent change is requested against a zero baseline value."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            f"Cannot compute percent change for {field!r}: baseline value is zero."
        )


class SimulationCancelled(RuntimeError):
    """Raised when a run is cancelled before any trial completed."""
