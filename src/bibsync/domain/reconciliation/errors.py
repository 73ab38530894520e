"""Errors raised by the reconciliation core."""

from __future__ import annotations


class InvariantViolationError(RuntimeError):
    """Raised when a collaborator breaks the contract the matching relies on.

    Not recoverable: the scan fails instead of guessing.
    """


class ChangeNotApplicableError(ValueError):
    """Raised when an accepted change cannot be applied to the memory snapshot."""
