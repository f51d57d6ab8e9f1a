"""Exception types for the reserve engine.

Every rejection is a `ReserveError`; the subclass says which part of the
contract refused the operation. Used by ``step_or_raise()`` in ``engine.py``
and by the imperative shell.
"""

from __future__ import annotations


class ReserveError(Exception):
    """Operation rejected. Nothing was changed."""


class ValidationError(ReserveError):
    """Bad input, wrong phase, consumed one-shot, or caller not authorized."""


class InvariantViolation(ReserveError):
    """A ratio bound, oracle availability or post-state invariant would be broken."""

    def __init__(self, violations: list[str] | str) -> None:
        if isinstance(violations, str):
            violations = [violations]
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class CollaboratorFailure(ReserveError):
    """An external ledger, custodian, price source or store call failed."""
