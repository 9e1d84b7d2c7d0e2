"""
Domain error taxonomy.

  ``ValidationError``   - bad user input (e.g. blank project name). No state change.
  ``NotFoundError``     - stale project/snapshot id. Callers treat as a warning.
  ``InvariantError``    - the operation would break a store invariant
                          (e.g. deleting the last project). Refused.
  ``PersistenceError``  - the durable store could not be written. In-memory
                          state stays valid for the rest of the session.

Numeric degeneracies (zero denominator, empty indicator list, NaN inputs) are
NOT errors; the calculator returns defined values (``inf``, ``0``) instead.

Note: ``ValidationError`` here is unrelated to ``pydantic.ValidationError``.
Import this module as ``from regen_ratio import errors`` where both are used.
"""

from __future__ import annotations


class RegenRatioError(Exception):
    """Base class for all domain errors raised by ``regen_ratio``."""


class ValidationError(RegenRatioError):
    """User input failed validation; the operation was aborted."""


class NotFoundError(RegenRatioError):
    """A project or snapshot id did not resolve."""


class InvariantError(RegenRatioError):
    """The operation would violate a store invariant and was refused."""


class PersistenceError(RegenRatioError):
    """The durable key-value store could not be read or written."""
