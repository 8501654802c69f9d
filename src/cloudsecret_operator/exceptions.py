"""
CloudSecret Operator exception hierarchy.

State store failures abort a reconciliation cycle; resolution failures are
recorded per key and never abort one.
"""


class OperatorError(Exception):
    """Root exception for all operator errors."""


# ── State Store ───────────────────────────────────────────────────────
class StoreError(OperatorError):
    """Base exception for state store operations."""


class NotFoundError(StoreError):
    """Object does not exist in the state store."""


class StoreReadError(StoreError):
    """Failed to read an object from the state store."""


class StoreWriteError(StoreError):
    """Failed to create, update, or delete an object in the state store."""


# ── Secret Resolver ───────────────────────────────────────────────────
class ResolutionError(OperatorError):
    """Failed to resolve an external secret reference."""
