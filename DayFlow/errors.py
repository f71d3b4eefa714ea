"""
Error taxonomy for DayFlow.

Every error here is recoverable at the operation boundary: the CLI and the
API catch ``DayFlowError`` and report it instead of crashing.
"""


class DayFlowError(Exception):
    """Base class for all DayFlow errors."""


class ValidationError(DayFlowError, ValueError):
    """Rejected input (empty or duplicate category name). The operation had no effect."""


class RangeError(DayFlowError, IndexError):
    """Hour outside 0..23 or sub-interval index outside 0..3."""


class CollaboratorError(DayFlowError, RuntimeError):
    """The text-generation service failed or returned malformed data."""


class StorageUnavailable(DayFlowError, OSError):
    """Durable storage could not be read or written."""
