"""
Exception hierarchy for jsonlp
"""
from typing import Optional


class JSONLPError(Exception):
    """Base class for all jsonlp errors"""


class ProblemIOError(JSONLPError, OSError):
    """The problem file could not be opened or read."""


class FormatError(JSONLPError, ValueError):
    """A required JSON field is missing or structurally invalid."""


class MissingFieldError(FormatError):
    """
    A mandatory container or array is absent from the document.

    Attributes
    ----------
    field : str
        Dotted path of the missing field, e.g. ``objective_data.coefficients``
    """

    def __init__(self, field: str):
        super().__init__(f"Missing {field} in JSON")
        self.field = field


class AllocationError(JSONLPError, MemoryError):
    """Memory was exhausted while building the problem arrays."""


class EngineError(JSONLPError):
    """
    A call into the optimization engine returned a non-success status.

    Attributes
    ----------
    operation : str
        Engine primitive that failed (``create_ranged_problem``, ``solve``, ...)
    status : int or None
        Engine status code, when the engine reports one
    """

    def __init__(self, operation: str, message: str = "", status: Optional[int] = None):
        detail = f"Error in {operation}"
        if status is not None:
            detail += f": {status}"
        if message:
            detail += f" ({message})"
        super().__init__(detail)
        self.operation = operation
        self.status = status


class PartialExtractionError(JSONLPError):
    """
    The solve succeeded but one result field could not be read.

    Attributes
    ----------
    field : str
        Name of the result field (``objective_value``, ``mip_gap``, ...)
    """

    def __init__(self, field: str, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        if message is None:
            message = f"Error getting {field.replace('_', ' ')}"
            if cause is not None:
                message += f": {cause}"
        super().__init__(message)
        self.field = field
        self.cause = cause
