"""Domain-specific exceptions.

Custom exceptions provide better error handling and clearer intent
than generic exceptions. The calculation engines never raise for
degenerate data; these cover the collaborators around them.
"""


class BakersFormulaError(Exception):
    """Base exception for all application errors."""


# ============================================================================
# Domain Errors
# ============================================================================


class InvalidFormulaError(BakersFormulaError):
    """Raised when a use case is asked for an impossible operation."""


# ============================================================================
# Persistence Errors
# ============================================================================


class PersistenceError(BakersFormulaError):
    """Base exception for persistence-related errors."""


class FormulaNotFoundError(PersistenceError):
    """Raised when formula file is not found."""


class InvalidFormulaFileError(PersistenceError):
    """Raised when formula file is malformed."""


class ExportError(PersistenceError):
    """Raised when export operation fails."""


class FormulaImportError(PersistenceError):
    """Raised when an ingredient sheet cannot be turned into a formula."""
