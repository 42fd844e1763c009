"""Domain-specific exceptions for the finance dashboard resource services."""

class ValidationError(ValueError):
    """Raised when submitted data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a user, expense, income or goal cannot be located."""


class PersistenceError(IOError):
    """Raised when the relational store fails to read or write."""
