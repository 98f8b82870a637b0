"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""


class InvalidExpenseInput(DomainError):
    """Raised when calculator input is structurally invalid (e.g. efficiency <= 0)."""
