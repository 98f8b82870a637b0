"""Shared cross-layer types, exceptions and message text."""

from trip_expenses.shared.exceptions import ExternalServiceError, KeyMissingError, StoreError, ToolError
from trip_expenses.shared.messages import message_for
from trip_expenses.shared.text import format_bilingual_text

__all__ = [
    "ToolError",
    "ExternalServiceError",
    "KeyMissingError",
    "StoreError",
    "format_bilingual_text",
    "message_for",
]
