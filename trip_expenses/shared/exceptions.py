"""Collaborator-facing exceptions (route search, fuel feed, stores)."""


class ToolError(Exception):
    """A provider call (directions API, fuel feed) failed."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(f"[{tool}] {message}")


class KeyMissingError(ToolError):
    """Provider credentials are not configured.

    Kept distinct from a plain ``ToolError`` so callers can tell the user
    *why* a search produced nothing.
    """

    def __init__(self, name: str, tool: str = "credentials"):
        self.key_name = name
        super().__init__(tool, f"Missing API credential: {name} (configure it in .env)")


class StoreError(Exception):
    """The key-value store could not be read or written."""


class ExternalServiceError(ToolError):
    """The provider answered, but with an error payload (e.g. Opinet ``<ERROR>``)."""
