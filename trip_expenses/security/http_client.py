"""Outbound HTTP for provider adapters.

All directions/fuel-feed calls go through ``SecureHttpClient`` so timeouts and
the single retry are uniform, and so error strings never carry an API key.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from trip_expenses.security.key_manager import get_key_manager
from trip_expenses.shared.exceptions import ToolError


class SecureHttpClient:
    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 1,
        tool_name: str = "http",
    ):
        self._timeout = timeout
        self._max_retries = max_retries
        self._tool_name = tool_name
        self._km = get_key_manager()

    def _request(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        headers: Optional[dict[str, str]],
    ) -> httpx.Response:
        last_error: Optional[ToolError] = None

        for attempt in range(1, self._max_retries + 2):
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self._timeout)
                resp.raise_for_status()
                return resp
            except httpx.HTTPStatusError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = ToolError(self._tool_name, f"HTTP {e.response.status_code}: {safe_msg}")
            except httpx.TimeoutException:
                last_error = ToolError(self._tool_name, f"timed out after {self._timeout}s (attempt {attempt})")
            except httpx.HTTPError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = ToolError(self._tool_name, f"request failed: {safe_msg}")

            if attempt <= self._max_retries:
                time.sleep(0.5 * attempt)

        raise last_error  # type: ignore[misc]

    def get(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """GET and decode a JSON object body."""
        resp = self._request(url, params, headers)
        try:
            data = resp.json()
        except ValueError as e:
            raise ToolError(self._tool_name, f"invalid JSON body: {self._km.scrub_text(str(e))}") from None
        if not isinstance(data, dict):
            raise ToolError(self._tool_name, "unexpected JSON body (not an object)")
        return data

    def get_text(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> str:
        """GET a non-JSON body (the Opinet feed answers in XML)."""
        return self._request(url, params, headers).text
