"""Helpers for redacting sensitive values in logs and error strings."""

from __future__ import annotations

import re

_REDACTED = "***REDACTED***"

# Opinet passes its key as ``?code=...``.
_QUERY_VALUE_RE = re.compile(
    r"(?i)(?P<prefix>[?&](?:code|key|api[_-]?key|token|secret|client[_-]?secret)\s*=\s*)(?P<value>[^&\s\"']+)"
)
_JSON_KV_RE = re.compile(
    r"(?i)(?P<prefix>(?:[\"']?(?:api[_-]?key|client[_-]?secret|token|secret|password)[\"']?\s*[:=]\s*[\"']?))(?P<value>[^\"',\s}]+)"
)
_NCP_HEADER_RE = re.compile(
    r"(?i)(?P<prefix>[\"']?x-ncp-apigw-api-key(?:-id)?[\"']?\s*[:=]\s*[\"']?)(?P<value>[^\"',\s;}]+)"
)
_BEARER_RE = re.compile(
    r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)"
)
_DSN_CREDENTIAL_RE = re.compile(
    r"(?i)(?P<prefix>\b(?:redis|rediss)://)(?P<creds>[^@/\s]+)@"
)


def _replace_value(pattern: re.Pattern[str], text: str) -> str:
    def repl(match: re.Match[str]) -> str:
        return f"{match.group('prefix')}{_REDACTED}"

    return pattern.sub(repl, text)


def redact_sensitive(text: str) -> str:
    """Redact query keys, Naver gateway headers and DSN credentials."""
    if not text:
        return text

    redacted = str(text)
    for pattern in (_NCP_HEADER_RE, _QUERY_VALUE_RE, _JSON_KV_RE, _BEARER_RE):
        redacted = _replace_value(pattern, redacted)
    return _DSN_CREDENTIAL_RE.sub(rf"\g<prefix>{_REDACTED}@", redacted)


__all__ = ["redact_sensitive"]
