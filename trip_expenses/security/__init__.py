"""Secrets handling: key lookup, log scrubbing and the outbound HTTP client."""
