"""Caches, key-value stores and the audit logger."""
