"""Deterministic pricing core: vehicle catalog, fuel prices and cost breakdowns."""
