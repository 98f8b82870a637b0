"""Fuel-price adapters."""
