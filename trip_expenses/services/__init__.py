"""Ledger, export projection and export rendering."""
