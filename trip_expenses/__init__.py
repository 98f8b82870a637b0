"""Trip expense calculator: cost breakdowns, an editable ledger and exports."""

__version__ = "1.0.0"
