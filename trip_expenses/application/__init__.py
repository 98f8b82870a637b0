"""Use-case layer wiring the calculator, ledger and providers together."""
