"""Provider adapters (directions API, fuel-price feed) and their selection."""
