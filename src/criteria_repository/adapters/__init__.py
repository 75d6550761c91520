"""Cache store and auth context adapters."""
