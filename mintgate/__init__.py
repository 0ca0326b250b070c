"""Rate limit admission control for ledger mint operations."""
