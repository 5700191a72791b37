"""HTTP layer for the bank reconciler."""
