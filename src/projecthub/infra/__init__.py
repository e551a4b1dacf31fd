"""Infrastructure adapters (database plumbing)."""
