"""Request-scoped access checks built on the enforcement gate."""
