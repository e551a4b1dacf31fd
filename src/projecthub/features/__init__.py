"""Feature modules built on top of the access core."""
