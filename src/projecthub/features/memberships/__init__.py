"""Project membership lifecycle: domain errors, stores, service, and HTTP routes."""
