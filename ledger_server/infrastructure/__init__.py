"""Infrastructure adapters: database access and the upstream price source."""
