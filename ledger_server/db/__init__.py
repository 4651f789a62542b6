"""ORM model registry."""
