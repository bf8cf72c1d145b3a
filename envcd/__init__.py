"""Reconcilers for Environment and PostgresqlDatabase resources, with their types, settings and an in-memory store."""

__version__ = "0.1.0"

__all__ = [
    "api",
    "client",
    "config",
    "environment_controller",
    "postgresql_controller",
]