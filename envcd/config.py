"""PostgreSQL server settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import quote_plus


class ConfigurationError(Exception):
    """Raised when required settings are missing."""


@dataclass(frozen=True)
class PostgresqlConfiguration:
    """Connection settings for the administrative PostgreSQL server."""

    host: str
    port: str
    user: str
    password: str = field(repr=False)
    database: str

    def dsn(self) -> str:
        """Connection URL with the password query-escaped."""
        return (
            f"postgresql://{self.user}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )


def load_postgresql_configuration(
    environ: Mapping[str, str] | None = None,
) -> PostgresqlConfiguration:
    """Read the configuration; every variable must be set and non-empty."""
    source = os.environ if environ is None else environ
    values = {
        attr: source.get(f"Postgresql_{attr.capitalize()}", "")
        for attr in ("host", "port", "user", "password", "database")
    }
    if not all(values.values()):
        raise ConfigurationError("Missing required Postgresql configuration")
    return PostgresqlConfiguration(**values)