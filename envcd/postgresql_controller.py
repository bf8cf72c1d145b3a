"""Reconciler that keeps PostgreSQL databases in step with their resources."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from typing import Any

from envcd.api import PostgresqlDatabase
from envcd.client import NotFoundError, Request, Result

DATABASE_FINALIZER = "finalizer.postgresqldatabase.core.envcd.io"

STATUS_READY = "Ready"
STATUS_ERROR = "Error"
STATUS_DELETE_FAILED = "DeleteFailed"

_VALID_IDENTIFIER = re.compile(r"[a-zA-Z_][a-zA-Z0-9_-]*")

_log = logging.getLogger(__name__)


class DatabaseError(Exception):
    """A database could not be created or dropped."""


def is_valid_identifier(name: str) -> bool:
    """Whether ``name`` is safe to quote as a database identifier."""
    return _VALID_IDENTIFIER.fullmatch(name) is not None


class DatabaseExecutor:
    """Runs statements over a DB-API connection using ``%s`` placeholders.

    CREATE DATABASE and DROP DATABASE cannot run inside a transaction, so
    the connection should be in autocommit mode.
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def _run(self, cursor: Any, query: str, args: tuple[Any, ...]) -> None:
        if args:
            cursor.execute(query, args)
        else:
            cursor.execute(query)

    def execute(self, query: str, *args: Any) -> None:
        with closing(self.connection.cursor()) as cursor:
            self._run(cursor, query, args)

    def fetch_one(self, query: str, *args: Any) -> Any:
        """Return the first row of the result, or None when there is none."""
        with closing(self.connection.cursor()) as cursor:
            self._run(cursor, query, args)
            return cursor.fetchone()

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> DatabaseExecutor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class PostgresqlDatabaseReconciler:
    """Creates and drops PostgreSQL databases for PostgresqlDatabase objects."""

    def __init__(
        self,
        client: Any,
        executor: DatabaseExecutor,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.executor = executor
        self.logger = logger or _log

    def reconcile(self, request: Request) -> Result:
        """Ensure the database exists, or drop it when the object is deleted.

        Database failures are written to the status and then raised.
        """
        try:
            resource = self.client.get(PostgresqlDatabase, request.namespaced_name)
        except NotFoundError:
            return Result()

        if resource.metadata.is_being_deleted:
            self.logger.info("PostgresqlDatabase is being deleted: %s", resource.name)
            if resource.metadata.contains_finalizer(DATABASE_FINALIZER):
                try:
                    self.delete_database(resource.name)
                except DatabaseError:
                    self._set_status(resource, STATUS_DELETE_FAILED)
                    raise
                resource.metadata.remove_finalizer(DATABASE_FINALIZER)
                self.client.update(resource)
            return Result()

        if resource.metadata.add_finalizer(DATABASE_FINALIZER):
            self.client.update(resource)

        self.logger.info("Ensuring PostgreSQL database exists: %s", resource.name)
        try:
            self.create_database(resource.name)
        except DatabaseError:
            self._set_status(resource, STATUS_ERROR)
            raise
        self._set_status(resource, STATUS_READY)
        return Result()

    def _set_status(self, resource: PostgresqlDatabase, status: str) -> None:
        resource.status.status = status
        try:
            self.client.update_status(resource)
        except Exception:
            self.logger.debug("ignoring failed status update for %s", resource.name)

    def create_database(self, name: str) -> None:
        """Create the database unless it already exists."""
        if not is_valid_identifier(name):
            raise DatabaseError(f"invalid database name: {name}")
        try:
            row = self.executor.fetch_one(
                "SELECT 1 FROM pg_database WHERE datname = %s;", name
            )
        except Exception:
            row = None
        if row is not None:
            return
        try:
            self.executor.execute(f'CREATE DATABASE "{name}";')
        except Exception as err:
            raise DatabaseError(f"failed to create PostgreSQL database {name}: {err}") from err

    def delete_database(self, name: str) -> None:
        """Drop the database if it exists."""
        if not is_valid_identifier(name):
            raise DatabaseError(f"invalid database name: {name}")
        try:
            self.executor.execute(f'DROP DATABASE IF EXISTS "{name}";')
        except Exception as err:
            raise DatabaseError(f"failed to delete PostgreSQL database {name}: {err}") from err