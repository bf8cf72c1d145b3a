"""Reconciler that turns an Environment into the databases it asks for."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from envcd.api import (
    GROUP_VERSION,
    Environment,
    ObjectMeta,
    PostgresqlDatabase,
    PostgresqlDatabaseSpec,
    new_controller_ref,
)
from envcd.client import NamespacedName, NotFoundError, Request, Result

ENVIRONMENT_FINALIZER = "finalizer.environment.core.envcd.io"
REQUEUE_AFTER = timedelta(seconds=30)

_log = logging.getLogger(__name__)


class EnvironmentReconciler:
    """Creates a PostgresqlDatabase for every database an Environment lists."""

    def __init__(self, client: Any, logger: logging.Logger | None = None) -> None:
        self.client = client
        self.logger = logger or _log

    def reconcile(self, request: Request) -> Result:
        """Bring the cluster in line with one Environment.

        Failures to read or create child databases are recorded in the
        status and cause a requeue; other client errors propagate.
        """
        try:
            environment = self.client.get(Environment, request.namespaced_name)
        except NotFoundError:
            return Result()

        if environment.metadata.is_being_deleted:
            self.logger.info("Environment is being deleted: %s", environment.name)
            if environment.metadata.remove_finalizer(ENVIRONMENT_FINALIZER):
                self.client.update(environment)
            return Result()

        if environment.metadata.add_finalizer(ENVIRONMENT_FINALIZER):
            self.client.update(environment)

        outcomes = (
            self._ensure_database(environment, db.name, request.namespace)
            for db in environment.spec.databases.postgresql
        )
        errors = [message for message in outcomes if message is not None]
        environment.status.errors = errors
        if errors:
            environment.status.status = "Error"
            environment.status.message = "One or more errors occurred during reconciliation"
        else:
            environment.status.status = "Success"
            environment.status.message = "Reconciliation completed successfully"

        try:
            self.client.update_status(environment)
        except Exception:
            self.logger.exception("unable to update Environment status")

        return Result(requeue_after=REQUEUE_AFTER) if errors else Result()

    def _ensure_database(self, environment: Environment, name: str, namespace: str) -> str | None:
        """Create the named database if missing; return an error message on failure."""
        self.logger.info("Postgresql Database to be created: %s", name)
        try:
            self.client.get(PostgresqlDatabase, NamespacedName(namespace, name))
        except NotFoundError:
            pass
        except Exception as err:
            self.logger.error("Failed to get PostgresqlDatabase %s: %s", name, err)
            return f"Failed to get PostgresqlDatabase {name}: {err}"
        else:
            self.logger.info("PostgresqlDatabase already exists: %s", name)
            return None

        owner = new_controller_ref(environment, GROUP_VERSION.with_kind(Environment.KIND))
        database = PostgresqlDatabase(
            metadata=ObjectMeta(name=name, namespace=namespace, owner_references=[owner]),
            spec=PostgresqlDatabaseSpec(name=name),
        )
        try:
            self.client.create(database)
        except Exception as err:
            self.logger.error("Failed to create PostgresqlDatabase %s: %s", name, err)
            return f"Failed to create PostgresqlDatabase {name}: {err}"
        self.logger.info("PostgresqlDatabase created successfully: %s", name)
        return None