# envcd

Reconciliation logic for two resource kinds in the `core.envcd.io/v1alpha1`
API group:

- **Environment** lists the PostgreSQL databases an environment needs. Its
  reconciler makes sure a `PostgresqlDatabase` resource exists for each one,
  owned by the environment through a controller owner reference, and records
  `Success` or `Error` in the status together with a message and a list of
  error strings. When any database could not be read or created, the result
  asks for a retry after 30 seconds.
- **PostgresqlDatabase** stands for one PostgreSQL database. Its reconciler
  creates the database on the server if it is missing (status `Ready`, or
  `Error` on failure) and drops it when the resource is being deleted (status
  `DeleteFailed` if the drop fails). Database failures are written to the
  status and then raised as `DatabaseError`.

Both reconcilers add a finalizer to their resources (
`finalizer.environment.core.envcd.io` and
`finalizer.postgresqldatabase.core.envcd.io`) and remove it once clean-up has
run, so the resource is only removed from the store after that.

## Installing

```
pip install .
```

The package has no runtime dependencies. For the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `envcd.api`: the resource types (`Environment`, `PostgresqlDatabase`, their
  specs, statuses and `EnvironmentList` / `PostgresqlDatabaseList`), each with
  `to_dict` and, for the single objects, `from_dict`. `ObjectMeta` carries the
  name, namespace, uid, finalizers, owner references and timestamps, and has
  `contains_finalizer`, `add_finalizer` and `remove_finalizer`.
  `GroupVersion.with_kind` gives a `GroupVersionKind`; `GROUP_VERSION` is
  `core.envcd.io/v1alpha1`. `new_controller_ref(owner, gvk)` builds an
  `OwnerReference` marking the owner as controller.
- `envcd.config`: `load_postgresql_configuration(environ=None)` reads the
  server settings from `Postgresql_Host`, `Postgresql_Port`,
  `Postgresql_User`, `Postgresql_Password` and `Postgresql_Database` (from
  `os.environ` unless a mapping is given). All five must be set and non-empty,
  otherwise `ConfigurationError` is raised. The returned
  `PostgresqlConfiguration` has `dsn()`, a `postgresql://` URL with the
  password query-escaped.
- `envcd.client`: `InMemoryClient`, an object store with `get(kind, key)`,
  `create`, `update`, `update_status` and `delete`. It hands out copies;
  `update` leaves the status alone and `update_status` changes only the
  status. `delete` on an object with finalizers only sets its deletion
  timestamp; the object goes away once an update leaves it with no
  finalizers. Missing objects raise `NotFoundError`, duplicates raise
  `AlreadyExistsError`. Also `NamespacedName`, `Request` and `Result`
  (`requeue`, `requeue_after`).
- `envcd.environment_controller`: `EnvironmentReconciler(client, logger=None)`
  with `reconcile(request)`.
- `envcd.postgresql_controller`:
  `PostgresqlDatabaseReconciler(client, executor, logger=None)` with
  `reconcile(request)`, `create_database(name)` and `delete_database(name)`;
  `DatabaseExecutor`, which wraps a DB-API connection that uses `%s`
  placeholders (`execute`, `fetch_one`, `close`, and use as a context
  manager); and `is_valid_identifier`, which accepts names matching
  `^[a-zA-Z_][a-zA-Z0-9_-]*$`. Invalid names raise `DatabaseError` before any
  statement is run.

## Example

```python
from envcd.api import DatabaseSpec, Environment, EnvironmentSpec, ObjectMeta, PostgresqlsDatabase
from envcd.client import InMemoryClient, NamespacedName, Request
from envcd.environment_controller import EnvironmentReconciler

client = InMemoryClient()
client.create(
    Environment(
        metadata=ObjectMeta(name="staging", namespace="default"),
        spec=EnvironmentSpec(
            databases=DatabaseSpec(postgresql=[PostgresqlsDatabase(name="orders")])
        ),
    )
)

reconciler = EnvironmentReconciler(client)
result = reconciler.reconcile(Request(NamespacedName(namespace="default", name="staging")))
```

After this call the store holds a `PostgresqlDatabase` named `orders`, owned
by the `staging` environment, and the environment's status is `Success`.

To manage real databases, wrap a DB-API connection to the server, opened in
autocommit mode because `CREATE DATABASE` and `DROP DATABASE` cannot run in a
transaction, and hand it to the database reconciler:

```python
from envcd.postgresql_controller import DatabaseExecutor, PostgresqlDatabaseReconciler

with DatabaseExecutor(connection) as executor:
    PostgresqlDatabaseReconciler(client, executor).reconcile(
        Request(NamespacedName(namespace="default", name="orders"))
    )
```

## What this package does not do

- It has no command and no long-running process: nothing watches resources
  and calls the reconcilers for you, and there are no health, readiness or
  metrics endpoints. You call `reconcile` yourself.
- It does not talk to a cluster API server. The only store provided is
  `InMemoryClient`; the reconcilers accept any object with the same methods.
- It ships no PostgreSQL driver. You supply the connection that
  `DatabaseExecutor` wraps; `PostgresqlConfiguration.dsn()` gives a URL to
  open it with.