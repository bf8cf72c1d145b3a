import pytest

from envcd.api import (
    Environment,
    EnvironmentStatus,
    ObjectMeta,
    PostgresqlDatabase,
    PostgresqlDatabaseSpec,
    PostgresqlDatabaseStatus,
)
from envcd.client import (
    AlreadyExistsError,
    InMemoryClient,
    NamespacedName,
    NotFoundError,
    Request,
    Result,
)

KEY = NamespacedName(namespace="default", name="test-resource")


def make_db():
    return PostgresqlDatabase(
        metadata=ObjectMeta(name=KEY.name, namespace=KEY.namespace),
        spec=PostgresqlDatabaseSpec(name=KEY.name),
    )


def test_request_exposes_key_parts():
    req = Request(KEY)
    assert req.name == "test-resource"
    assert req.namespace == "default"
    assert str(KEY) == "default/test-resource"


def test_default_result_does_not_requeue():
    result = Result()
    assert not result.requeue
    assert result.requeue_after.total_seconds() == 0


def test_create_then_get_returns_copy():
    client = InMemoryClient()
    client.create(make_db())
    fetched = client.get(PostgresqlDatabase, KEY)
    assert fetched.spec.name == "test-resource"
    assert fetched.metadata.uid
    assert fetched.metadata.creation_timestamp is not None
    fetched.spec.name = "changed"
    assert client.get(PostgresqlDatabase, KEY).spec.name == "test-resource"


def test_get_missing_raises_not_found():
    client = InMemoryClient()
    with pytest.raises(NotFoundError) as info:
        client.get(Environment, KEY)
    assert info.value.key == KEY


def test_kinds_are_kept_apart():
    client = InMemoryClient()
    client.create(make_db())
    with pytest.raises(NotFoundError):
        client.get(Environment, KEY)


def test_create_duplicate_raises():
    client = InMemoryClient()
    client.create(make_db())
    with pytest.raises(AlreadyExistsError):
        client.create(make_db())


def test_update_keeps_status_and_update_status_keeps_spec():
    client = InMemoryClient()
    client.create(make_db())
    db = client.get(PostgresqlDatabase, KEY)
    db.status = PostgresqlDatabaseStatus(status="Ready")
    client.update_status(db)
    db.spec.name = "renamed"
    db.status = PostgresqlDatabaseStatus(status="Error")
    client.update(db)
    stored = client.get(PostgresqlDatabase, KEY)
    assert stored.spec.name == "renamed"
    assert stored.status.status == "Ready"


def test_update_missing_raises():
    client = InMemoryClient()
    with pytest.raises(NotFoundError):
        client.update(make_db())
    with pytest.raises(NotFoundError):
        client.update_status(make_db())


def test_delete_without_finalizers_removes():
    client = InMemoryClient()
    env = Environment(metadata=ObjectMeta(name=KEY.name, namespace=KEY.namespace))
    client.create(env)
    client.delete(env)
    with pytest.raises(NotFoundError):
        client.get(Environment, KEY)


def test_delete_waits_for_finalizers():
    client = InMemoryClient()
    env = Environment(
        metadata=ObjectMeta(name=KEY.name, namespace=KEY.namespace, finalizers=["f"]),
        status=EnvironmentStatus(status="Success"),
    )
    client.create(env)
    client.delete(env)
    pending = client.get(Environment, KEY)
    assert pending.metadata.deletion_timestamp is not None
    assert pending.metadata.finalizers == ["f"]
    pending.metadata.remove_finalizer("f")
    client.update(pending)
    with pytest.raises(NotFoundError):
        client.get(Environment, KEY)