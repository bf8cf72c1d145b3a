from datetime import datetime, timezone

import pytest

from envcd.api import (
    GROUP_VERSION,
    DatabaseSpec,
    Environment,
    EnvironmentList,
    EnvironmentSpec,
    EnvironmentStatus,
    GroupVersion,
    ObjectMeta,
    OwnerReference,
    PostgresqlDatabase,
    PostgresqlDatabaseList,
    PostgresqlDatabaseSpec,
    PostgresqlDatabaseStatus,
    PostgresqlsDatabase,
    new_controller_ref,
)


def test_group_version_with_kind():
    gvk = GROUP_VERSION.with_kind("Environment")
    assert gvk.group == "core.envcd.io"
    assert gvk.version == "v1alpha1"
    assert gvk.kind == "Environment"
    assert gvk.api_version == "core.envcd.io/v1alpha1"


def test_core_group_api_version_is_bare_version():
    assert GroupVersion("", "v1").with_kind("Pod").api_version == "v1"


def test_finalizer_operations():
    meta = ObjectMeta(name="test-resource", namespace="default")
    assert not meta.contains_finalizer("f")
    assert meta.add_finalizer("f") is True
    assert meta.add_finalizer("f") is False
    assert meta.finalizers == ["f"]
    assert meta.contains_finalizer("f")
    assert meta.remove_finalizer("f") is True
    assert meta.remove_finalizer("f") is False
    assert meta.finalizers == []


def test_object_meta_round_trip():
    moment = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    meta = ObjectMeta(
        name="test-resource",
        namespace="default",
        uid="uid-1",
        finalizers=["f"],
        owner_references=[OwnerReference("core.envcd.io/v1alpha1", "Environment", "env", "uid-0", True, True)],
        creation_timestamp=moment,
        deletion_timestamp=moment,
    )
    data = meta.to_dict()
    assert data["creationTimestamp"] == "2025-01-02T03:04:05Z"
    assert ObjectMeta.from_dict(data) == meta


def test_environment_round_trip_and_keys():
    env = Environment(
        metadata=ObjectMeta(name="test-resource", namespace="default"),
        spec=EnvironmentSpec(
            databases=DatabaseSpec(postgresql=[PostgresqlsDatabase("app"), PostgresqlsDatabase("cache")])
        ),
        status=EnvironmentStatus(status="Error", message="m", errors=["e"]),
    )
    data = env.to_dict()
    assert data["kind"] == "Environment"
    assert data["apiVersion"] == GROUP_VERSION.api_version
    assert data["spec"]["databases"]["postgresqls"] == [{"name": "app"}, {"name": "cache"}]
    assert Environment.from_dict(data) == env


def test_empty_environment_omits_empty_fields():
    data = Environment().to_dict()
    assert data["metadata"] == {}
    assert data["spec"] == {"databases": {}}
    assert data["status"] == {}


def test_postgresql_database_round_trip():
    db = PostgresqlDatabase(
        metadata=ObjectMeta(name="app", namespace="default"),
        spec=PostgresqlDatabaseSpec(name="app"),
        status=PostgresqlDatabaseStatus(status="Ready"),
    )
    data = db.to_dict()
    assert data["spec"] == {"name": "app"}
    assert data["status"] == {"status": "Ready"}
    assert PostgresqlDatabase.from_dict(data) == db


def test_lists_serialise_items():
    env = Environment(metadata=ObjectMeta(name="a"))
    db = PostgresqlDatabase(metadata=ObjectMeta(name="b"))
    env_list = EnvironmentList(items=[env]).to_dict()
    db_list = PostgresqlDatabaseList(items=[db]).to_dict()
    assert env_list["kind"] == "EnvironmentList"
    assert env_list["items"] == [env.to_dict()]
    assert db_list["kind"] == "PostgresqlDatabaseList"
    assert db_list["items"] == [db.to_dict()]


def test_new_controller_ref():
    owner = Environment(metadata=ObjectMeta(name="test-resource", namespace="default", uid="uid-7"))
    ref = new_controller_ref(owner, GROUP_VERSION.with_kind("Environment"))
    assert ref.name == "test-resource"
    assert ref.uid == "uid-7"
    assert ref.kind == "Environment"
    assert ref.api_version == GROUP_VERSION.api_version
    assert ref.controller and ref.block_owner_deletion
    assert OwnerReference.from_dict(ref.to_dict()) == ref