"""Resource types of the core.envcd.io/v1alpha1 API group."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _format_time(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(_TIME_FORMAT)


def _parse_time(text: str | None) -> datetime | None:
    if not text:
        return None
    return datetime.strptime(text, _TIME_FORMAT).replace(tzinfo=timezone.utc)


def _api_version(group: str, version: str) -> str:
    return f"{group}/{version}" if group else version


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop empty values, as omitempty does."""
    return {key: value for key, value in data.items() if value}


@dataclass(frozen=True)
class GroupVersionKind:
    """A kind qualified by its API group and version."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)


GROUP_VERSION = GroupVersion(group="core.envcd.io", version="v1alpha1")


@dataclass
class OwnerReference:
    """A pointer from a dependent object to the object that owns it."""

    api_version: str
    kind: str
    name: str
    uid: str = ""
    controller: bool = False
    block_owner_deletion: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OwnerReference:
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            controller=bool(data.get("controller")),
            block_owner_deletion=bool(data.get("blockOwnerDeletion")),
        )


@dataclass
class ObjectMeta:
    """Metadata shared by every stored object."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    finalizers: list[str] = field(default_factory=list)
    owner_references: list[OwnerReference] = field(default_factory=list)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None

    @property
    def is_being_deleted(self) -> bool:
        return self.deletion_timestamp is not None

    def contains_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.finalizers

    def add_finalizer(self, finalizer: str) -> bool:
        """Add the finalizer unless present; report whether anything changed."""
        if finalizer in self.finalizers:
            return False
        self.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str) -> bool:
        """Remove every occurrence of the finalizer; report whether anything changed."""
        before = len(self.finalizers)
        self.finalizers = [f for f in self.finalizers if f != finalizer]
        return len(self.finalizers) != before

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "namespace": self.namespace,
                "uid": self.uid,
                "finalizers": list(self.finalizers),
                "ownerReferences": [ref.to_dict() for ref in self.owner_references],
                "creationTimestamp": _format_time(self.creation_timestamp),
                "deletionTimestamp": _format_time(self.deletion_timestamp),
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ObjectMeta:
        data = data or {}
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            uid=data.get("uid", ""),
            finalizers=list(data.get("finalizers") or []),
            owner_references=[
                OwnerReference.from_dict(ref) for ref in data.get("ownerReferences") or []
            ],
            creation_timestamp=_parse_time(data.get("creationTimestamp")),
            deletion_timestamp=_parse_time(data.get("deletionTimestamp")),
        )


@dataclass
class PostgresqlsDatabase:
    """A PostgreSQL database requested by an environment."""

    name: str = ""


@dataclass
class DatabaseSpec:
    """The databases an environment asks for."""

    postgresql: list[PostgresqlsDatabase] = field(default_factory=list)


@dataclass
class EnvironmentSpec:
    """Desired state of an Environment."""

    databases: DatabaseSpec = field(default_factory=DatabaseSpec)


@dataclass
class EnvironmentStatus:
    """Observed state of an Environment."""

    status: str = ""
    message: str = ""
    errors: list[str] = field(default_factory=list)


def _envelope(kind: str, metadata: dict[str, Any], **body: Any) -> dict[str, Any]:
    return {"apiVersion": GROUP_VERSION.api_version, "kind": kind, "metadata": metadata, **body}


@dataclass
class Environment:
    """An environment and the databases it holds."""

    KIND: ClassVar[str] = "Environment"

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: EnvironmentSpec = field(default_factory=EnvironmentSpec)
    status: EnvironmentStatus = field(default_factory=EnvironmentStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> dict[str, Any]:
        databases = [_compact({"name": db.name}) for db in self.spec.databases.postgresql]
        return _envelope(
            self.KIND,
            self.metadata.to_dict(),
            spec={"databases": _compact({"postgresqls": databases})},
            status=_compact(
                {
                    "status": self.status.status,
                    "message": self.status.message,
                    "errors": list(self.status.errors),
                }
            ),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        databases = (data.get("spec") or {}).get("databases") or {}
        status = data.get("status") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=EnvironmentSpec(
                DatabaseSpec(
                    [PostgresqlsDatabase(db.get("name", "")) for db in databases.get("postgresqls") or []]
                )
            ),
            status=EnvironmentStatus(
                status=status.get("status", ""),
                message=status.get("message", ""),
                errors=list(status.get("errors") or []),
            ),
        )


@dataclass
class EnvironmentList:
    """A list of Environment objects."""

    KIND: ClassVar[str] = "EnvironmentList"

    items: list[Environment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _envelope(self.KIND, {}, items=[item.to_dict() for item in self.items])


@dataclass
class PostgresqlDatabaseSpec:
    """Desired state of a PostgresqlDatabase."""

    name: str = ""


@dataclass
class PostgresqlDatabaseStatus:
    """Observed state of a PostgresqlDatabase."""

    status: str = ""


@dataclass
class PostgresqlDatabase:
    """A database kept on the configured PostgreSQL server."""

    KIND: ClassVar[str] = "PostgresqlDatabase"

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: PostgresqlDatabaseSpec = field(default_factory=PostgresqlDatabaseSpec)
    status: PostgresqlDatabaseStatus = field(default_factory=PostgresqlDatabaseStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> dict[str, Any]:
        return _envelope(
            self.KIND,
            self.metadata.to_dict(),
            spec=_compact({"name": self.spec.name}),
            status=_compact({"status": self.status.status}),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PostgresqlDatabase:
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=PostgresqlDatabaseSpec((data.get("spec") or {}).get("name", "")),
            status=PostgresqlDatabaseStatus((data.get("status") or {}).get("status", "")),
        )


@dataclass
class PostgresqlDatabaseList:
    """A list of PostgresqlDatabase objects."""

    KIND: ClassVar[str] = "PostgresqlDatabaseList"

    items: list[PostgresqlDatabase] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _envelope(self.KIND, {}, items=[item.to_dict() for item in self.items])


def new_controller_ref(owner: Any, gvk: GroupVersionKind) -> OwnerReference:
    """Build an owner reference that marks ``owner`` as the controlling owner."""
    return OwnerReference(
        api_version=gvk.api_version,
        kind=gvk.kind,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )