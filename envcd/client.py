"""Request types and an in-memory object store for reconcilers."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class NamespacedName:
    """The namespace and name that identify an object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


@dataclass(frozen=True)
class Request:
    """A request to reconcile one object."""

    namespaced_name: NamespacedName

    @property
    def name(self) -> str:
        return self.namespaced_name.name

    @property
    def namespace(self) -> str:
        return self.namespaced_name.namespace


@dataclass(frozen=True)
class Result:
    """Outcome of a reconciliation."""

    requeue: bool = False
    requeue_after: timedelta = timedelta(0)


class NotFoundError(LookupError):
    """The requested object does not exist."""

    def __init__(self, kind: str, key: NamespacedName) -> None:
        super().__init__(f'{kind} "{key.name}" not found')
        self.kind = kind
        self.key = key


class AlreadyExistsError(Exception):
    """An object with the same kind, namespace and name already exists."""

    def __init__(self, kind: str, key: NamespacedName) -> None:
        super().__init__(f'{kind} "{key.name}" already exists')
        self.kind = kind
        self.key = key


def _slot(obj: Any) -> tuple[str, NamespacedName]:
    return obj.KIND, NamespacedName(obj.metadata.namespace, obj.metadata.name)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class InMemoryClient:
    """Stores objects by kind and key, handing out copies.

    Updates leave the status untouched, status updates leave everything
    else untouched, and deletion waits for finalizers to be removed.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, NamespacedName], Any] = {}

    def _stored(self, kind: str, key: NamespacedName) -> Any:
        try:
            return self._objects[(kind, key)]
        except KeyError:
            raise NotFoundError(kind, key) from None

    def get(self, kind: type[T], key: NamespacedName) -> T:
        return copy.deepcopy(self._stored(kind.KIND, key))

    def create(self, obj: Any) -> None:
        slot = _slot(obj)
        if slot in self._objects:
            raise AlreadyExistsError(*slot)
        obj.metadata.uid = obj.metadata.uid or str(uuid.uuid4())
        obj.metadata.creation_timestamp = obj.metadata.creation_timestamp or _now()
        self._objects[slot] = copy.deepcopy(obj)

    def update(self, obj: Any) -> None:
        slot = _slot(obj)
        stored = self._stored(*slot)
        metadata = copy.deepcopy(obj.metadata)
        metadata.uid = stored.metadata.uid
        metadata.creation_timestamp = stored.metadata.creation_timestamp
        metadata.deletion_timestamp = stored.metadata.deletion_timestamp
        stored.metadata = metadata
        stored.spec = copy.deepcopy(obj.spec)
        if metadata.deletion_timestamp is not None and not metadata.finalizers:
            del self._objects[slot]

    def update_status(self, obj: Any) -> None:
        self._stored(*_slot(obj)).status = copy.deepcopy(obj.status)

    def delete(self, obj: Any) -> None:
        slot = _slot(obj)
        stored = self._stored(*slot)
        if not stored.metadata.finalizers:
            del self._objects[slot]
        elif stored.metadata.deletion_timestamp is None:
            stored.metadata.deletion_timestamp = _now()