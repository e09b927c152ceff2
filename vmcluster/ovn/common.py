"""Base classes for objects stored in the northbound database."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, TypeVar

from vmcluster.ovn.deserialization import (
    deserialize_object,
    deserialize_string,
    deserialize_uuid,
)
from vmcluster.ovn.errors import OvnNotFound

log = logging.getLogger(__name__)

T = TypeVar("T", bound="OvnObject")
N = TypeVar("N", bound="OvnNamedObject")


class OvnObject:
    """A database row identified by its UUID."""

    ovn_type: ClassVar[str]

    def __init__(self, ovn: Any, uuid: str) -> None:
        self.ovn = ovn
        self.uuid = uuid

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uuid={self.uuid!r})"

    @classmethod
    def _from_fields(cls: type[T], ovn: Any, uuid: str, obj: dict[str, Any]) -> T:
        return cls(ovn, uuid)

    @classmethod
    def from_row(cls: type[T], ovn: Any, value: Any) -> T:
        """Build an object from a row returned by a select."""
        obj = deserialize_object(value)
        return cls._from_fields(ovn, deserialize_uuid(obj), obj)

    @classmethod
    def list(cls: type[T], ovn: Any) -> list[T]:
        """Return every object of this type."""
        return [cls.from_row(ovn, row) for row in ovn.list_objects(cls.ovn_type)]


class OvnNamedObject(OvnObject):
    """A database row that also carries a name."""

    def __init__(self, ovn: Any, uuid: str, name: str) -> None:
        super().__init__(ovn, uuid)
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uuid={self.uuid!r}, name={self.name!r})"

    @classmethod
    def _from_fields(cls: type[N], ovn: Any, uuid: str, obj: dict[str, Any]) -> N:
        return cls(ovn, uuid, deserialize_string(obj, "name"))

    @classmethod
    def get_by_name(cls: type[N], ovn: Any, name: str) -> N:
        """Return the object with the given name or raise OvnNotFound."""
        for item in cls.list(ovn):
            if item.name == name:
                return item
        raise OvnNotFound(cls.ovn_type, name)

    @classmethod
    def create(cls: type[N], ovn: Any, name: str) -> N:
        """Insert an object with only a name and return it."""
        log.info("create %s %s", cls.ovn_type, name)
        ovn.insert(cls.ovn_type, {"name": name})
        return cls.get_by_name(ovn, name)

    @classmethod
    def create_if_missing(cls: type[N], ovn: Any, name: str) -> N:
        """Return the named object, creating it first if it does not exist."""
        try:
            return cls.get_by_name(ovn, name)
        except OvnNotFound:
            log.info("ovn: %s %s doesn't exist, creating", cls.ovn_type, name)
            return cls.create(ovn, name)

    def delete(self) -> None:
        """Delete this object from the database."""
        self.ovn.delete_by_uuid(self.ovn_type, self.uuid)