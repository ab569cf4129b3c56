from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

Record = dict[str, Any]


class ResourceControllerPort(Protocol):
    """
    Plain CRUD over one table. `scope` narrows every operation to rows whose
    columns equal the given values (e.g. {"announcement_id": 7} for photos).
    """

    async def create(
        self, fields: Mapping[str, Any], *, scope: Optional[Mapping[str, Any]] = None
    ) -> Record:
        """Insert a row. Raise ResourceNotFound on a dangling reference."""

    async def get_by_id(
        self, record_id: int, *, scope: Optional[Mapping[str, Any]] = None
    ) -> Record:
        """Raise ResourceNotFound if missing."""

    async def get_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> list[Record]:
        """All rows, optionally narrowed by column equality."""

    async def update(
        self,
        record_id: Optional[int],
        fields: Mapping[str, Any],
        *,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> Record:
        """
        Update one row. With record_id=None the row is located by scope alone.
        Raise ResourceNotFound if nothing matched.
        """

    async def delete(
        self, record_id: int, *, scope: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Raise ResourceNotFound if nothing matched."""


class AnnouncementsControllerPort(ResourceControllerPort, Protocol):
    async def link_characteristic(
        self, announcement_id: int, characteristic_id: int
    ) -> Record:
        """Attach a characteristic. Linking twice is a no-op."""

    async def unlink_characteristic(
        self, announcement_id: int, characteristic_id: int
    ) -> None:
        """Raise ResourceNotFound if the link does not exist."""
