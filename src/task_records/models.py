"""Data models for the task record store."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

# Page size used by ``RecordStore.list`` when the caller gives none.
DEFAULT_PAGE_SIZE = 10


@dataclass
class Record:
    """A single task record.

    The record has no identity of its own; the store assigns the id and
    keeps it alongside the record rather than inside it.
    """

    name: str
    description: str
    is_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RecordEntry:
    """A record paired with the id the store assigned to it."""

    id: int
    record: Record

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id}
        d.update(self.record.to_dict())
        return d

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RecordEntry":
        """Build an entry from its dict form, rejecting mistyped fields."""
        record_id = raw["id"]
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise ValueError(f"id must be an integer, got {record_id!r}")
        for key in ("name", "description"):
            if not isinstance(raw[key], str):
                raise ValueError(f"{key} must be a string, got {raw[key]!r}")
        is_completed = raw.get("is_completed", False)
        if not isinstance(is_completed, bool):
            raise ValueError(f"is_completed must be a boolean, got {is_completed!r}")
        return cls(
            id=record_id,
            record=Record(
                name=raw["name"],
                description=raw["description"],
                is_completed=is_completed,
            ),
        )


@dataclass
class StoreSnapshot:
    """Point-in-time copy of a store: the id counter plus ordered entries."""

    next_id: int = 0
    entries: List[RecordEntry] = field(default_factory=list)

    def validate(self) -> None:
        """Raise :class:`ValueError` if the snapshot cannot back a store."""
        if self.next_id < 0:
            raise ValueError(f"next_id must be non-negative, got {self.next_id}")
        previous = -1
        for entry in self.entries:
            if entry.id < 0:
                raise ValueError(f"record id must be non-negative, got {entry.id}")
            if entry.id == previous:
                raise ValueError(f"duplicate record id {entry.id}")
            # ids are assigned in creation order, so the order index ascends
            if entry.id < previous:
                raise ValueError(
                    f"record id {entry.id} follows {previous}; entries must be in creation order"
                )
            if entry.id >= self.next_id:
                raise ValueError(
                    f"record id {entry.id} is not below next_id {self.next_id}"
                )
            previous = entry.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "next_id": self.next_id,
            "records": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "StoreSnapshot":
        return cls(
            next_id=int(raw.get("next_id", 0)),
            entries=[RecordEntry.from_dict(r) for r in raw.get("records", [])],
        )
