"""Per-user history of resolved photos."""

from dataclasses import dataclass
from typing import Protocol

from photo_relay.domain.uploads import PhotoRecord


class PhotoHistory(Protocol):
    """Append-only log of photos per user."""

    def append(self, user_id: int, record: PhotoRecord) -> None:
        """Append a record to the user's history."""

    def latest(self, user_id: int) -> PhotoRecord | None:
        """Return the most recently appended record for the user."""

    def records(self, user_id: int) -> list[PhotoRecord]:
        """Return the user's records, oldest first."""

    def user_count(self) -> int:
        """Return the number of users with history."""


@dataclass
class InMemoryPhotoHistory(PhotoHistory):
    """Photo history kept in process memory. Never pruned."""

    _records: dict[int, list[PhotoRecord]]

    def __init__(self) -> None:
        self._records = {}

    def append(self, user_id: int, record: PhotoRecord) -> None:
        self._records.setdefault(user_id, []).append(record)

    def latest(self, user_id: int) -> PhotoRecord | None:
        records = self._records.get(user_id)
        if not records:
            return None
        return records[-1]

    def records(self, user_id: int) -> list[PhotoRecord]:
        """Return a copy of the user's history, oldest first."""
        return list(self._records.get(user_id, []))

    def user_count(self) -> int:
        return len(self._records)
