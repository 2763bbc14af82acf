"""Service for loading, updating and persisting hand miss statistics."""
import json
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from rangequiz import monitoring
from rangequiz.errors import PersistenceWriteError, StorageParseError
from rangequiz.models.quiz_models import Item, ProgressRecord, ProgressStore
from rangequiz.services.reference_loader import ensure_minimum_misses
from rangequiz.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)


def serialize(store: ProgressStore) -> str:
    """Serialize a store to the persisted JSON format."""
    per_hand: Dict[str, Dict[str, Any]] = {}
    for hand, record in store.per_hand.items():
        entry: Dict[str, Any] = {"misses": record.misses}
        if record.last_missed_at is not None:
            entry["lastMissedAt"] = record.last_missed_at
        per_hand[hand] = entry
    return json.dumps(
        {"totalMisses": store.total_misses, "perHand": per_hand},
        ensure_ascii=False,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def deserialize(blob: str) -> ProgressStore:
    """Parse a persisted blob, raising StorageParseError if it is not a valid store."""
    try:
        parsed = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise StorageParseError(f"Progress is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise StorageParseError("Progress must be a JSON object")

    total = parsed.get("totalMisses")
    if total is None:
        total = 0
    if not _is_int(total) or total < 0:
        raise StorageParseError(f"Invalid totalMisses: {total!r}")

    raw_per_hand = parsed.get("perHand")
    if raw_per_hand is None:
        raw_per_hand = {}
    if not isinstance(raw_per_hand, dict):
        raise StorageParseError("perHand must be a JSON object")

    per_hand: Dict[str, ProgressRecord] = {}
    for hand, entry in raw_per_hand.items():
        if not isinstance(entry, dict):
            raise StorageParseError(f"Invalid record for {hand!r}")
        misses = entry.get("misses")
        if not _is_int(misses) or misses < 1:
            raise StorageParseError(f"Invalid misses for {hand!r}: {misses!r}")
        last_missed_at = entry.get("lastMissedAt")
        if last_missed_at is not None and not isinstance(last_missed_at, str):
            raise StorageParseError(f"Invalid lastMissedAt for {hand!r}")
        per_hand[hand] = ProgressRecord(misses=misses, last_missed_at=last_missed_at)

    return ProgressStore(total_misses=total, per_hand=per_hand)


def merge(items: Iterable[Item], store: ProgressStore) -> List[Item]:
    """Overlay stored miss counts and timestamps onto reference items."""
    merged = []
    for item in items:
        record = store.get(item.hand)
        if record is None:
            merged.append(item)
        else:
            merged.append(replace(
                item,
                misses=ensure_minimum_misses(record.misses),
                last_missed_at=record.last_missed_at,
            ))
    return merged


def record_miss(
    store: ProgressStore, hand: str, timestamp: Optional[str], baseline: int = 0
) -> ProgressStore:
    """Return a new store with one more miss recorded for hand.

    A hand without a record starts from ``baseline``, so the first miss is
    stored as ``baseline + 1``.
    """
    current = store.get(hand)
    misses = (current.misses if current else baseline) + 1
    per_hand = dict(store.per_hand)
    per_hand[hand] = ProgressRecord(misses=misses, last_missed_at=timestamp)
    return ProgressStore(total_misses=store.total_misses + 1, per_hand=per_hand)


class ProgressService:
    """Reads and writes the progress store through a key-value storage."""

    def __init__(self, storage: KeyValueStorage, storage_key: str):
        """Initialize the service with a storage and the key of the blob."""
        self.storage = storage
        self.storage_key = storage_key

    def load(self) -> ProgressStore:
        """Load the stored progress, falling back to an empty store."""
        try:
            blob = self.storage.get(self.storage_key)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to read progress from {self.storage_key}, resetting: {e}")
            monitoring.progress_resets.inc()
            return ProgressStore()

        if not blob:
            return ProgressStore()

        try:
            store = deserialize(blob)
        except StorageParseError as e:
            logger.warning(f"Failed to parse progress from {self.storage_key}, resetting: {e}")
            monitoring.progress_resets.inc()
            return ProgressStore()

        logger.debug(f"Loaded progress for {len(store.per_hand)} hands, total misses {store.total_misses}")
        return store

    def persist(self, store: ProgressStore) -> bool:
        """Write the store. Returns False if the write failed."""
        try:
            self._write(serialize(store))
        except PersistenceWriteError as e:
            logger.error(f"Failed to persist progress: {e}")
            monitoring.persistence_errors.inc()
            return False
        return True

    def _write(self, blob: str) -> None:
        try:
            self.storage.set(self.storage_key, blob)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceWriteError(f"Could not write {self.storage_key}: {e}") from e
