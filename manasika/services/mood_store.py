"""
Mood entry store: owns creation, mutation and deletion of mood entries and keeps
the persisted copy in step with the in-memory collection.
"""

import json
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple, Union

from ..models.core import MoodEntry, MoodStats
from ..utils.blob_store import ENTRIES_KEY, BlobStore, BlobStoreError
from ..utils.json_utils import dumps, loads
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import now as current_time
from ..utils.timestamp_utils import parse_date
from ..utils.timestamp_utils import today as current_day
from ..utils.validation import MoodValidationError, validate_mood, validate_note
from .mood_statistics import calculate_mood_stats

logger = get_logger(__name__)

UPDATABLE_FIELDS = ('mood', 'note', 'date')
SORT_KEYS = ('date', 'mood')


def _generate_id() -> str:
    return uuid.uuid4().hex


class MoodStore:
    """Ordered collection of mood entries, most recent first."""

    def __init__(self,
                 storage: BlobStore,
                 seed_samples: bool = False,
                 clock: Callable[[], datetime] = current_time,
                 calendar: Callable[[], date] = current_day):
        """
        Initialize the store and load persisted entries.

        Args:
            storage: Blob store holding the serialized collection
            seed_samples: Create two sample entries when nothing was ever stored
            clock: Source of timestamps
            calendar: Source of the current calendar day
        """
        self.storage = storage
        self._clock = clock
        self._calendar = calendar
        self._entries: List[MoodEntry] = self._load(seed_samples)
        if self._seeded:
            self._persist()

        logger.info(f'Initialized MoodStore with {len(self._entries)} entries')

    def _load(self, seed_samples: bool) -> List[MoodEntry]:
        self._seeded = False
        try:
            blob = self.storage.get(ENTRIES_KEY)
        except BlobStoreError as e:
            logger.error(f'Failed to read saved entries: {e}')
            return []

        if blob is None:
            if not seed_samples:
                return []
            self._seeded = True
            return self._sample_entries()

        try:
            data = loads(blob)
            if not isinstance(data, list):
                raise ValueError(f'expected a list, got {type(data).__name__}')
            entries = [MoodEntry.from_dict(item) for item in data]
            for entry in entries:
                validate_mood(entry.mood)
            return entries
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, MoodValidationError) as e:
            logger.error(f'Error loading saved entries, starting empty: {e}')
            return []

    def _sample_entries(self) -> List[MoodEntry]:
        today = self._calendar()
        stamp = self._clock()
        yesterday_stamp = stamp - timedelta(days=1)
        logger.debug('No saved entries found, adding sample entries')
        return [
            MoodEntry(id=_generate_id(),
                      date=today,
                      mood=4,
                      note='Feeling good today! Working on my mental health.',
                      created_at=stamp,
                      updated_at=stamp),
            MoodEntry(id=_generate_id(),
                      date=today - timedelta(days=1),
                      mood=3,
                      note='Average day, some ups and downs.',
                      created_at=yesterday_stamp,
                      updated_at=yesterday_stamp),
        ]

    def _persist(self) -> None:
        try:
            self.storage.set(ENTRIES_KEY, dumps([entry.to_dict() for entry in self._entries]))
        except BlobStoreError as e:
            logger.error(f'Failed to save entries: {e}')

    def _index_of(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def add(self, mood: Any, note: Optional[str] = None, date: Optional[Union[str, date]] = None) -> MoodEntry:
        """Log a mood entry.

        Args:
            mood: Rating 1-5; anything else is rejected
            note: Optional annotation, at most 500 characters
            date: Calendar day (ISO string or date), today if None

        Returns:
            The created MoodEntry

        Raises:
            MoodValidationError: If mood, note or date are invalid; nothing is stored
        """
        mood = validate_mood(mood)
        note = validate_note(note)
        day = self._parse_day(date) if date is not None else self._calendar()

        stamp = self._clock()
        entry = MoodEntry(id=_generate_id(), date=day, mood=mood, note=note, created_at=stamp, updated_at=stamp)
        self._entries.insert(0, entry)
        self._persist()

        logger.debug(f'Added mood entry {entry.id} ({entry.date}: {entry.mood})')
        return entry

    def update(self, entry_id: str, **fields: Any) -> Optional[MoodEntry]:
        """Merge fields into an entry and refresh its ``updated_at``.

        Args:
            entry_id: Entry to update
            **fields: Any of mood, note, date

        Returns:
            The updated entry, or None if no entry has that id

        Raises:
            MoodValidationError: If a field is unknown or invalid; nothing is changed
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise MoodValidationError(f'Fields can not be updated: {", ".join(sorted(unknown))}')

        changes = {}
        if 'mood' in fields:
            changes['mood'] = validate_mood(fields['mood'])
        if 'note' in fields:
            changes['note'] = validate_note(fields['note'])
        if fields.get('date') is not None:
            changes['date'] = self._parse_day(fields['date'])

        index = self._index_of(entry_id)
        if index is None:
            logger.warning(f'Mood entry not found for update: {entry_id}')
            return None

        entry = self._entries[index].with_updates(updated_at=self._clock(), **changes)
        self._entries[index] = entry
        self._persist()

        logger.debug(f'Updated mood entry {entry_id}')
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove an entry. Returns False (and changes nothing) if the id is absent."""
        index = self._index_of(entry_id)
        if index is None:
            logger.debug(f'Mood entry not found for delete: {entry_id}')
            return False

        del self._entries[index]
        self._persist()
        logger.debug(f'Deleted mood entry {entry_id}')
        return True

    def get(self, entry_id: str) -> Optional[MoodEntry]:
        index = self._index_of(entry_id)
        return None if index is None else self._entries[index]

    def list(self) -> Tuple[MoodEntry, ...]:
        """Immutable snapshot of all entries, most recently added first."""
        return tuple(self._entries)

    def entries_in_range(self, start: Union[str, date], end: Union[str, date]) -> Tuple[MoodEntry, ...]:
        """Entries whose date falls within [start, end], inclusive."""
        start, end = self._parse_day(start), self._parse_day(end)
        return tuple(entry for entry in self._entries if start <= entry.date <= end)

    def recent(self, days: int = 7) -> Tuple[MoodEntry, ...]:
        """Entries from the last ``days`` days up to and including today."""
        today = self._calendar()
        return self.entries_in_range(today - timedelta(days=days), today)

    def query(self, mood: Optional[int] = None, sort_by: str = 'date') -> List[MoodEntry]:
        """History view: optionally keep one mood level, then sort newest or happiest first.

        Raises:
            MoodValidationError: If the mood filter or sort key is invalid
        """
        if sort_by not in SORT_KEYS:
            raise MoodValidationError(f'Unknown sort key: {sort_by}')
        if mood is not None:
            mood = validate_mood(mood)

        entries = [entry for entry in self._entries if mood is None or entry.mood == mood]
        if sort_by == 'date':
            return sorted(entries, key=lambda e: e.date, reverse=True)
        return sorted(entries, key=lambda e: e.mood, reverse=True)

    def stats(self) -> MoodStats:
        """Stats of the current collection, computed on demand."""
        return calculate_mood_stats(self._entries, self._calendar())

    def clear(self) -> None:
        """Drop every entry."""
        self._entries = []
        self._persist()
        logger.info('Cleared all mood entries')

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def _parse_day(value: Union[str, date]) -> date:
        try:
            return parse_date(value)
        except ValueError as e:
            raise MoodValidationError(f'Invalid date {value!r}: {e}')
