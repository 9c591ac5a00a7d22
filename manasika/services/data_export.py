"""
User-triggered data dumps and the clear-all action.
"""

from datetime import datetime
from typing import Iterable, Optional

from ..models.core import MoodEntry, UserProfile
from ..utils.blob_store import ALL_KEYS, BlobStore
from ..utils.json_utils import dumps
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import now as current_time
from .mood_statistics import get_mood_label

logger = get_logger(__name__)

CSV_HEADER = 'Date,Mood,Level,Note'
EXPORT_VERSION = '1.0.0'


def _quote(note: str) -> str:
    return '"' + note.replace('"', '""') + '"'


def export_csv(entries: Iterable[MoodEntry]) -> str:
    """Mood history as CSV.

    Columns are the ISO date, the mood label, the numeric level and the note,
    which is always quoted with embedded quotes doubled.

    Args:
        entries: Entries in the order they should appear

    Returns:
        CSV text with ``\\n`` line separators and no trailing newline
    """
    rows = [CSV_HEADER]
    for entry in entries:
        rows.append(f'{entry.date.isoformat()},{get_mood_label(entry.mood)},{entry.mood},{_quote(entry.note or "")}')
    return '\n'.join(rows)


def export_json(profile: UserProfile, entries: Iterable[MoodEntry], now: Optional[datetime] = None) -> str:
    """Full data dump: profile, every entry, export time and a version tag."""
    data = {
        'profile': profile.to_dict(),
        'moodEntries': [entry.to_dict() for entry in entries],
        'exportDate': (now or current_time()).isoformat(),
        'version': EXPORT_VERSION,
    }
    return dumps(data, indent=2)


def csv_filename(now: Optional[datetime] = None) -> str:
    return f'mood-history-{(now or current_time()).date().isoformat()}.csv'


def json_filename(now: Optional[datetime] = None) -> str:
    return f'manasika-data-{(now or current_time()).date().isoformat()}.json'


def clear_all_data(storage: BlobStore) -> None:
    """Remove the profile, entries and chat history blobs.

    Raises:
        BlobStoreError: If the store can not be written
    """
    for key in ALL_KEYS:
        storage.remove(key)
    logger.info('Cleared all stored data')
