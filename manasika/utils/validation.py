"""
Input validation shared by the journal stores.
"""

from typing import Any, Optional

from ..models.core import MAX_MOOD, MIN_MOOD, NOTE_MAX_LENGTH


class ValidationError(Exception):
    """Base exception for rejected user input. No state is mutated when raised."""
    pass


class MoodValidationError(ValidationError):
    """Custom exception for invalid mood entries."""
    pass


def validate_mood(mood: Any) -> int:
    """Check a mood rating.

    Out-of-range values are rejected rather than clamped.

    Args:
        mood: Candidate rating

    Returns:
        The rating as int

    Raises:
        MoodValidationError: If the rating is missing, not an integer or outside 1-5
    """
    if mood is None:
        raise MoodValidationError('Please select a mood level')
    if isinstance(mood, bool) or not isinstance(mood, int):
        raise MoodValidationError(f'Mood must be a whole number between {MIN_MOOD} and {MAX_MOOD}, got {mood!r}')
    if not MIN_MOOD <= mood <= MAX_MOOD:
        raise MoodValidationError(f'Mood must be between {MIN_MOOD} and {MAX_MOOD}, got {mood}')
    return mood


def validate_note(note: Optional[str]) -> str:
    """Normalize an optional note and enforce its maximum length.

    Raises:
        MoodValidationError: If the note is not text or is too long
    """
    if note is None:
        return ''
    if not isinstance(note, str):
        raise MoodValidationError('Note must be text')
    note = note.strip()
    if len(note) > NOTE_MAX_LENGTH:
        raise MoodValidationError(f'Note must be at most {NOTE_MAX_LENGTH} characters, got {len(note)}')
    return note
