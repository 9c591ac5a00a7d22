"""
Profile store for the single local user.
"""

import json
from dataclasses import replace
from typing import Any, Optional

from ..models.core import UserProfile
from ..utils.blob_store import PROFILE_KEY, BlobStore, BlobStoreError
from ..utils.json_utils import dumps, loads
from ..utils.logging_config import get_logger
from ..utils.validation import ValidationError

logger = get_logger(__name__)

LANGUAGES = ('en', 'hi')
THEMES = ('light', 'dark')
PREFERENCE_FIELDS = ('daily_reminders', 'weekly_insights', 'ai_suggestions', 'language', 'theme')


class ProfileValidationError(ValidationError):
    """Custom exception for invalid profile updates."""
    pass


class ProfileStore:
    """Loads, validates and saves the user profile."""

    def __init__(self, storage: BlobStore):
        self.storage = storage
        self.profile = self._load()

    def _load(self) -> UserProfile:
        try:
            blob = self.storage.get(PROFILE_KEY)
            if blob is None:
                return UserProfile()
            data = loads(blob)
            if not isinstance(data, dict):
                raise ValueError(f'expected an object, got {type(data).__name__}')
            return UserProfile.from_dict(data)
        except (BlobStoreError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f'Error loading profile, using defaults: {e}')
            return UserProfile()

    def save(self, name: Optional[str] = None, email: Optional[str] = None, **preferences: Any) -> UserProfile:
        """Validate and persist profile changes.

        Args:
            name: Display name; the saved profile must have a non-blank name
            email: Contact email
            **preferences: Any of daily_reminders, weekly_insights, ai_suggestions, language, theme

        Returns:
            The saved profile

        Raises:
            ProfileValidationError: If a field is invalid; nothing is saved
        """
        unknown = set(preferences) - set(PREFERENCE_FIELDS)
        if unknown:
            raise ProfileValidationError(f'Unknown preferences: {", ".join(sorted(unknown))}')
        if preferences.get('language', LANGUAGES[0]) not in LANGUAGES:
            raise ProfileValidationError(f'Language must be one of {", ".join(LANGUAGES)}')
        if preferences.get('theme', THEMES[0]) not in THEMES:
            raise ProfileValidationError(f'Theme must be one of {", ".join(THEMES)}')

        name = (self.profile.name if name is None else name).strip()
        if not name:
            raise ProfileValidationError('Please enter your name')

        profile = replace(self.profile,
                          name=name,
                          email=(self.profile.email if email is None else email).strip(),
                          preferences=replace(self.profile.preferences, **preferences))

        try:
            self.storage.set(PROFILE_KEY, dumps(profile.to_dict()))
        except BlobStoreError as e:
            logger.error(f'Failed to save profile: {e}')

        self.profile = profile
        logger.info('Profile updated')
        return profile

    def reset(self) -> UserProfile:
        """Back to the default profile (the persisted copy is left to the caller)."""
        self.profile = UserProfile()
        return self.profile
