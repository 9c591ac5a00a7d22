"""
Application context: builds and wires every journal component from configuration
and exposes the user-triggered actions.
"""

import random
from typing import Any, Dict, List, Optional

from .models.core import Advisory, MoodEntry
from .services import data_export
from .services.conversation import ConversationSession
from .services.mood_statistics import (get_mood_chart_data, get_mood_distribution, get_mood_emoji, get_mood_label,
                                       get_mood_message, get_top_mood_triggers)
from .services.mood_store import MoodStore
from .services.profile_store import ProfileStore
from .services.response_engine import ResponseEngine, ResponseStrategy, select_strategy
from .utils.blob_store import BlobStore, BlobStoreError, create_blob_store
from .utils.config import AppConfig
from .utils.logging_config import get_logger
from .utils.validation import ValidationError

logger = get_logger(__name__)


def _entry_view(entry: MoodEntry) -> Dict[str, Any]:
    view = entry.to_dict()
    view['label'] = get_mood_label(entry.mood)
    view['emoji'] = get_mood_emoji(entry.mood)
    return view


class AdvisoryLog:
    """Collects advisories raised while handling an action."""

    def __init__(self):
        self._pending: List[Advisory] = []

    def __call__(self, advisory: Advisory) -> None:
        logger.info(f'Advisory ({advisory.type}): {advisory.message}')
        self._pending.append(advisory)

    def drain(self) -> List[Dict[str, str]]:
        pending, self._pending = self._pending, []
        return [{'type': a.type, 'message': a.message} for a in pending]


class ManasikaApp:
    """Owns the stores, the response engine and the conversation session."""

    def __init__(self,
                 config: AppConfig,
                 storage: Optional[BlobStore] = None,
                 strategy: Optional[ResponseStrategy] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the application context.

        Args:
            config: Application configuration
            storage: Blob store, built from config.storage if None
            strategy: Reply strategy, selected from config.bedrock_llm if None
            rng: Random source for rule-based replies
        """
        self.config = config
        self.advisories = AdvisoryLog()
        self.storage = storage or create_blob_store(config.storage)

        self.moods = MoodStore(self.storage, seed_samples=config.storage.seed_samples)
        self.profiles = ProfileStore(self.storage)

        strategy = strategy or select_strategy(config.bedrock_llm,
                                               notify=self.advisories,
                                               rng=rng,
                                               context_messages=config.chat.context_messages)
        self.engine = ResponseEngine(strategy, notify=self.advisories)
        self.conversation = ConversationSession(self.engine, self.storage, history_limit=config.chat.history_limit)

        logger.info('Initialized ManasikaApp')

    def _result(self, **payload: Any) -> Dict[str, Any]:
        payload['advisories'] = self.advisories.drain()
        return payload

    def _rejected(self, error: ValidationError) -> Dict[str, Any]:
        logger.debug(f'Rejected input: {error}')
        self.advisories(Advisory(type='warning', message=str(error)))
        return self._result(status='rejected')

    def _cancelled(self, action: str) -> Dict[str, Any]:
        logger.debug(f'{action} not confirmed, nothing changed')
        return self._result(status='cancelled')

    # Mood journal

    def log_mood(self, mood: Any, note: Optional[str] = None, date: Optional[str] = None) -> Dict[str, Any]:
        try:
            entry = self.moods.add(mood, note, date)
        except ValidationError as e:
            return self._rejected(e)
        self.advisories(Advisory(type='success', message='Mood logged successfully!'))
        return self._result(status='ok', entry=_entry_view(entry))

    def update_mood(self, entry_id: str, **fields: Any) -> Dict[str, Any]:
        try:
            entry = self.moods.update(entry_id, **fields)
        except ValidationError as e:
            return self._rejected(e)
        if entry is None:
            return self._result(status='not_found')
        return self._result(status='ok', entry=_entry_view(entry))

    def delete_mood(self, entry_id: str, confirm: bool = False) -> Dict[str, Any]:
        if not confirm:
            return self._cancelled('Delete entry')
        if not self.moods.delete(entry_id):
            return self._result(status='not_found')
        self.advisories(Advisory(type='info', message='Entry deleted'))
        return self._result(status='ok')

    def list_moods(self, mood: Optional[int] = None, sort_by: str = 'date') -> Dict[str, Any]:
        try:
            entries = self.moods.query(mood=mood, sort_by=sort_by)
        except ValidationError as e:
            return self._rejected(e)
        return self._result(status='ok', entries=[_entry_view(entry) for entry in entries])

    def mood_stats(self) -> Dict[str, Any]:
        stats = self.moods.stats()
        return self._result(status='ok', stats=stats.to_dict(), message=get_mood_message(stats.average_mood))

    def mood_chart(self, days: int = 7) -> Dict[str, Any]:
        try:
            points = get_mood_chart_data(self.moods.list(), days)
        except ValueError as e:
            return self._rejected(ValidationError(str(e)))
        return self._result(status='ok', points=[{'label': p.label, 'value': p.value, 'date': p.date} for p in points])

    def mood_distribution(self) -> Dict[str, Any]:
        distribution = get_mood_distribution(self.moods.list())
        return self._result(status='ok', distribution={str(level): count for level, count in distribution.items()})

    def mood_triggers(self) -> Dict[str, Any]:
        return self._result(status='ok', triggers=get_top_mood_triggers(self.moods.list()))

    # Chat companion

    def send_chat_message(self, text: str) -> Dict[str, Any]:
        try:
            reply = self.conversation.send(text)
        except ValidationError as e:
            return self._rejected(e)
        return self._result(status='ok', reply=reply.to_dict(), provider=self.engine.provider_name)

    def chat_history(self) -> Dict[str, Any]:
        messages = [self.conversation.welcome_message()] + list(self.conversation.history())
        return self._result(status='ok', messages=[msg.to_dict() for msg in messages])

    def clear_chat(self, confirm: bool = False) -> Dict[str, Any]:
        if not confirm:
            return self._cancelled('Clear chat')
        self.conversation.clear()
        self.advisories(Advisory(type='info', message='Chat history cleared successfully'))
        return self._result(status='ok')

    # Profile and data

    def get_profile(self) -> Dict[str, Any]:
        return self._result(status='ok', profile=self.profiles.profile.to_dict())

    def save_profile(self, name: Optional[str] = None, email: Optional[str] = None, **preferences: Any) -> Dict[str, Any]:
        try:
            profile = self.profiles.save(name=name, email=email, **preferences)
        except ValidationError as e:
            return self._rejected(e)
        self.advisories(Advisory(type='success', message='Profile updated successfully!'))
        return self._result(status='ok', profile=profile.to_dict())

    def export_mood_csv(self) -> Dict[str, Any]:
        content = data_export.export_csv(self.moods.list())
        return self._result(status='ok', filename=data_export.csv_filename(), content=content)

    def export_data_json(self) -> Dict[str, Any]:
        content = data_export.export_json(self.profiles.profile, self.moods.list())
        self.advisories(Advisory(type='success', message='Data exported successfully!'))
        return self._result(status='ok', filename=data_export.json_filename(), content=content)

    def clear_all_data(self, confirm: bool = False) -> Dict[str, Any]:
        if not confirm:
            return self._cancelled('Clear all data')

        self.moods.clear()
        self.conversation.clear()
        self.profiles.reset()
        try:
            data_export.clear_all_data(self.storage)
        except BlobStoreError as e:
            logger.error(f'Failed to clear stored data: {e}')
            self.advisories(Advisory(type='error', message='Could not clear saved data'))
            return self._result(status='error')

        self.advisories(Advisory(type='info', message='All data cleared successfully'))
        return self._result(status='ok')
