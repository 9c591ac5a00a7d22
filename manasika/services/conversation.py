"""
Conversation session: rolling chat history fed to the response engine.
"""

import json
import threading
import uuid
from datetime import datetime
from typing import Callable, List, Tuple

from ..models.core import ROLE_ASSISTANT, ROLE_USER, ChatMessage
from ..utils.blob_store import CONVERSATIONS_KEY, BlobStore, BlobStoreError
from ..utils.json_utils import dumps, loads
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import now as current_time
from ..utils.validation import ValidationError
from .response_engine import ResponseEngine

logger = get_logger(__name__)

WELCOME_TEXT = ("Hello! I'm Manasika, your AI wellness companion. I'm here to provide support, encouragement, and "
                'evidence-based coping strategies for your mental health journey. How are you feeling today?')


class MessageValidationError(ValidationError):
    """Custom exception for invalid chat messages."""
    pass


class ConversationSession:
    """Bounded FIFO chat history; the oldest messages are evicted first."""

    def __init__(self,
                 engine: ResponseEngine,
                 storage: BlobStore,
                 history_limit: int = 10,
                 clock: Callable[[], datetime] = current_time):
        """
        Initialize the session and load persisted history.

        Args:
            engine: Produces assistant replies
            storage: Blob store holding the serialized history
            history_limit: Maximum number of stored messages
            clock: Source of message timestamps
        """
        self.engine = engine
        self.storage = storage
        self.history_limit = history_limit
        self._clock = clock
        self._lock = threading.Lock()
        self._history: List[ChatMessage] = self._trim(self._load())

        logger.info(f'Initialized ConversationSession with {len(self._history)} messages')

    def _load(self) -> List[ChatMessage]:
        try:
            blob = self.storage.get(CONVERSATIONS_KEY)
            if blob is None:
                return []
            data = loads(blob)
            if not isinstance(data, list):
                raise ValueError(f'expected a list, got {type(data).__name__}')
            return [ChatMessage.from_dict(item) for item in data]
        except (BlobStoreError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f'Error loading chat history, starting empty: {e}')
            return []

    def _persist(self) -> None:
        try:
            if self._history:
                self.storage.set(CONVERSATIONS_KEY, dumps([msg.to_dict() for msg in self._history]))
            else:
                self.storage.remove(CONVERSATIONS_KEY)
        except BlobStoreError as e:
            logger.error(f'Failed to save chat history: {e}')

    def _trim(self, history: List[ChatMessage]) -> List[ChatMessage]:
        if len(history) > self.history_limit:
            return history[-self.history_limit:]
        return history

    def _message(self, content: str, role: str) -> ChatMessage:
        return ChatMessage(id=f'{role}-{uuid.uuid4().hex}', content=content, role=role, timestamp=self._clock())

    def send(self, text: str) -> ChatMessage:
        """Send a user message and record the assistant's reply.

        Sends are serialized so reply N always answers request N.

        Args:
            text: The user's message

        Returns:
            The assistant ChatMessage

        Raises:
            MessageValidationError: If the message is empty; history is unchanged
        """
        if not isinstance(text, str) or not text.strip():
            raise MessageValidationError('Please enter a message')
        text = text.strip()

        with self._lock:
            prior = tuple(self._history)
            user_message = self._message(text, ROLE_USER)
            reply = self.engine.generate(text, prior)
            assistant_message = self._message(reply, ROLE_ASSISTANT)

            self._history = self._trim(self._history + [user_message, assistant_message])
            self._persist()

        logger.debug(f'Chat exchange recorded, history size {len(self._history)}')
        return assistant_message

    def clear(self) -> None:
        """Empty the history."""
        with self._lock:
            self._history = []
            self._persist()
        logger.info('Cleared chat history')

    def history(self) -> Tuple[ChatMessage, ...]:
        """Read-only snapshot, oldest first."""
        return tuple(self._history)

    def welcome_message(self) -> ChatMessage:
        """Greeting shown at the top of a chat; never stored in the history."""
        return ChatMessage(id='welcome', content=WELCOME_TEXT, role=ROLE_ASSISTANT, timestamp=self._clock())
