import random
from datetime import date, datetime, timedelta

import pytest
from botocore.exceptions import ClientError

from manasika.models.core import MoodEntry
from manasika.utils.blob_store import InMemoryBlobStore
from manasika.utils.config import AppConfig, BedrockLLMConfig, ChatConfig, MCPConfig, StorageConfig

TODAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 9, 30)


def make_entry(mood, days_ago=0, note='', entry_id=None):
    stamp = NOW - timedelta(days=days_ago)
    return MoodEntry(id=entry_id or f'e{days_ago}-{mood}',
                     date=TODAY - timedelta(days=days_ago),
                     mood=mood,
                     note=note,
                     created_at=stamp,
                     updated_at=stamp)


class FakeBedrockRuntime:
    """Stands in for the bedrock-runtime client's converse call."""

    def __init__(self, reply='You are doing well.', error=None, response=None):
        self.reply = reply
        self.error = error
        self.response = response
        self.calls = []

    def converse(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return {'output': {'message': {'role': 'assistant', 'content': [{'text': self.reply}]}}}


def client_error(code='ThrottlingException'):
    return ClientError({'Error': {'Code': code, 'Message': 'boom'}}, 'Converse')


@pytest.fixture
def storage():
    return InMemoryBlobStore()


@pytest.fixture
def rng():
    return random.Random(7)


@pytest.fixture
def bedrock_config():
    return BedrockLLMConfig(enabled=True,
                            region='us-east-1',
                            model_id='test-model',
                            max_tokens=100,
                            temperature=0.7,
                            retry_attempts=1,
                            retry_delay=0.0,
                            timeout=5)


@pytest.fixture
def app_config(bedrock_config, tmp_path):
    bedrock_config.enabled = False
    return AppConfig(environment='test',
                     log_level='DEBUG',
                     bedrock_llm=bedrock_config,
                     storage=StorageConfig(backend='memory', path=str(tmp_path / 'storage.json'), seed_samples=False),
                     chat=ChatConfig(history_limit=10, context_messages=6),
                     mcp=MCPConfig(transport='stdio', host='127.0.0.1', port=8000))
