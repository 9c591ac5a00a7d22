import random
from datetime import datetime

import pytest

from conftest import FakeBedrockRuntime, client_error
from manasika.models.core import ChatMessage
from manasika.services.response_engine import (CATEGORY_RESPONSES, CONNECTION_ADVISORY, DEFAULT_RESPONSES,
                                               SYSTEM_PROMPT, TECHNICAL_DIFFICULTY_REPLY, HostedLLMStrategy,
                                               ResponseEngine, ResponseStrategy, RuleBasedStrategy, select_strategy)
from manasika.utils.bedrock_llm import BedrockLLM


def chat(role, content, n=0):
    return ChatMessage(id=f'{role}-{n}', content=content, role=role, timestamp=datetime(2026, 10, 19, 9, n))


def exchange(count):
    history = []
    for n in range(count):
        history.append(chat('user', f'question {n}', n))
        history.append(chat('assistant', f'answer {n}', n))
    return history


class ExplodingStrategy(ResponseStrategy):
    name = 'exploding'

    def generate(self, message, history):
        raise RuntimeError('kaboom')


@pytest.fixture
def rule_based(rng):
    return RuleBasedStrategy(rng)


@pytest.mark.parametrize('message, category', [
    ("I'm so anxious about tomorrow", 'anxiety'),
    ('Feeling really DOWN lately', 'depression'),
    ('So much pressure this week', 'stress'),
    ('My roommate makes me mad', 'anger'),
    ('Today was a great day', 'positive'),
    ('Thank you for listening', 'gratitude'),
    ('I need some advice', 'help'),
    ('I have insomnia', 'sleep'),
    ('My boss again', 'work'),
    ('I feel lonely', 'relationship'),
])
def test_classify_categories(message, category):
    assert RuleBasedStrategy.classify(message) == category


def test_first_declared_category_wins():
    # "tired" is listed under both stress and sleep; stress is declared first
    assert RuleBasedStrategy.classify('so tired') == 'stress'
    assert RuleBasedStrategy.classify('anxious and sad about work') == 'anxiety'


def test_classify_needs_whole_words():
    assert RuleBasedStrategy.classify('the download finished') is None


def test_anxious_reply_comes_from_anxiety_set(rule_based):
    for _ in range(20):
        assert rule_based.generate('I feel anxious', []) in CATEGORY_RESPONSES['anxiety']


def test_unmatched_message_uses_generic_set(rule_based):
    assert rule_based.generate('hello there', []) in DEFAULT_RESPONSES


def test_reply_selection_is_reproducible_with_seeded_random():
    first = RuleBasedStrategy(random.Random(3)).generate('I need help', [])
    second = RuleBasedStrategy(random.Random(3)).generate('I need help', [])
    assert first == second


def test_hosted_strategy_sends_prompt_and_history_tail(bedrock_config, rule_based):
    runtime = FakeBedrockRuntime(reply='  "Breathe slowly."  ')
    strategy = HostedLLMStrategy(BedrockLLM(bedrock_config, client=runtime), rule_based)

    reply = strategy.generate('still worried', exchange(5))

    assert reply == 'Breathe slowly.'
    call = runtime.calls[0]
    assert call['modelId'] == 'test-model'
    assert call['system'] == [{'text': SYSTEM_PROMPT}]
    texts = [m['content'][0]['text'] for m in call['messages']]
    # last 6 history messages (3 exchanges) plus the new message
    assert texts == ['question 2', 'answer 2', 'question 3', 'answer 3', 'question 4', 'answer 4', 'still worried']
    assert [m['role'] for m in call['messages']][:2] == ['user', 'assistant']


def test_hosted_messages_start_with_user_and_alternate(bedrock_config, rule_based):
    strategy = HostedLLMStrategy(BedrockLLM(bedrock_config, client=FakeBedrockRuntime()), rule_based)
    history = [chat('assistant', 'welcome', 0), chat('user', 'hi', 1)]

    messages = strategy.build_messages('are you there?', history)

    assert [m['role'] for m in messages] == ['user']
    assert messages[0]['content'][0]['text'] == 'hi\n\nare you there?'


@pytest.mark.parametrize('runtime', [
    FakeBedrockRuntime(error=client_error()),
    FakeBedrockRuntime(response={'unexpected': True}),
    FakeBedrockRuntime(reply='   '),
])
def test_hosted_failure_falls_back_with_advisory(bedrock_config, rule_based, runtime):
    advisories = []
    strategy = HostedLLMStrategy(BedrockLLM(bedrock_config, client=runtime), rule_based, notify=advisories.append)

    reply = strategy.generate('I am anxious', [])

    assert reply in CATEGORY_RESPONSES['anxiety']
    assert advisories == [CONNECTION_ADVISORY]


def test_engine_never_raises(rng):
    advisories = []
    engine = ResponseEngine(ExplodingStrategy(), notify=advisories.append)

    assert engine.generate('anything', []) == TECHNICAL_DIFFICULTY_REPLY
    assert advisories == [CONNECTION_ADVISORY]


def test_engine_passes_through_strategy_reply(rule_based):
    engine = ResponseEngine(rule_based)
    assert engine.provider_name == 'fallback'
    assert engine.generate('I am grateful', []) in CATEGORY_RESPONSES['gratitude']


def test_select_rule_based_when_disabled(bedrock_config, rng):
    bedrock_config.enabled = False
    strategy = select_strategy(bedrock_config, rng=rng, credentials_available=lambda: True)
    assert isinstance(strategy, RuleBasedStrategy)


def test_select_rule_based_without_credentials(bedrock_config):
    strategy = select_strategy(bedrock_config, credentials_available=lambda: False)
    assert isinstance(strategy, RuleBasedStrategy)


def test_select_hosted_with_credentials(bedrock_config):
    runtime = FakeBedrockRuntime()
    strategy = select_strategy(bedrock_config,
                               context_messages=4,
                               credentials_available=lambda: True,
                               llm_factory=lambda cfg: BedrockLLM(cfg, client=runtime))
    assert isinstance(strategy, HostedLLMStrategy)
    assert strategy.name == 'bedrock'
    assert strategy.context_messages == 4


def test_select_falls_back_when_client_cannot_be_built(bedrock_config):

    def broken_factory(cfg):
        raise RuntimeError('no region')

    strategy = select_strategy(bedrock_config, credentials_available=lambda: True, llm_factory=broken_factory)
    assert isinstance(strategy, RuleBasedStrategy)
