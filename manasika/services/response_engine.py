"""
Response resolution for the chat companion.

One strategy is chosen when the engine is built: the hosted Bedrock strategy when
it is enabled and AWS credentials resolve, otherwise the local rule-based
responder. The hosted strategy falls back to rule-based replies per call, and the
engine itself turns any remaining failure into a fixed supportive reply, so
callers always get text back.
"""

import random
import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Tuple

from ..models.core import ROLE_ASSISTANT, ROLE_USER, Advisory, ChatMessage
from ..utils.bedrock_llm import BedrockLLM, BedrockLLMError, has_credentials
from ..utils.config import BedrockLLMConfig
from ..utils.json_utils import clean_reply
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

Notifier = Callable[[Advisory], None]

CONNECTION_ADVISORY = Advisory(type='warning', message='Connection issue - using offline responses')

TECHNICAL_DIFFICULTY_REPLY = ("I'm having some technical difficulties right now, but I want you to know that I'm here to "
                              'support you. How are you feeling today?')

SYSTEM_PROMPT = """You are Manasika, a compassionate AI mental health companion.
You provide supportive, empathetic responses to help users with their mental wellbeing.
You are not a replacement for professional therapy, but offer emotional support and evidence-based coping strategies.
Keep responses concise (under 150 words) and always encourage professional help for serious concerns.
Use a warm, understanding tone and validate the user's feelings.
Never provide medical diagnoses or crisis intervention - refer to professionals for emergencies."""

# Order matters: the first matching category wins.
CATEGORY_PATTERNS: Tuple[Tuple[str, Pattern], ...] = (
    ('anxiety', re.compile(r'\b(anxious|anxiety|worried|panic|nervous)\b', re.IGNORECASE)),
    ('depression', re.compile(r'\b(sad|depressed|down|hopeless|empty)\b', re.IGNORECASE)),
    ('stress', re.compile(r'\b(stress|overwhelmed|pressure|busy|tired)\b', re.IGNORECASE)),
    ('anger', re.compile(r'\b(angry|mad|frustrated|irritated|upset)\b', re.IGNORECASE)),
    ('positive', re.compile(r'\b(good|great|happy|excellent|amazing|wonderful)\b', re.IGNORECASE)),
    ('gratitude', re.compile(r'\b(thank|grateful|appreciate)\b', re.IGNORECASE)),
    ('help', re.compile(r'\b(help|support|advice|guidance)\b', re.IGNORECASE)),
    ('sleep', re.compile(r'\b(sleep|insomnia|tired|exhausted)\b', re.IGNORECASE)),
    ('work', re.compile(r'\b(work|job|career|boss|colleague)\b', re.IGNORECASE)),
    ('relationship', re.compile(r'\b(relationship|friend|family|partner|lonely)\b', re.IGNORECASE)),
)

CATEGORY_RESPONSES: Dict[str, Tuple[str, ...]] = {
    'anxiety': (
        'Anxiety can feel overwhelming, but you\'re not alone in this. Try the 5-4-3-2-1 grounding technique: name 5 '
        'things you see, 4 you can touch, 3 you hear, 2 you smell, and 1 you taste.',
        'I understand anxiety can be really challenging. Deep breathing can help - try breathing in for 4, holding for 4, '
        'and out for 6. What\'s making you feel most anxious right now?',
        'Anxiety is your mind trying to protect you, but sometimes it gets overactive. What\'s one small, calming thing '
        'you could do for yourself right now?',
    ),
    'depression': (
        'I hear you\'re going through a really tough time. Your feelings are completely valid, and it\'s okay to not be '
        'okay. What\'s one tiny thing that brought you even a moment of peace today?',
        'Depression can make everything feel heavy. Please remember that you matter, and this feeling won\'t last '
        'forever. Have you been able to connect with anyone today?',
        'Thank you for sharing something so personal. Even when everything feels dark, you\'re showing strength by '
        'reaching out. What\'s one small step you could take to care for yourself?',
    ),
    'stress': (
        'Stress is your body\'s way of responding to pressure. It sounds like you have a lot on your plate. What feels '
        'like the most urgent thing you need to address?',
        'Feeling overwhelmed is so common in today\'s world. Try breaking everything down into smaller, manageable '
        'pieces. What\'s one thing you could tackle first?',
        'Stress can be exhausting. Remember that you don\'t have to handle everything at once. What would help you feel '
        'more grounded right now?',
    ),
    'anger': (
        'Anger often tells us that something important to us is being threatened or ignored. It\'s a valid emotion. '
        'What do you think might be underneath this anger?',
        'I understand you\'re feeling frustrated. Anger can be a signal that boundaries have been crossed. What\'s been '
        'bothering you most?',
        'It\'s completely normal to feel angry sometimes. Taking a moment to pause and breathe can help. What triggered '
        'these feelings for you?',
    ),
    'positive': (
        'That\'s wonderful to hear! It\'s so important to acknowledge and celebrate these positive moments. What made '
        'this experience particularly good for you?',
        'I\'m really glad you\'re feeling good! These positive moments are precious. What do you think contributed to '
        'feeling this way?',
        'It sounds like you\'re having a great time! Celebrating the good moments helps build resilience for tougher '
        'times. What\'s been the highlight?',
    ),
    'gratitude': (
        'It\'s beautiful that you\'re expressing gratitude. Research shows that gratitude can significantly improve our '
        'wellbeing. What else are you feeling thankful for?',
        'Gratitude is such a powerful practice for mental health. I\'m grateful you shared this with me. How has '
        'focusing on gratitude affected your mood?',
    ),
    'help': (
        'I\'m here to support you however I can. Everyone needs help sometimes, and asking for it shows strength, not '
        'weakness. What kind of support would be most helpful?',
        'Reaching out for help is one of the most courageous things you can do. What\'s been weighing on your mind that '
        'you\'d like to talk through?',
        'I appreciate you trusting me with whatever you\'re going through. What feels most important for us to focus on '
        'right now?',
    ),
    'sleep': (
        'Sleep issues can really affect our mental health. Good sleep hygiene includes keeping a regular schedule and '
        'avoiding screens before bed. How has your sleep been affecting your daily life?',
        'Getting quality sleep is so important for emotional regulation. What do you think might be interfering with '
        'your rest?',
        'Sleep and mental health are deeply connected. Have you noticed any patterns between your sleep and how you feel '
        'during the day?',
    ),
    'work': (
        'Work stress can really impact our overall wellbeing. It\'s important to find ways to manage work-related '
        'pressure. What aspects of work are most challenging for you right now?',
        'Workplace challenges are really common. Remember that your worth isn\'t defined by your job performance. What '
        'would help you feel more balanced between work and life?',
        'Work can be a significant source of stress. Have you been able to set any boundaries between your work life and '
        'personal time?',
    ),
    'relationship': (
        'Relationships can be complex and emotionally challenging. It\'s important to have support systems. How have '
        'your relationships been affecting your wellbeing?',
        'Human connections are vital for mental health. Whether it\'s conflict or loneliness, relationship struggles are '
        'really difficult. What would help you feel more supported?',
        'Relationships require a lot of emotional energy. It\'s okay to feel overwhelmed by interpersonal dynamics '
        'sometimes. What relationship aspect is most challenging for you?',
    ),
}

DEFAULT_RESPONSES: Tuple[str, ...] = (
    'Thank you for sharing that with me. Your feelings and experiences are important. What would be most helpful for '
    'you to talk about right now?',
    'I appreciate you opening up. Everyone\'s mental health journey is unique, and I\'m here to support you through '
    'yours. What\'s been on your mind lately?',
    'It takes courage to reach out and express how you\'re feeling. I\'m here to listen and support you. How can I best '
    'help you today?',
    'Your emotional wellbeing matters, and I\'m glad you\'re taking time to check in with yourself. What would you like '
    'to explore together?',
    'I\'m here to provide support and encouragement on your wellness journey. What feels most important for you to '
    'address right now?',
)


class ResponseGenerationError(Exception):
    """Custom exception for reply generation errors."""
    pass


def _ignore_advisory(advisory: Advisory) -> None:
    logger.debug(f'Advisory ({advisory.type}): {advisory.message}')


class ResponseStrategy:
    """One interchangeable way of producing a companion reply."""

    name = 'base'

    def generate(self, message: str, history: Sequence[ChatMessage]) -> str:
        """
        Produce a reply to ``message``.

        Args:
            message: The new user utterance
            history: Prior turns, oldest first, not including ``message``

        Returns:
            Reply text

        Raises:
            ResponseGenerationError: If no reply could be produced
        """
        raise NotImplementedError


class RuleBasedStrategy(ResponseStrategy):
    """Local responder: first matching keyword category picks the reply set."""

    name = 'fallback'

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def classify(message: str) -> Optional[str]:
        """Return the first category whose pattern matches, or None."""
        for category, pattern in CATEGORY_PATTERNS:
            if pattern.search(message):
                return category
        return None

    def generate(self, message: str, history: Sequence[ChatMessage] = ()) -> str:
        category = self.classify(message)
        replies = CATEGORY_RESPONSES[category] if category else DEFAULT_RESPONSES
        logger.debug(f'Rule-based reply from category: {category or "default"}')
        return self.rng.choice(replies)


class HostedLLMStrategy(ResponseStrategy):
    """Bedrock-backed companion that falls back to rule-based replies on any failure."""

    name = 'bedrock'

    def __init__(self,
                 llm: BedrockLLM,
                 fallback: RuleBasedStrategy,
                 notify: Notifier = _ignore_advisory,
                 context_messages: int = 6):
        """
        Initialize the hosted strategy.

        Args:
            llm: Bedrock LLM client
            fallback: Strategy used for this call when the hosted call fails
            notify: Receives the connection advisory on failure
            context_messages: How many prior turns to send along
        """
        self.llm = llm
        self.fallback = fallback
        self.notify = notify
        self.context_messages = context_messages

    def build_messages(self, message: str, history: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
        """Bedrock turns for the history tail plus the new message.

        Bedrock wants alternating roles starting with the user, so leading
        assistant turns are dropped and consecutive same-role turns merged.
        """
        tail = list(history)[-self.context_messages:] if self.context_messages > 0 else []
        turns: List[Tuple[str, str]] = [(msg.role, msg.content) for msg in tail]
        turns.append((ROLE_USER, message))

        messages: List[Dict[str, Any]] = []
        for role, content in turns:
            role = ROLE_USER if role == ROLE_USER else ROLE_ASSISTANT
            if not messages and role != ROLE_USER:
                continue
            if messages and messages[-1]['role'] == role:
                messages[-1]['content'][0]['text'] += f'\n\n{content}'
            else:
                messages.append({'role': role, 'content': [{'text': content}]})
        return messages

    def generate(self, message: str, history: Sequence[ChatMessage] = ()) -> str:
        try:
            reply = clean_reply(self.llm.generate_response(messages=self.build_messages(message, history),
                                                           system_prompt=SYSTEM_PROMPT))
            if not reply:
                raise BedrockLLMError('Bedrock LLM reply was empty after cleaning')
            return reply
        except BedrockLLMError as e:
            logger.error(f'Hosted companion failed, using offline reply: {e}')
            self.notify(CONNECTION_ADVISORY)
            return self.fallback.generate(message, history)


def select_strategy(config: BedrockLLMConfig,
                    notify: Notifier = _ignore_advisory,
                    rng: Optional[random.Random] = None,
                    context_messages: int = 6,
                    credentials_available: Callable[[], bool] = has_credentials,
                    llm_factory: Callable[[BedrockLLMConfig], BedrockLLM] = BedrockLLM) -> ResponseStrategy:
    """Choose the strategy for the lifetime of an engine.

    Args:
        config: Bedrock configuration; hosted replies need ``enabled``
        notify: Advisory sink handed to the hosted strategy
        rng: Random source for rule-based reply selection
        context_messages: Prior turns sent to the hosted model
        credentials_available: Check for AWS credentials
        llm_factory: Builds the Bedrock client

    Returns:
        HostedLLMStrategy when enabled with credentials, RuleBasedStrategy otherwise
    """
    rule_based = RuleBasedStrategy(rng)

    if not config.enabled:
        logger.info('Hosted companion disabled, using rule-based replies')
        return rule_based

    if not credentials_available():
        logger.warning('Hosted companion enabled but no AWS credentials found, using rule-based replies')
        return rule_based

    try:
        llm = llm_factory(config)
    except Exception as e:
        logger.error(f'Failed to initialize Bedrock LLM client, using rule-based replies: {e}')
        return rule_based

    return HostedLLMStrategy(llm, rule_based, notify=notify, context_messages=context_messages)


class ResponseEngine:
    """Holds the resolved strategy and guarantees a usable reply for every call."""

    def __init__(self, strategy: ResponseStrategy, notify: Notifier = _ignore_advisory):
        self.strategy = strategy
        self.notify = notify
        logger.info(f'Initialized ResponseEngine with provider: {self.provider_name}')

    @property
    def provider_name(self) -> str:
        return self.strategy.name

    def generate(self, message: str, history: Sequence[ChatMessage] = ()) -> str:
        """
        Generate a companion reply. Never raises.

        Args:
            message: The new user utterance
            history: Prior turns, oldest first

        Returns:
            Reply text; a fixed supportive reply if the strategy failed
        """
        try:
            reply = self.strategy.generate(message, history)
            if not isinstance(reply, str) or not reply.strip():
                raise ResponseGenerationError(f'{self.provider_name} produced no reply')
            return reply
        except Exception as e:
            logger.error(f'Response generation failed: {e}')
            self.notify(CONNECTION_ADVISORY)
            return TECHNICAL_DIFFICULTY_REPLY
