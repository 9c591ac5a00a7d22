"""
Core data models for the mood journal and chat companion.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict

from ..utils.timestamp_utils import parse_date, parse_datetime

MIN_MOOD = 1
MAX_MOOD = 5
NOTE_MAX_LENGTH = 500

MOOD_LABELS = {
    1: 'Very Low',
    2: 'Low',
    3: 'Neutral',
    4: 'Good',
    5: 'Very High',
}

MOOD_EMOJIS = {
    1: '😢',
    2: '😕',
    3: '😐',
    4: '🙂',
    5: '😊',
}

MOOD_COLORS = {
    1: '#ff4757',  # red
    2: '#ff6b81',  # light red
    3: '#ffa502',  # orange
    4: '#26de81',  # light green
    5: '#2ed573',  # green
}

TREND_IMPROVING = 'improving'
TREND_DECLINING = 'declining'
TREND_STABLE = 'stable'

ROLE_USER = 'user'
ROLE_ASSISTANT = 'assistant'


@dataclass(frozen=True)
class MoodEntry:
    """One mood log record for a calendar day."""
    id: str
    date: date
    mood: int  # 1-5 scale
    note: str
    created_at: datetime
    updated_at: datetime

    def with_updates(self, updated_at: datetime, **fields: Any) -> 'MoodEntry':
        return replace(self, updated_at=updated_at, **fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'mood': self.mood,
            'note': self.note,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MoodEntry':
        created_at = parse_datetime(data['createdAt'])
        return cls(id=str(data['id']),
                   date=parse_date(data['date']),
                   mood=data['mood'],
                   note=data.get('note') or '',
                   created_at=created_at,
                   updated_at=parse_datetime(data['updatedAt']) if data.get('updatedAt') else created_at)


@dataclass(frozen=True)
class MoodStats:
    """Aggregate view derived from the entry collection; never persisted."""
    average_mood: float
    total_entries: int
    mood_trend: str
    streak: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'averageMood': self.average_mood,
            'totalEntries': self.total_entries,
            'moodTrend': self.mood_trend,
            'streak': self.streak,
        }


@dataclass(frozen=True)
class ChartDataPoint:
    """One calendar day of a chart series. ``value`` 0 means no entry that day."""
    label: str
    value: int
    date: str


@dataclass(frozen=True)
class ChatMessage:
    """A single chat turn from the user or the assistant."""
    id: str
    content: str
    role: str  # user | assistant
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'content': self.content,
            'role': self.role,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        role = data['role']
        if role not in (ROLE_USER, ROLE_ASSISTANT):
            raise ValueError(f'Unknown chat role: {role}')
        return cls(id=str(data['id']), content=str(data['content']), role=role, timestamp=parse_datetime(data['timestamp']))


@dataclass
class UserPreferences:
    """App preferences edited on the profile page."""
    daily_reminders: bool = False
    weekly_insights: bool = True
    ai_suggestions: bool = True
    language: str = 'en'  # en | hi
    theme: str = 'light'  # light | dark

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dailyReminders': self.daily_reminders,
            'weeklyInsights': self.weekly_insights,
            'aiSuggestions': self.ai_suggestions,
            'language': self.language,
            'theme': self.theme,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserPreferences':
        defaults = cls()
        return cls(daily_reminders=bool(data.get('dailyReminders', defaults.daily_reminders)),
                   weekly_insights=bool(data.get('weeklyInsights', defaults.weekly_insights)),
                   ai_suggestions=bool(data.get('aiSuggestions', defaults.ai_suggestions)),
                   language=data.get('language', defaults.language),
                   theme=data.get('theme', defaults.theme))


@dataclass
class UserProfile:
    """The single local user's profile."""
    id: str = 'default-user'
    name: str = ''
    email: str = ''
    created_at: datetime = field(default_factory=datetime.now)
    preferences: UserPreferences = field(default_factory=UserPreferences)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'createdAt': self.created_at.isoformat(),
            'preferences': self.preferences.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        return cls(id=data.get('id', 'default-user'),
                   name=data.get('name', ''),
                   email=data.get('email', ''),
                   created_at=parse_datetime(data['createdAt']) if data.get('createdAt') else datetime.now(),
                   preferences=UserPreferences.from_dict(data.get('preferences') or {}))


@dataclass(frozen=True)
class Advisory:
    """Non-blocking user-facing notice (toast)."""
    type: str  # success | error | warning | info
    message: str
