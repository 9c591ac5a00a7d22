"""
JSON utilities for persisted blobs and exports.
"""

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from typing import Any, Optional


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


def dumps(data: Any, indent: Optional[int] = None) -> str:
    """Serialize data, writing dates and datetimes as ISO strings.

    Args:
        data: Data to serialize (dataclasses are converted to dicts)
        indent: Optional pretty-print indent

    Returns:
        JSON string
    """
    return json.dumps(data, default=_default, ensure_ascii=False, indent=indent)


def loads(blob: str) -> Any:
    """Parse a persisted blob. Raises json.JSONDecodeError on corrupt input."""
    return json.loads(blob)


def clean_reply(response: str) -> str:
    """Clean LLM reply text by removing wrapping quotes and code fences.

    Args:
        response: Raw LLM response

    Returns:
        Cleaned reply text
    """
    response = response.strip()

    if response.startswith('```'):
        response = response[3:]
    if response.endswith('```'):
        response = response[:-3]

    response = response.strip()
    if len(response) > 1 and response[0] == response[-1] == '"':
        response = response[1:-1]

    return response.strip()
