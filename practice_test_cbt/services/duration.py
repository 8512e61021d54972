"""
services/duration.py

시험 시간 값 정규화.
백엔드는 시간을 숫자(분) 또는 "90 minutes" 같은 문자열로 내려준다.
"""

import re
from typing import Any

from config import DEFAULT_DURATION_MINUTES

_NUMBER_RE = re.compile(r"\d+")


def parse_duration(duration: Any, default: int = DEFAULT_DURATION_MINUTES) -> int:
    """
    시간 값 → 분 단위 정수.

    - 숫자면 그대로 (소수는 버림)
    - 문자열이면 첫 번째 숫자 ("90 minutes" → 90)
    - 값이 없거나, 숫자를 찾지 못하거나, 0 이하이면 default

    예외를 던지지 않으며 항상 양의 정수를 반환한다.
    """
    minutes = None

    if isinstance(duration, bool):
        minutes = None
    elif isinstance(duration, (int, float)):
        minutes = int(duration)
    elif isinstance(duration, str):
        match = _NUMBER_RE.search(duration)
        minutes = int(match.group()) if match else None

    if minutes is None or minutes <= 0:
        return default
    return minutes


def format_duration_label(duration: Any) -> str:
    """화면 표시용 시간 문자열. 예: "90 mins"."""
    return f"{parse_duration(duration)} mins"
