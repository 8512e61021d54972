"""
views/components/timer.py

남은 시험 시간 표시 컴포넌트.
10분 미만이면 경고 상태로 표시한다.
"""

from typing import Any, Dict

from config import TIMER_WARNING_SECONDS
from practice_test_cbt.services.timer import format_clock


def render(remaining_seconds: int, warning_threshold: int = TIMER_WARNING_SECONDS) -> Dict[str, Any]:
    """
    Returns:
        {"display": "mm:ss", "remaining_seconds": int, "warning": bool, "expired": bool}
    """
    remaining = max(0, int(remaining_seconds))
    return {
        "display": format_clock(remaining),
        "remaining_seconds": remaining,
        "warning": remaining < warning_threshold,
        "expired": remaining == 0,
    }
