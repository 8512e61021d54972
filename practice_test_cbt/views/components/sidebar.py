"""
views/components/sidebar.py

문제 번호 네비게이터 컴포넌트.
현재 페이지(20문항)의 번호 버튼 상태와 진행 현황을 만든다.

버튼 상태:
  - current: 현재 문제
  - answered: 답한 문제
  - locked: 수강 등록 전 잠긴 문제 (표시는 하되 비활성)
  - flagged: 다시 보기 표시
"""

from typing import Any, Dict

from practice_test_cbt.services.session_controller import SessionController


def render(controller: SessionController) -> Dict[str, Any]:
    nav = controller.navigator
    accessible = controller.accessible_count
    answered = controller.answered_count
    start, end = nav.page_range()

    cells = [
        {
            "ordinal": ordinal,
            "current": ordinal == nav.current_ordinal,
            "answered": controller.answers.is_answered(ordinal),
            "locked": not controller.can_access(ordinal),
            "flagged": ordinal in nav.flagged,
        }
        for ordinal in nav.page_ordinals()
    ]

    return {
        "progress": {
            "answered": answered,
            "accessible": accessible,
            "remaining": controller.remaining_count,
            "percent": round(answered / accessible * 100, 1) if accessible else 0.0,
        },
        "page": nav.current_page,
        "total_pages": nav.total_pages,
        "range": [start, end],
        "cells": cells,
        "locked_count": controller.locked_count,
    }
