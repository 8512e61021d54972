"""
views/pretest_view.py — 시험 시작 전 안내 화면

표시 내용:
  - 시험/연습 시험 이름
  - 풀 수 있는 문제 수 (미수강: "10 Free"), 잠긴 문제 수
  - 시험 시간, 난이도
  - 시작 버튼 (로그인 필요)
"""

from typing import Any, Dict

from practice_test_cbt.services.duration import format_duration_label
from practice_test_cbt.services.session_controller import SessionController


def render(controller: SessionController) -> Dict[str, Any]:
    exam = controller.exam
    test = controller.test
    accessible = controller.accessible_count

    if controller.enrolled:
        questions_label = str(accessible)
    else:
        questions_label = f"{accessible} Free"

    return {
        "screen": "pre_test",
        "exam_title": exam.display_title,
        "test_name": test.name,
        "test_is_placeholder": test.is_placeholder,
        "total_questions": controller.total_questions,
        "accessible_questions": accessible,
        "questions_label": questions_label,
        "locked_questions": controller.locked_count,
        "duration_label": format_duration_label(controller.seed_seconds // 60),
        "difficulty": test.difficulty or exam.difficulty or "Medium",
        "enrolled": controller.enrolled,
        "is_logged_in": controller.is_logged_in,
    }
