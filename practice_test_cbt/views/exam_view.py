"""
views/exam_view.py — 시험 풀기 화면

레이아웃:
  - sidebar : 타이머 + 문제 번호 네비게이터 + 진행 현황
  - 메인    : 현재 문제 카드 + 이전/다음 + 최종 제출

제출 중(SUBMITTING)에는 같은 화면을 그리되 제출 버튼을 비활성화한다.
"""

from typing import Any, Dict

from practice_test_cbt.models.session_state import SessionState
from practice_test_cbt.services.session_controller import SessionController
from practice_test_cbt.views.components import question_card as qcard
from practice_test_cbt.views.components import sidebar as nav
from practice_test_cbt.views.components import timer as tmr


def render(controller: SessionController) -> Dict[str, Any]:
    navigator = controller.navigator
    current = controller.current_question
    ordinal = navigator.current_ordinal
    submitting = controller.state is SessionState.SUBMITTING

    card = qcard.render(
        question=current,
        total=controller.total_questions,
        saved_answer=controller.answers.get(ordinal),
        locked=not controller.can_access(ordinal),
        flagged=ordinal in navigator.flagged,
    )

    return {
        "screen": "exam",
        "exam_title": controller.exam.display_title,
        "test_name": controller.test.name,
        "timer": tmr.render(controller.remaining_seconds),
        "sidebar": nav.render(controller),
        "question": card,
        "controls": {
            "can_previous": ordinal > 1,
            # 마지막 접근 가능 문제에서는 '다음' 대신 제출만 노출
            "can_next": ordinal < controller.accessible_count,
            "submit_label": "제출 중..." if submitting else "시험 제출",
            "submit_disabled": submitting,
        },
        "enrolled": controller.enrolled,
    }
