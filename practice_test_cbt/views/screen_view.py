"""
views/screen_view.py — 세션 상태별 화면 선택

상태 → 화면:
  IDLE / LOADING        : 로딩 표시
  ERROR                 : 오류 메시지 + 다음 행동 (재시도 / 로그인 / 시작 다시 하기)
  PRE_TEST              : 시작 전 안내
  IN_PROGRESS/SUBMITTING: 시험 풀기
  REDIRECTED            : 결과 요약
"""

from typing import Any, Dict

from practice_test_cbt.models.session_state import ErrorKind, ErrorOrigin, SessionState
from practice_test_cbt.services.session_controller import SessionController
from practice_test_cbt.views import exam_view, pretest_view, result_view

_RETRY_LABELS = {
    ErrorOrigin.LOADING: "다시 불러오기",
    ErrorOrigin.ATTEMPT: "다시 시작하기",
    ErrorOrigin.SUBMISSION: "다시 제출하기",
}


def _render_error(controller: SessionController) -> Dict[str, Any]:
    error = controller.error
    login = error.kind is ErrorKind.AUTHENTICATION
    return {
        "screen": "error",
        "title": "연결 오류" if error.kind is ErrorKind.NETWORK else "오류",
        "message": error.message,
        "kind": error.kind.value,
        "origin": error.origin.value,
        "status_code": error.status_code,
        "action": "login" if login else "retry",
        "action_label": "로그인" if login else _RETRY_LABELS[error.origin],
        # 제출 오류 시 답안은 그대로 남아 있음을 알려준다
        "answers_kept": error.origin is ErrorOrigin.SUBMISSION,
    }


def render(controller: SessionController) -> Dict[str, Any]:
    state = controller.state
    if state in (SessionState.IDLE, SessionState.LOADING):
        view = {"screen": "loading", "message": "시험을 불러오는 중..."}
    elif state is SessionState.ERROR:
        view = _render_error(controller)
    elif state is SessionState.PRE_TEST:
        view = pretest_view.render(controller)
    elif state is SessionState.REDIRECTED:
        view = result_view.render(controller.results)
    else:
        view = exam_view.render(controller)
    view["state"] = state.value
    return view
