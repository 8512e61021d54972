"""
models/session_state.py

시험 세션의 상태 머신 정의.
상태 값, 허용 전이 표, 오류/신호 모델만 담는다. UI 코드 없음.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    IDLE = "idle"                 # 컨트롤러 생성 직후, 아무것도 조회하지 않음
    LOADING = "loading"           # 시험/문제 조회 중
    ERROR = "error"
    PRE_TEST = "pre_test"         # 시작 전 안내 화면
    IN_PROGRESS = "in_progress"   # 응시 중 (타이머 동작)
    SUBMITTING = "submitting"
    REDIRECTED = "redirected"     # 제출 완료, 결과 화면으로 이동


# 허용되는 상태 전이. 이 표에 없는 전이는 모두 거부된다.
TRANSITIONS: Dict[SessionState, FrozenSet[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.LOADING}),
    SessionState.LOADING: frozenset({SessionState.PRE_TEST, SessionState.ERROR}),
    SessionState.PRE_TEST: frozenset({SessionState.IN_PROGRESS, SessionState.ERROR}),
    SessionState.IN_PROGRESS: frozenset({SessionState.SUBMITTING}),
    SessionState.SUBMITTING: frozenset({SessionState.REDIRECTED, SessionState.ERROR}),
    SessionState.ERROR: frozenset({
        SessionState.LOADING,       # 조회 오류 재시도
        SessionState.PRE_TEST,      # 응시 생성 오류 → 다시 시작 가능
        SessionState.IN_PROGRESS,   # 제출 오류 → 답안 유지한 채 재제출
        SessionState.SUBMITTING,    # 시간 종료 후 제출 오류 → 바로 재제출
    }),
    SessionState.REDIRECTED: frozenset(),
}


class ErrorOrigin(str, Enum):
    """오류가 발생한 단계. 재시도 동작을 결정한다."""

    LOADING = "loading"
    ATTEMPT = "attempt"
    SUBMISSION = "submission"


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    RESOLUTION = "resolution"
    NETWORK = "network"
    SUBMISSION = "submission"


class Signal(str, Enum):
    """오류가 아닌 UI 신호. 상태를 바꾸지 않는다."""

    LOGIN_REQUIRED = "login_required"
    UPGRADE_PROMPT = "upgrade_prompt"
    CONFIRM_SUBMIT = "confirm_submit"


class SessionError(BaseModel):
    """Error 상태에서 화면에 보여줄 오류 정보."""

    kind: ErrorKind
    origin: ErrorOrigin
    message: str
    status_code: Optional[int] = None


class ActionResult(BaseModel):
    """
    사용자 동작(시작, 이동, 답안 입력, 제출 등)의 처리 결과.

    Attributes:
        ok:      동작이 반영되었는지 여부.
        state:   처리 후 세션 상태.
        signal:  로그인/업그레이드/제출 확인 등 UI 신호 (없으면 None).
        message: 사용자에게 보여줄 안내 문구.
    """

    ok: bool
    state: SessionState
    signal: Optional[Signal] = None
    message: Optional[str] = None
    details: Dict[str, int] = Field(default_factory=dict)
