"""
services/session_controller.py

연습 시험 한 회차의 진행을 총괄하는 세션 컨트롤러.

상태 흐름:
  IDLE → LOADING → {ERROR | PRE_TEST} → IN_PROGRESS → SUBMITTING → {REDIRECTED | ERROR}

- 상태 변경은 _transition() 한 곳에서만 일어난다 (models/session_state.TRANSITIONS 참고).
- IN_PROGRESS를 벗어나는 모든 전이에서 타이머를 즉시 정지한다.
- 네트워크 오류는 모두 여기서 잡아 ERROR 상태 또는 UI 신호로 바꾼다.
  컨트롤러 밖으로 예외를 내보내지 않는다.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from config import FREE_QUESTIONS_LIMIT, QUESTIONS_PER_PAGE, TIMER_TICK_SECONDS
from practice_test_cbt.models.question_model import (
    ExamDefinition, PracticeTest, Question, ResultsSummary,
)
from practice_test_cbt.models.session_state import (
    TRANSITIONS, ActionResult, ErrorKind, ErrorOrigin,
    SessionError, SessionState, Signal,
)
from practice_test_cbt.services.access_policy import accessible_ceiling, can_access_question
from practice_test_cbt.services.answer_store import AnswerStore
from practice_test_cbt.services.api_client import (
    AuthenticationError, ExamApiClient, ExamApiError,
    ResolutionError, TransientNetworkError,
)
from practice_test_cbt.services.attempt_manager import AttemptManager
from practice_test_cbt.services.credentials import CredentialStore
from practice_test_cbt.services.duration import parse_duration
from practice_test_cbt.services.exam_service import (
    build_results_summary, build_submission_payload, compose_exam_slug,
    resolve_practice_test,
)
from practice_test_cbt.services.navigator import Navigator
from practice_test_cbt.services.timer import CountdownTimer

logger = logging.getLogger(__name__)

MSG_NO_QUESTIONS = "이 연습 시험에는 아직 문제가 없습니다."
MSG_LOGIN_TO_START = "시험을 시작하려면 로그인이 필요합니다."
MSG_LOGIN_TO_SUBMIT = "시험을 제출하려면 로그인이 필요합니다."
MSG_SUBMIT_FAILED = "시험 제출 중 오류가 발생했습니다. 다시 시도해 주세요."
MSG_START_PENDING = "시험을 시작하는 중입니다. 잠시만 기다려 주세요."

# 결과 화면으로 넘기는 데이터(dict)를 받아 저장하는 함수
HandoffWriter = Callable[[Dict[str, Any]], None]


class InvalidTransition(RuntimeError):
    """허용 전이 표에 없는 상태 변경 시도 (프로그래밍 오류)."""


def _error_kind(error: ExamApiError) -> ErrorKind:
    if isinstance(error, AuthenticationError):
        return ErrorKind.AUTHENTICATION
    if isinstance(error, ResolutionError):
        return ErrorKind.RESOLUTION
    if isinstance(error, TransientNetworkError):
        return ErrorKind.NETWORK
    return ErrorKind.SUBMISSION


class SessionController:
    """
    Attributes:
        state:          현재 세션 상태
        exam:           시험 정의 (LOADING 이후 고정)
        test:           연습 시험 (slug → ID → 위치 → 임시 순서로 결정)
        questions:      문제 목록 (ordinal 순)
        enrolled:       수강 여부. 세션 중 False로 돌아가지 않는다.
        is_logged_in:   토큰 보유 여부
        seed_seconds:   타이머 시작 시간 (초)
        error:          ERROR 상태의 오류 정보
        results:        제출 성공 시 결과 요약
    """

    def __init__(
        self,
        provider: str,
        exam_code: str,
        test_id: str,
        client: ExamApiClient,
        credentials: CredentialStore,
        handoff: Optional[HandoffWriter] = None,
        free_limit: int = FREE_QUESTIONS_LIMIT,
        page_size: int = QUESTIONS_PER_PAGE,
        tick_interval: float = TIMER_TICK_SECONDS,
    ) -> None:
        self.provider = provider
        self.exam_code = exam_code
        self.test_id = str(test_id)
        self.free_limit = free_limit
        self.page_size = page_size
        self.tick_interval = tick_interval

        self._client = client
        self._credentials = credentials
        self._handoff = handoff
        self.attempts = AttemptManager(client, credentials)

        self.state = SessionState.IDLE
        self.exam: Optional[ExamDefinition] = None
        self.test: Optional[PracticeTest] = None
        self.questions: List[Question] = []
        self.answers = AnswerStore([])
        self.navigator = Navigator(0, self.can_access, page_size)
        self.enrolled = False
        self.is_logged_in = False
        self.seed_seconds = parse_duration(None) * 60
        self.timer: Optional[CountdownTimer] = None
        self.error: Optional[SessionError] = None
        self.results: Optional[ResultsSummary] = None
        self._starting = False

    # ── 상태 전이 ────────────────────────────────────────────────────────

    def _transition(self, target: SessionState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} → {target.value} 전이는 허용되지 않습니다.")
        if self.state is SessionState.IN_PROGRESS:
            self._stop_timer()
        if target is not SessionState.ERROR:
            self.error = None
        logger.info(f"세션 상태: {self.state.value} → {target.value}")
        self.state = target

    def _fail(self, origin: ErrorOrigin, kind: ErrorKind, message: str,
              status_code: Optional[int] = None, signal: Optional[Signal] = None) -> ActionResult:
        self._transition(SessionState.ERROR)
        self.error = SessionError(kind=kind, origin=origin, message=message, status_code=status_code)
        logger.warning(f"세션 오류 [{origin.value}/{kind.value}]: {message}")
        return ActionResult(ok=False, state=self.state, signal=signal, message=message)

    def _result(self, ok: bool, signal: Optional[Signal] = None,
                message: Optional[str] = None, **details: int) -> ActionResult:
        return ActionResult(ok=ok, state=self.state, signal=signal, message=message, details=details)

    def _not_allowed(self, action: str) -> ActionResult:
        return self._result(False, message=f"현재 상태({self.state.value})에서는 {action}할 수 없습니다.")

    # ── 접근 권한 / 진행률 ───────────────────────────────────────────────

    def can_access(self, ordinal: int) -> bool:
        return can_access_question(ordinal, self.enrolled, self.free_limit)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def accessible_count(self) -> int:
        return accessible_ceiling(self.total_questions, self.enrolled, self.free_limit)

    @property
    def locked_count(self) -> int:
        return self.total_questions - self.accessible_count

    @property
    def answered_count(self) -> int:
        return self.answers.answered_count(self.accessible_count)

    @property
    def remaining_count(self) -> int:
        return self.answers.remaining_count(self.accessible_count)

    @property
    def remaining_seconds(self) -> int:
        return self.timer.remaining if self.timer else self.seed_seconds

    @property
    def current_question(self) -> Optional[Question]:
        if not self.questions:
            return None
        return self.questions[self.navigator.current_ordinal - 1]

    def set_enrollment(self, enrolled: bool) -> None:
        """수강 여부 갱신. 접근 범위는 줄어들지 않으므로 True → False 변경은 무시한다."""
        if self.enrolled and not enrolled:
            logger.warning("세션 중 수강 상태 해제 요청 무시")
            return
        self.enrolled = enrolled

    def upgrade_message(self) -> str:
        return f"무료 문제 한도에 도달했습니다. 수강 등록하면 전체 {self.total_questions}문항을 풀 수 있습니다."

    # ── LOADING ──────────────────────────────────────────────────────────

    async def load(self) -> ActionResult:
        """시험 정의 → (문제 목록, 수강 여부) 조회 후 PRE_TEST 로 이동."""
        if self.state not in (SessionState.IDLE, SessionState.ERROR):
            return self._not_allowed("시험을 불러올")
        self._transition(SessionState.LOADING)

        token = self._credentials.get_token()
        self.is_logged_in = bool(token)
        slug = compose_exam_slug(self.provider, self.exam_code)

        try:
            exam = await self._client.fetch_exam(slug)
            bundle, enrolled = await asyncio.gather(
                self._client.fetch_questions(exam.id, self.test_id),
                self._client.check_enrollment(exam.id, token),
            )
        except ExamApiError as e:
            return self._fail(ErrorOrigin.LOADING, _error_kind(e), e.message, e.status_code)

        self.exam = exam
        self.set_enrollment(enrolled)

        if not bundle.questions:
            return self._fail(ErrorOrigin.LOADING, ErrorKind.RESOLUTION, MSG_NO_QUESTIONS)

        self.questions = bundle.questions
        self.test = resolve_practice_test(exam, self.test_id, len(bundle.questions))
        if self.test.is_placeholder:
            logger.warning(f"연습 시험 '{self.test_id}'을(를) 목록에서 찾지 못해 임시 정보를 사용합니다 (exam={exam.id})")

        duration = bundle.duration or self.test.duration or exam.duration
        self.seed_seconds = parse_duration(duration) * 60
        self.answers = AnswerStore(self.questions)
        self.navigator = Navigator(self.total_questions, self.can_access, self.page_size)

        self._transition(SessionState.PRE_TEST)
        logger.info(
            f"시험 로드 완료: {slug} / {self.test.name} "
            f"({self.total_questions}문항, 접근 {self.accessible_count}문항)"
        )
        return self._result(True)

    # ── PRE_TEST → IN_PROGRESS ───────────────────────────────────────────

    async def start(self) -> ActionResult:
        """응시 기록을 확보한 뒤 타이머를 걸고 응시를 시작한다."""
        if self.state is not SessionState.PRE_TEST:
            return self._not_allowed("시험을 시작")
        if self._starting:
            return self._result(False, message=MSG_START_PENDING)

        self.is_logged_in = bool(self._credentials.get_token())
        if not self.is_logged_in:
            return self._result(False, Signal.LOGIN_REQUIRED, MSG_LOGIN_TO_START)

        # 응시 생성 응답을 기다리는 동안 들어온 시작 요청은 거절한다
        self._starting = True
        try:
            outcome = await self.attempts.ensure_attempt(self.exam.id, self.test_id)
        finally:
            self._starting = False
        if outcome.login_required:
            self.is_logged_in = bool(self._credentials.get_token())
            return self._result(False, Signal.LOGIN_REQUIRED, outcome.message)
        if not outcome.ok:
            kind = ErrorKind.RESOLUTION if outcome.status_code in (400, 404) else ErrorKind.NETWORK
            return self._fail(ErrorOrigin.ATTEMPT, kind, outcome.message, outcome.status_code)

        if outcome.restored_answers:
            self.answers.restore(outcome.restored_answers)

        self._transition(SessionState.IN_PROGRESS)
        self._arm_timer(self.seed_seconds)
        return self._result(True)

    def _arm_timer(self, seconds: int) -> None:
        self.timer = CountdownTimer(seconds, self._on_timer_expired, self.tick_interval)
        self.timer.start()

    def _stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.stop()

    async def _on_timer_expired(self) -> None:
        await self.submit(auto=True)

    # ── IN_PROGRESS: 답안 / 이동 ─────────────────────────────────────────

    def answer(self, option_text: str, toggle: Optional[bool] = None,
               ordinal: Optional[int] = None) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("답안을 입력")
        ordinal = ordinal or self.navigator.current_ordinal
        if not self.can_access(ordinal):
            return self._result(False, Signal.UPGRADE_PROMPT, self.upgrade_message())
        try:
            self.answers.set_answer(ordinal, option_text, toggle)
        except KeyError as e:
            return self._result(False, message=str(e.args[0]))
        return self._result(True, answered=self.answered_count, accessible=self.accessible_count)

    def _navigated(self, moved: bool) -> ActionResult:
        if not moved:
            return self._result(False, Signal.UPGRADE_PROMPT, self.upgrade_message())
        return self._result(True, current=self.navigator.current_ordinal, page=self.navigator.current_page)

    def next(self) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("이동")
        return self._navigated(self.navigator.next())

    def previous(self) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("이동")
        return self._navigated(self.navigator.previous())

    def jump_to(self, ordinal: int) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("이동")
        try:
            moved = self.navigator.jump_to(ordinal)
        except ValueError as e:
            return self._result(False, message=str(e))
        return self._navigated(moved)

    def set_page(self, page: int) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("페이지를 이동")
        return self._result(True, page=self.navigator.set_page(page))

    def toggle_flag(self) -> ActionResult:
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("문제를 표시")
        flagged = self.navigator.toggle_flag()
        return self._result(True, flagged=int(flagged))

    # ── 제출 ─────────────────────────────────────────────────────────────

    def confirmation_message(self) -> str:
        return (
            f"{self.accessible_count}문항 중 {self.answered_count}문항에 답했습니다. "
            f"제출하시겠습니까?"
        )

    async def submit(self, auto: bool = False, confirmed: bool = False) -> ActionResult:
        """
        최종 제출.

        Args:
            auto:      타이머 만료에 의한 자동 제출 (확인 생략)
            confirmed: 수동 제출 시 사용자가 확인했는지 여부.
                       False면 제출하지 않고 CONFIRM_SUBMIT 신호를 돌려준다.
        """
        if self.state is not SessionState.IN_PROGRESS:
            return self._not_allowed("제출")
        if not auto and not confirmed:
            return self._result(
                False, Signal.CONFIRM_SUBMIT, self.confirmation_message(),
                answered=self.answered_count, accessible=self.accessible_count,
            )

        # IN_PROGRESS를 떠나는 전이는 이것 하나뿐이므로 수동/자동 제출이 겹쳐도 한 번만 진행된다
        self._transition(SessionState.SUBMITTING)
        logger.info(f"시험 제출 시작 ({'자동' if auto else '수동'})")
        return await self._send_submission()

    async def _send_submission(self) -> ActionResult:
        token = self._credentials.get_token()
        if not token:
            self.is_logged_in = False
            return self._fail(ErrorOrigin.SUBMISSION, ErrorKind.AUTHENTICATION,
                              MSG_LOGIN_TO_SUBMIT, signal=Signal.LOGIN_REQUIRED)

        attempt_id = self.attempts.attempt_id
        ceiling = self.accessible_count
        payload = build_submission_payload(self.questions, self.answers, ceiling)

        try:
            result = await self._client.submit_attempt(attempt_id, payload, token)
        except AuthenticationError as e:
            self._credentials.clear()
            self.is_logged_in = False
            return self._fail(ErrorOrigin.SUBMISSION, ErrorKind.AUTHENTICATION,
                              e.message or MSG_LOGIN_TO_SUBMIT, e.status_code, Signal.LOGIN_REQUIRED)
        except ExamApiError as e:
            return self._fail(ErrorOrigin.SUBMISSION, ErrorKind.SUBMISSION,
                              e.message or MSG_SUBMIT_FAILED, e.status_code)

        self.results = build_results_summary(
            attempt_id=attempt_id,
            result=result,
            answers=self.answers,
            ceiling=ceiling,
            total_questions=self.total_questions,
            seeded_seconds=self.seed_seconds,
            remaining_seconds=self.remaining_seconds,
            enrolled=self.enrolled,
        )
        self._write_handoff(ceiling)
        self._transition(SessionState.REDIRECTED)
        logger.info(f"제출 완료: attempt={attempt_id}, 점수={result.score} ({result.percentage}%)")
        return self._result(True)

    def _write_handoff(self, ceiling: int) -> None:
        if self._handoff is None:
            return
        self._handoff({
            "test_results": self.results.model_dump(),
            "user_answers": self.answers.snapshot(),
            "test_questions": [q.model_dump(mode="json") for q in self.questions[:ceiling]],
            "attempt_id": self.attempts.attempt_id,
        })

    # ── ERROR → 재시도 ───────────────────────────────────────────────────

    async def retry(self) -> ActionResult:
        """
        오류 단계별 재시도.
          - 조회 오류: 다시 LOADING
          - 응시 생성 오류: PRE_TEST 로 돌아가 시작 버튼 활성화
          - 제출 오류: 답안/응시 ID를 유지한 채 IN_PROGRESS 로 복귀 (남은 시간부터 타이머 재개).
                       시간이 이미 끝났으면 바로 다시 제출한다.
        """
        if self.state is not SessionState.ERROR or self.error is None:
            return self._not_allowed("재시도")

        origin = self.error.origin
        if origin is ErrorOrigin.LOADING:
            return await self.load()
        if origin is ErrorOrigin.ATTEMPT:
            self._transition(SessionState.PRE_TEST)
            return self._result(True)

        remaining = self.remaining_seconds
        if remaining > 0:
            self._transition(SessionState.IN_PROGRESS)
            self._arm_timer(remaining)
            return self._result(True)
        self._transition(SessionState.SUBMITTING)
        return await self._send_submission()

    # ── 정리 ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """화면 이탈 또는 세션 정리. 타이머를 즉시 정지하고 HTTP 클라이언트를 닫는다."""
        self._stop_timer()
        await self._client.close()

    async def __aenter__(self) -> "SessionController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
