"""
services/api_client.py

시험 백엔드 REST 클라이언트 (httpx 비동기).
Public API:
  - fetch_exam(slug) -> ExamDefinition
  - fetch_questions(exam_id, test_id) -> QuestionBundle
  - check_enrollment(exam_id, token) -> bool          : 실패해도 예외 없이 False
  - ensure_attempt(exam_id, test_id, token) -> Attempt : 응시 get-or-create (멱등)
  - submit_attempt(attempt_id, answers, token) -> SubmissionResult

HTTP 상태 코드 해석(로그인 안내, 메시지 분기)은 호출하는 쪽이 담당하고,
이 모듈은 상태 코드와 서버 메시지를 담은 예외만 던진다.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from config import API_BASE_URL, REQUEST_TIMEOUT
from practice_test_cbt.models.question_model import (
    Attempt, ExamDefinition, Question, QuestionBundle,
    SubmissionAnswer, SubmissionResult,
)

logger = logging.getLogger(__name__)


# ── 예외 ─────────────────────────────────────────────────────────────────────

class ExamApiError(Exception):
    """백엔드 호출 실패. status_code는 HTTP 응답이 없으면 None."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ExamApiError):
    """자격 증명 없음/만료 (401)."""


class ResolutionError(ExamApiError):
    """시험/연습 시험/계정을 찾지 못함, 잘못된 식별자."""


class TransientNetworkError(ExamApiError):
    """연결 실패, 타임아웃, 5xx 등 재시도로 해결될 수 있는 오류."""


class SubmissionError(ExamApiError):
    """제출 실패 (non-2xx, 응답 형식 오류, success:false)."""


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _error_message(response: httpx.Response, fallback: str) -> str:
    """오류 응답에서 서버 메시지 추출. JSON이 아니면 본문 텍스트를 사용."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or fallback
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if data.get(key):
                return str(data[key])
    return fallback


def _error_for_status(response: httpx.Response, fallback: str) -> ExamApiError:
    message = _error_message(response, fallback)
    status = response.status_code
    if status == 401:
        return AuthenticationError(message, status)
    if status in (400, 404):
        return ResolutionError(message, status)
    return TransientNetworkError(message, status)


def _restored_answers(raw_questions: Any) -> Dict[int, List[str]]:
    """get-or-create 응답의 user_selected_answers → {ordinal: [선택]}."""
    restored: Dict[int, List[str]] = {}
    if not isinstance(raw_questions, list):
        return restored
    for idx, q in enumerate(raw_questions, start=1):
        if not isinstance(q, dict):
            continue
        selected = q.get("user_selected_answers")
        if not selected:
            continue
        if not isinstance(selected, list):
            selected = [selected]
        restored[idx] = [str(s) for s in selected]
    return restored


# ── 클라이언트 ───────────────────────────────────────────────────────────────

class ExamApiClient:
    """
    시험 백엔드 호출 모음. 세션마다 하나 생성하고 close()로 정리한다.
    테스트에서는 transport에 httpx.MockTransport를 넘긴다.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"요청 시간 초과: {method} {url}")
            raise TransientNetworkError("서버 응답 시간이 초과되었습니다. 다시 시도해 주세요.") from e
        except httpx.RequestError as e:
            logger.warning(f"요청 실패: {method} {url} ({e.__class__.__name__})")
            raise TransientNetworkError(
                f"서버에 연결할 수 없습니다 ({self._client.base_url}). 네트워크 상태를 확인해 주세요."
            ) from e

    async def fetch_exam(self, slug: str) -> ExamDefinition:
        response = await self._request("GET", f"/api/courses/exams/{slug}/")
        if response.is_error:
            raise _error_for_status(response, f"시험을 찾을 수 없습니다 ({response.status_code}).")
        try:
            return ExamDefinition.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResolutionError(f"시험 정보 형식이 올바르지 않습니다: {slug}") from e

    async def fetch_questions(self, exam_id: str, test_id: str) -> QuestionBundle:
        response = await self._request("GET", f"/api/questions/test/{exam_id}/{test_id}/")
        if response.is_error:
            raise _error_for_status(response, "문제를 불러오지 못했습니다.")
        try:
            data = response.json()
        except ValueError as e:
            raise TransientNetworkError("문제 목록 응답 형식이 올바르지 않습니다.") from e

        if not isinstance(data, dict) or data.get("success") is False:
            return QuestionBundle()

        raw_questions = data.get("questions") or []
        questions = [
            Question.from_api(raw, ordinal)
            for ordinal, raw in enumerate(raw_questions, start=1)
            if isinstance(raw, dict)
        ]
        test = data.get("test") or {}
        return QuestionBundle(questions=questions, duration=test.get("duration"))

    async def check_enrollment(self, exam_id: str, token: Optional[str]) -> bool:
        """수강 여부. 토큰이 없거나 어떤 이유로든 실패하면 False."""
        if not token:
            return False
        try:
            response = await self._request(
                "GET", f"/api/enrollments/check/{exam_id}/", headers=_auth_headers(token)
            )
        except TransientNetworkError:
            return False
        if response.is_error:
            logger.info(f"수강 여부 확인 실패 ({response.status_code}) → 미수강으로 처리")
            return False
        try:
            data = response.json()
        except ValueError:
            return False
        if not isinstance(data, dict):
            return False
        return bool(data.get("enrolled") or data.get("already_enrolled"))

    async def ensure_attempt(self, exam_id: str, test_id: str, token: str) -> Attempt:
        response = await self._request(
            "POST",
            "/api/exams/attempt/get-or-create/",
            json={"exam_id": str(exam_id), "test_id": str(test_id)},
            headers=_auth_headers(token),
        )
        if response.is_error:
            # 메시지 분류는 AttemptManager가 한다
            raise _error_for_status(response, "")
        try:
            data = response.json()
        except ValueError as e:
            raise TransientNetworkError("서버 응답 형식이 올바르지 않습니다. 다시 시도해 주세요.") from e

        if not isinstance(data, dict) or not data.get("success") or not data.get("attempt_id"):
            message = data.get("message") if isinstance(data, dict) else None
            raise TransientNetworkError(message or "서버 응답 형식이 올바르지 않습니다. 다시 시도해 주세요.")

        return Attempt(
            attempt_id=str(data["attempt_id"]),
            restored_answers=_restored_answers(data.get("questions")),
        )

    async def submit_attempt(
        self,
        attempt_id: str,
        answers: List[SubmissionAnswer],
        token: str,
    ) -> SubmissionResult:
        response = await self._request(
            "POST",
            f"/api/exams/attempt/{attempt_id}/submit/",
            json={"user_answers": [a.model_dump() for a in answers]},
            headers=_auth_headers(token),
        )
        if response.is_error:
            if response.status_code == 401:
                raise AuthenticationError(
                    _error_message(response, "시험을 제출하려면 로그인이 필요합니다."), 401
                )
            raise SubmissionError(
                _error_message(response, "시험 제출 중 오류가 발생했습니다. 다시 시도해 주세요."),
                response.status_code,
            )
        try:
            result = SubmissionResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SubmissionError("서버 응답 형식이 올바르지 않습니다. 다시 시도해 주세요.",
                                  response.status_code) from e
        if not result.success:
            raise SubmissionError(result.message or "시험 제출에 실패했습니다. 다시 시도해 주세요.",
                                  response.status_code)
        return result
