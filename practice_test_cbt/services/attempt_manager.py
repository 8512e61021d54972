"""
services/attempt_manager.py

서버 응시 기록(attempt) 생성/재개.
응시 ID는 한 번 얻으면 세션이 끝날 때까지 바뀌지 않으며, 이후 모든 제출 요청에 사용된다.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from practice_test_cbt.services.api_client import (
    AuthenticationError, ExamApiClient, ExamApiError,
)
from practice_test_cbt.services.credentials import CredentialStore, is_well_formed_token

logger = logging.getLogger(__name__)

MSG_LOGIN_REQUIRED = "시험을 시작하려면 로그인이 필요합니다."
MSG_SESSION_EXPIRED = "로그인 세션이 만료되었거나 계정을 찾을 수 없습니다. 다시 로그인해 주세요."
MSG_TEST_NOT_FOUND = "연습 시험을 찾을 수 없습니다. 시험이 존재하는지 확인해 주세요."
MSG_BAD_REQUEST = "잘못된 요청입니다. 입력 값을 확인해 주세요."
MSG_SERVER_ERROR = "서버 오류가 발생했습니다. 잠시 후 다시 시도해 주세요."
MSG_NETWORK_ERROR = "네트워크 오류가 발생했습니다. 연결 상태를 확인한 뒤 다시 시도해 주세요."

_ACCOUNT_HINTS = ("user", "account", "계정", "사용자")


class AttemptOutcome(BaseModel):
    """ensure_attempt() 결과. 예외 대신 이 값으로 성공/실패를 알린다."""

    attempt_id: Optional[str] = None
    login_required: bool = False
    message: Optional[str] = None
    status_code: Optional[int] = None
    restored_answers: Dict[int, List[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.attempt_id is not None


class AttemptManager:

    def __init__(self, client: ExamApiClient, credentials: CredentialStore) -> None:
        self._client = client
        self._credentials = credentials
        self._attempt_id: Optional[str] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def attempt_id(self) -> Optional[str]:
        return self._attempt_id

    def _login_required(self, message: str, status_code: Optional[int] = None,
                        clear: bool = False) -> AttemptOutcome:
        if clear:
            self._credentials.clear()
        return AttemptOutcome(login_required=True, message=message, status_code=status_code)

    async def ensure_attempt(self, exam_id: str, test_id: str) -> AttemptOutcome:
        """
        응시 get-or-create.

        - 토큰이 없거나 형식이 잘못되면 네트워크 호출 없이 login_required
        - 401 → 저장된 토큰 삭제 + login_required
        - 404 → 메시지에 계정/사용자 언급이 있으면 login_required, 아니면 시험 없음
        - 400 / 500 / 네트워크 오류 → 재시도 가능한 오류 메시지
        이미 응시 ID가 있으면 서버를 다시 호출하지 않는다.
        진행 중인 요청이 있으면 새로 호출하지 않고 그 결과를 함께 기다린다.
        """
        if self._attempt_id:
            return AttemptOutcome(attempt_id=self._attempt_id)

        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._create(exam_id, test_id))
        return await asyncio.shield(self._pending)

    async def _create(self, exam_id: str, test_id: str) -> AttemptOutcome:
        token = self._credentials.get_token()
        if not token:
            return self._login_required(MSG_LOGIN_REQUIRED)
        if not is_well_formed_token(token):
            logger.warning("토큰 형식이 올바르지 않습니다 → 로그인 필요")
            return self._login_required(MSG_LOGIN_REQUIRED, clear=True)

        try:
            attempt = await self._client.ensure_attempt(exam_id, test_id, token)
        except AuthenticationError as e:
            logger.info("응시 생성 401 → 토큰 삭제")
            return self._login_required(MSG_SESSION_EXPIRED, e.status_code, clear=True)
        except ExamApiError as e:
            return self._classify(e)

        self._attempt_id = attempt.attempt_id
        logger.info(f"응시 ID 확보: {attempt.attempt_id} (exam={exam_id}, test={test_id})")
        return AttemptOutcome(
            attempt_id=attempt.attempt_id,
            restored_answers=attempt.restored_answers,
        )

    def _classify(self, error: ExamApiError) -> AttemptOutcome:
        status = error.status_code
        server_message = (error.message or "").strip()

        if status == 404:
            lowered = server_message.lower()
            if any(hint in lowered for hint in _ACCOUNT_HINTS):
                return self._login_required(MSG_SESSION_EXPIRED, status, clear=True)
            message = server_message or MSG_TEST_NOT_FOUND
        elif status == 400:
            message = server_message or MSG_BAD_REQUEST
        elif status is not None and status >= 500:
            message = server_message or MSG_SERVER_ERROR
        else:
            message = server_message or MSG_NETWORK_ERROR

        logger.warning(f"응시 생성 실패 ({status}): {message}")
        return AttemptOutcome(message=message, status_code=status)
