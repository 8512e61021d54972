import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

# 저장소 루트를 sys.path에 추가 (config, api, practice_test_cbt import 용)
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from practice_test_cbt.services.api_client import ExamApiClient  # noqa: E402
from practice_test_cbt.services.credentials import CredentialStore  # noqa: E402

TOKEN = "header.payload.signature"
BASE_URL = "http://backend.test"

MULTIPLE_ORDINALS = (5, 12)


def make_question(ordinal: int) -> dict:
    q = {
        "id": f"q{ordinal}",
        "question_text": f"Question {ordinal}?",
        "question_type": "multiple" if ordinal in MULTIPLE_ORDINALS else "single",
    }
    if ordinal % 2:
        q["options"] = [{"text": t, "value": t} for t in ("A", "B", "C", "D")]
    else:
        q.update(option_a="A", option_b="B", option_c="C", option_d="D")
    return q


class FakeBackend:
    """httpx.MockTransport 기반 가짜 시험 백엔드."""

    def __init__(self, question_count: int = 25, enrolled: bool = False,
                 duration="90 minutes") -> None:
        self.slug = "aws-saa-c03"
        self.exam = {
            "id": "exam-1",
            "title": "AWS Solutions Architect Associate",
            "provider": "aws",
            "code": "saa-c03",
            "duration": "60 minutes",
            "difficulty": "Hard",
            "practice_tests_list": [
                {"id": "t-100", "slug": "practice-test-1", "name": "Practice Test 1",
                 "duration": "90 minutes", "difficulty": "Medium", "questions": question_count},
                {"id": "t-200", "slug": "practice-test-2", "name": "Practice Test 2"},
            ],
        }
        self.questions = [make_question(i) for i in range(1, question_count + 1)]
        self.duration = duration
        self.enrolled = enrolled

        self.exam_status = 200
        self.questions_status = 200
        self.enrollment_status = 200
        self.attempt_status = 200
        self.attempt_body = {"success": True, "attempt_id": "attempt-42"}
        self.submit_status = 200
        self.submit_body = {"success": True, "score": 7, "percentage": 70.0, "passed": True}

        self.delay = 0.0   # 응답 지연 (초). 동시 요청 테스트용
        self.calls = []

    def calls_to(self, fragment: str):
        return [c for c in self.calls if fragment in c["path"]]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append({
            "method": request.method,
            "path": path,
            "json": body,
            "auth": request.headers.get("Authorization"),
        })
        parts = path.strip("/").split("/")

        if path.startswith("/api/courses/exams/"):
            if self.exam_status != 200 or parts[3] != self.slug:
                return httpx.Response(self.exam_status if self.exam_status != 200 else 404,
                                      json={"message": "Exam not found"})
            return httpx.Response(200, json=self.exam)

        if path.startswith("/api/questions/test/"):
            if self.questions_status != 200:
                return httpx.Response(self.questions_status, json={"message": "boom"})
            return httpx.Response(200, json={
                "success": True,
                "questions": self.questions,
                "test": {"duration": self.duration},
            })

        if path.startswith("/api/enrollments/check/"):
            if self.enrollment_status != 200:
                return httpx.Response(self.enrollment_status)
            return httpx.Response(200, json={"already_enrolled": self.enrolled})

        if path == "/api/exams/attempt/get-or-create/":
            return httpx.Response(self.attempt_status, json=self.attempt_body)

        if path.startswith("/api/exams/attempt/") and path.endswith("/submit/"):
            if isinstance(self.submit_body, str):
                return httpx.Response(self.submit_status, text=self.submit_body)
            return httpx.Response(self.submit_status, json=self.submit_body)

        return httpx.Response(404, json={"message": "unknown route"})

    async def async_handler(self, request: httpx.Request) -> httpx.Response:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.handler(request)

    def client(self) -> ExamApiClient:
        return ExamApiClient(base_url=BASE_URL, transport=httpx.MockTransport(self.async_handler))


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def credentials():
    return CredentialStore(TOKEN)
