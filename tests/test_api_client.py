import asyncio

import httpx
import pytest

from practice_test_cbt.models.question_model import QuestionType, SubmissionAnswer
from practice_test_cbt.services.api_client import (
    AuthenticationError, ExamApiClient, ResolutionError,
    SubmissionError, TransientNetworkError,
)

from conftest import BASE_URL, TOKEN


def run(coro):
    return asyncio.run(coro)


def test_fetch_exam_parses_practice_tests(backend):
    exam = run(backend.client().fetch_exam("aws-saa-c03"))
    assert exam.id == "exam-1"
    assert [t.slug for t in exam.practice_tests] == ["practice-test-1", "practice-test-2"]
    assert exam.practice_tests[0].questions == 25


def test_fetch_exam_not_found_is_resolution_error(backend):
    with pytest.raises(ResolutionError) as exc:
        run(backend.client().fetch_exam("nope-nope"))
    assert exc.value.status_code == 404
    assert exc.value.message == "Exam not found"


def test_fetch_questions_synthesizes_lettered_options(backend):
    bundle = run(backend.client().fetch_questions("exam-1", "practice-test-1"))
    assert len(bundle.questions) == 25
    assert bundle.duration == "90 minutes"

    structured, lettered = bundle.questions[0], bundle.questions[1]
    assert [o.text for o in structured.options] == ["A", "B", "C", "D"]
    assert [(o.text, o.value) for o in lettered.options] == [
        ("A", "A"), ("B", "B"), ("C", "C"), ("D", "D"),
    ]
    assert bundle.questions[4].question_type is QuestionType.MULTIPLE
    assert [q.ordinal for q in bundle.questions] == list(range(1, 26))


def test_only_single_tag_means_single_choice(backend):
    backend.questions[0]["question_type"] = "Single"
    backend.questions[1].pop("question_type")
    backend.questions[2]["question_type"] = "true_false"
    bundle = run(backend.client().fetch_questions("exam-1", "practice-test-1"))
    types = [q.question_type for q in bundle.questions[:4]]
    assert types == [
        QuestionType.SINGLE, QuestionType.MULTIPLE, QuestionType.MULTIPLE, QuestionType.SINGLE,
    ]


def test_check_enrollment_without_token_makes_no_call(backend):
    assert run(backend.client().check_enrollment("exam-1", None)) is False
    assert backend.calls == []


def test_check_enrollment_failure_means_not_enrolled(backend):
    backend.enrolled = True
    backend.enrollment_status = 500
    assert run(backend.client().check_enrollment("exam-1", TOKEN)) is False


def test_check_enrollment_sends_bearer_token(backend):
    backend.enrolled = True
    assert run(backend.client().check_enrollment("exam-1", TOKEN)) is True
    assert backend.calls[0]["auth"] == f"Bearer {TOKEN}"


def test_ensure_attempt_restores_previous_selections(backend):
    backend.attempt_body = {
        "success": True,
        "attempt_id": 42,
        "questions": [
            {"id": "q1", "user_selected_answers": ["B"]},
            {"id": "q2", "user_selected_answers": []},
            {"id": "q3", "user_selected_answers": "C"},
        ],
    }
    attempt = run(backend.client().ensure_attempt("exam-1", "1", TOKEN))
    assert attempt.attempt_id == "42"
    assert attempt.restored_answers == {1: ["B"], 3: ["C"]}
    assert backend.calls[0]["json"] == {"exam_id": "exam-1", "test_id": "1"}


def test_ensure_attempt_401_is_authentication_error(backend):
    backend.attempt_status = 401
    backend.attempt_body = {"detail": "Given token not valid"}
    with pytest.raises(AuthenticationError):
        run(backend.client().ensure_attempt("exam-1", "1", TOKEN))


def test_submit_attempt_posts_user_answers(backend):
    answers = [SubmissionAnswer(question_id="q1", selected_answers=["A"])]
    result = run(backend.client().submit_attempt("attempt-42", answers, TOKEN))
    assert result.score == 7
    assert result.passed is True
    call = backend.calls_to("/submit/")[0]
    assert call["path"] == "/api/exams/attempt/attempt-42/submit/"
    assert call["json"] == {"user_answers": [{"question_id": "q1", "selected_answers": ["A"]}]}


def test_submit_attempt_null_scores_default_to_zero(backend):
    backend.submit_body = {"success": True, "score": None, "percentage": None, "passed": None}
    result = run(backend.client().submit_attempt("attempt-42", [], TOKEN))
    assert result.score == 0
    assert result.percentage == 0.0
    assert result.passed is False


def test_submit_attempt_success_false_raises(backend):
    backend.submit_body = {"success": False, "message": "Attempt already submitted"}
    with pytest.raises(SubmissionError) as exc:
        run(backend.client().submit_attempt("attempt-42", [], TOKEN))
    assert exc.value.message == "Attempt already submitted"


def test_submit_attempt_malformed_body_raises(backend):
    backend.submit_body = "<html>oops</html>"
    with pytest.raises(SubmissionError):
        run(backend.client().submit_attempt("attempt-42", [], TOKEN))


def test_submit_attempt_server_error_uses_body_text(backend):
    backend.submit_status = 502
    backend.submit_body = "Bad gateway"
    with pytest.raises(SubmissionError) as exc:
        run(backend.client().submit_attempt("attempt-42", [], TOKEN))
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad gateway"


def test_connection_failure_is_transient():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ExamApiClient(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
    with pytest.raises(TransientNetworkError):
        run(client.fetch_exam("aws-saa-c03"))
