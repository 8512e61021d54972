"""
services/exam_service.py

시험 식별/제출 데이터 구성 및 결과 요약 비즈니스 로직.
순수 Python 함수로 구성: 네트워크 호출이나 전역 상태 변경이 없다.
채점은 서버가 하며 여기서는 서버 점수를 그대로 옮겨 담기만 한다.
"""

from typing import List, Optional, Sequence

from practice_test_cbt.models.question_model import (
    ExamDefinition, PracticeTest, Question, ResultsSummary,
    SubmissionAnswer, SubmissionResult,
)
from practice_test_cbt.services.answer_store import AnswerStore
from practice_test_cbt.services.timer import format_clock


def _normalize_slug_part(value: str) -> str:
    return str(value).strip().lower().replace("_", "-")


def compose_exam_slug(provider: str, exam_code: str) -> str:
    """
    시험 조회용 slug.

    provider, exam_code를 각각 소문자 + '_' → '-' 로 정규화한 뒤
    '<provider>-<exam_code>' 로 합친다. 예: ("AWS", "SAA_C03") → "aws-saa-c03"
    """
    return f"{_normalize_slug_part(provider)}-{_normalize_slug_part(exam_code)}"


def resolve_practice_test(
    exam: ExamDefinition,
    test_id: str,
    question_count: int = 0,
) -> PracticeTest:
    """
    URL의 test_id로 연습 시험을 찾는다.

    탐색 순서 (순서가 중요):
      1. slug 일치
      2. DB 식별자 일치
      3. 1-based 위치 인덱스 (예전 URL 호환)
      4. 모두 실패하면 시험 기본값으로 임시 연습 시험을 만든다 (is_placeholder=True)
    """
    tests = exam.practice_tests
    test_id = str(test_id)

    for test in tests:
        if test.slug and test.slug == test_id:
            return test

    for test in tests:
        if test.id and test.id == test_id:
            return test

    if test_id.isdigit():
        index = int(test_id) - 1
        if 0 <= index < len(tests):
            return tests[index]

    return PracticeTest(
        id=test_id,
        name=f"Practice Test {test_id}",
        duration=exam.duration or "30 minutes",
        difficulty=exam.difficulty or "Medium",
        questions=question_count,
        is_placeholder=True,
    )


def build_submission_payload(
    questions: Sequence[Question],
    answers: AnswerStore,
    ceiling: int,
) -> List[SubmissionAnswer]:
    """
    제출용 답안 목록.

    접근 가능한 범위(ordinal <= ceiling)의 문제만 포함한다. 잠긴 문제의 답안이
    메모리에 남아 있더라도 전송하지 않는다. ID가 없는 문제는 건너뛴다.
    """
    payload: List[SubmissionAnswer] = []
    for q in questions:
        if q.ordinal > ceiling or not q.id:
            continue
        payload.append(
            SubmissionAnswer(question_id=q.id, selected_answers=answers.selected_answers(q.ordinal))
        )
    return payload


def count_unanswered(answers: AnswerStore, ceiling: int) -> int:
    return sum(1 for ordinal in range(1, ceiling + 1) if not answers.is_answered(ordinal))


def build_results_summary(
    attempt_id: str,
    result: SubmissionResult,
    answers: AnswerStore,
    ceiling: int,
    total_questions: int,
    seeded_seconds: int,
    remaining_seconds: Optional[int],
    enrolled: bool,
) -> ResultsSummary:
    """
    제출 성공 응답 → 결과 화면용 요약.

    소요 시간 = 시작 시 설정된 시간 - 남은 시간. 남은 시간이 설정되지 않았으면
    (None) 전체 시간을 쓴 것으로 본다.
    """
    unanswered = count_unanswered(answers, ceiling)
    remaining = seeded_seconds if remaining_seconds is None else remaining_seconds
    spent = max(0, seeded_seconds - max(0, remaining))
    correct = result.score or 0

    return ResultsSummary(
        attempt_id=attempt_id,
        questions_completed=ceiling,
        total_questions=total_questions,
        correct_answers=correct,
        incorrect_answers=max(0, ceiling - correct - unanswered),
        unanswered=unanswered,
        time_taken=format_clock(spent),
        time_spent_seconds=spent,
        has_full_access=enrolled,
        percentage=result.percentage or 0.0,
        passed=result.passed,
    )
