from practice_test_cbt.models.question_model import (
    ExamDefinition, Question, QuestionType, SubmissionResult,
)
from practice_test_cbt.services.answer_store import AnswerStore
from practice_test_cbt.services.exam_service import (
    build_results_summary, build_submission_payload, compose_exam_slug,
    count_unanswered, resolve_practice_test,
)


def _exam(tests):
    return ExamDefinition.model_validate({
        "id": 7, "provider": "aws", "code": "saa-c03",
        "duration": "60 minutes", "difficulty": "Hard",
        "practice_tests_list": tests,
    })


def _questions(total=15, multiple=(5,)):
    return [
        Question(id=f"q{i}", ordinal=i,
                 question_type=QuestionType.MULTIPLE if i in multiple else QuestionType.SINGLE)
        for i in range(1, total + 1)
    ]


def test_compose_exam_slug_normalizes_case_and_underscores():
    assert compose_exam_slug("AWS", "SAA_C03") == "aws-saa-c03"
    assert compose_exam_slug("google_cloud", "ace") == "google-cloud-ace"


def test_slug_match_beats_id_and_index():
    exam = _exam([
        {"id": "2", "slug": "intro", "name": "by index and id"},
        {"id": "99", "slug": "2", "name": "by slug"},
    ])
    assert resolve_practice_test(exam, "2").name == "by slug"


def test_id_match_beats_index():
    exam = _exam([
        {"id": "a", "slug": "first", "name": "first"},
        {"_id": "1", "slug": "second", "name": "by id"},
    ])
    assert resolve_practice_test(exam, "1").name == "by id"


def test_positional_index_fallback_is_one_based():
    exam = _exam([{"id": "a", "name": "first"}, {"id": "b", "name": "second"}])
    assert resolve_practice_test(exam, "2").name == "second"


def test_unresolved_test_gets_placeholder():
    exam = _exam([{"id": "a", "name": "first"}])
    test = resolve_practice_test(exam, "9", question_count=12)
    assert test.is_placeholder
    assert test.name == "Practice Test 9"
    assert test.duration == "60 minutes"
    assert test.difficulty == "Hard"
    assert test.questions == 12


def test_payload_only_covers_accessible_ordinals():
    questions = _questions()
    store = AnswerStore(questions)
    store.set_answer(1, "A")
    store.set_answer(5, "B", True)
    store.set_answer(12, "C")  # 잠긴 문제 (ceiling 10)

    payload = build_submission_payload(questions, store, ceiling=10)

    assert [a.question_id for a in payload] == [f"q{i}" for i in range(1, 11)]
    assert payload[0].selected_answers == ["A"]
    assert payload[1].selected_answers == []
    assert payload[4].selected_answers == ["B"]


def test_payload_skips_questions_without_id():
    questions = [Question(id=None, ordinal=1), Question(id="q2", ordinal=2)]
    payload = build_submission_payload(questions, AnswerStore(questions), ceiling=2)
    assert [a.question_id for a in payload] == ["q2"]


def test_results_summary():
    questions = _questions()
    store = AnswerStore(questions)
    for ordinal in (1, 2, 3, 4):
        store.set_answer(ordinal, "A")

    summary = build_results_summary(
        attempt_id="att-1",
        result=SubmissionResult(success=True, score=3, percentage=30.0, passed=False),
        answers=store,
        ceiling=10,
        total_questions=15,
        seeded_seconds=1800,
        remaining_seconds=1800 - 754,
        enrolled=False,
    )

    assert count_unanswered(store, 10) == 6
    assert summary.unanswered == 6
    assert summary.correct_answers == 3
    assert summary.incorrect_answers == 1
    assert summary.time_taken == "12:34"
    assert summary.time_spent_seconds == 754
    assert summary.questions_completed == 10
    assert summary.total_questions == 15
    assert summary.percentage == 30.0
    assert summary.passed is False
