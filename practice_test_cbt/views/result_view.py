"""
views/result_view.py — 제출 결과 요약

결과 화면 자체는 별도 서비스가 그리며, 여기서는 넘겨줄 요약 데이터만 만든다.
점수/합격 여부는 서버 값을 그대로 사용한다.
"""

from typing import Any, Dict

from practice_test_cbt.models.question_model import ResultsSummary


def render(summary: ResultsSummary) -> Dict[str, Any]:
    return {
        "screen": "result",
        "score": summary.correct_answers,
        "percentage": round(summary.percentage, 1),
        "passed": summary.passed,
        "badge": "합격" if summary.passed else "불합격",
        "stats": {
            "questions_completed": summary.questions_completed,
            "total_questions": summary.total_questions,
            "correct": summary.correct_answers,
            "incorrect": summary.incorrect_answers,
            "unanswered": summary.unanswered,
        },
        "time_taken": summary.time_taken,
        "has_full_access": summary.has_full_access,
        "attempt_id": summary.attempt_id,
    }
