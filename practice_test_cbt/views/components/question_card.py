"""
views/components/question_card.py

단일 문제(Question)를 카드 데이터로 변환하는 컴포넌트.
"""

from typing import Any, Dict, Union

from practice_test_cbt.models.question_model import Question

AnswerValue = Union[str, list, None]


def render(
    question: Question,
    total: int,
    saved_answer: AnswerValue = None,
    locked: bool = False,
    flagged: bool = False,
) -> Dict[str, Any]:
    """
    Args:
        question:     표시할 문제
        total:        전체 문제 수 (잠긴 문제 포함)
        saved_answer: 저장된 선택 (단일: 문자열, 복수: 리스트)
        locked:       잠긴 문제 여부 (입력 비활성)
        flagged:      다시 보기 표시 여부
    """
    if question.is_multiple:
        selected = list(saved_answer) if isinstance(saved_answer, list) else []
    else:
        selected = saved_answer if isinstance(saved_answer, str) else ""

    options = []
    for opt in question.options:
        is_selected = opt.text in selected if question.is_multiple else opt.text == selected
        options.append({"text": opt.text, "value": opt.value, "selected": is_selected})

    return {
        "ordinal": question.ordinal,
        "header": f"문제 {question.ordinal} / {total}",
        "question_id": question.id,
        "question_text": question.question_text,
        "question_type": question.question_type.value,
        "points": question.points,
        "options": options,
        "selected": selected,
        "locked": locked,
        "flagged": flagged,
    }
