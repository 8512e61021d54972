"""
services/answer_store.py

사용자 답안지 (OMR 카드).
단일 선택 문제는 문자열 하나, 복수 선택 문제는 순서를 유지하는 집합(리스트)으로 저장한다.
답안 변경은 set_answer() 하나로만 이루어진다.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Union

from practice_test_cbt.models.question_model import Question, QuestionType

logger = logging.getLogger(__name__)

AnswerValue = Union[str, List[str]]


class AnswerStore:
    """
    {ordinal: 선택} 답안지.

    문제 유형은 생성 시 고정되므로, 같은 번호의 값 형태(문자열/리스트)는
    세션 내내 바뀌지 않는다.
    """

    def __init__(self, questions: Iterable[Question]) -> None:
        self._types: Dict[int, QuestionType] = {q.ordinal: q.question_type for q in questions}
        self._answers: Dict[int, AnswerValue] = {}

    def set_answer(self, ordinal: int, option_text: str, toggle: Optional[bool] = None) -> AnswerValue:
        """
        답안 기록.

        Args:
            ordinal:     문제 번호 (1-based)
            option_text: 선택한 보기 내용
            toggle:      복수 선택 문제 전용.
                         True → 추가, False → 제거, None → 해당 보기 하나만 선택

        Returns:
            기록 후의 답안 값
        """
        qtype = self._types.get(ordinal)
        if qtype is None:
            raise KeyError(f"존재하지 않는 문제 번호입니다: {ordinal}")

        if qtype is QuestionType.SINGLE:
            self._answers[ordinal] = option_text
            return option_text

        current = list(self._answers.get(ordinal) or [])
        if toggle is None:
            updated = [option_text]
        elif toggle:
            updated = current if option_text in current else current + [option_text]
        else:
            updated = [ans for ans in current if ans != option_text]

        self._answers[ordinal] = updated
        return list(updated)

    def restore(self, saved: Mapping[int, Iterable[str]]) -> int:
        """
        이전 응시의 답안을 복원한다. 복원된 문제 수를 반환.
        존재하지 않는 번호는 건너뛴다.
        """
        restored = 0
        for ordinal, selections in saved.items():
            qtype = self._types.get(ordinal)
            values = [str(s) for s in selections if s not in (None, "")]
            if qtype is None or not values:
                continue
            if qtype is QuestionType.SINGLE:
                self._answers[ordinal] = values[0]
            else:
                self._answers[ordinal] = list(dict.fromkeys(values))
            restored += 1
        if restored:
            logger.info(f"이전 응시 답안 {restored}개 복원")
        return restored

    def get(self, ordinal: int) -> Optional[AnswerValue]:
        value = self._answers.get(ordinal)
        return list(value) if isinstance(value, list) else value

    def selected_answers(self, ordinal: int) -> List[str]:
        """제출용 선택 목록. 단일 선택도 항상 리스트 (미응답이면 빈 리스트)."""
        value = self._answers.get(ordinal)
        if isinstance(value, list):
            return [str(v) for v in value]
        return [str(value)] if value else []

    def is_answered(self, ordinal: int) -> bool:
        return bool(self._answers.get(ordinal))

    def answered_count(self, limit: int) -> int:
        """limit 이하 번호 중 비어 있지 않은 답안 수."""
        return sum(1 for ordinal in self._answers if ordinal <= limit and self.is_answered(ordinal))

    def remaining_count(self, limit: int) -> int:
        return limit - self.answered_count(limit)

    def snapshot(self) -> Dict[int, AnswerValue]:
        """답안지 복사본 (결과 화면 전달용)."""
        return {k: (list(v) if isinstance(v, list) else v) for k, v in self._answers.items()}
