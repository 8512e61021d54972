"""
services/access_policy.py

문제 접근 권한 판정.
답안 입력, 이전/다음 이동, 네비게이터 클릭 모두 이 함수 하나로 판정한다.
"""

from config import FREE_QUESTIONS_LIMIT


def can_access_question(
    ordinal: int,
    enrolled: bool,
    free_limit: int = FREE_QUESTIONS_LIMIT,
) -> bool:
    """수강 중이거나 무료 문제 범위(ordinal <= free_limit)이면 접근 가능."""
    return enrolled or ordinal <= free_limit


def accessible_ceiling(
    total: int,
    enrolled: bool,
    free_limit: int = FREE_QUESTIONS_LIMIT,
) -> int:
    """
    접근 가능한 마지막 문제 번호.
    진행률/남은 문제 수/제출 범위는 전체 문제 수가 아니라 이 값을 기준으로 한다.
    """
    if total <= 0:
        return 0
    # 1..total 중 can_access_question이 참인 마지막 번호
    return total if can_access_question(total, enrolled, free_limit) else min(free_limit, total)
