"""
services/navigator.py

현재 문제 위치와 문제 번호 네비게이터(페이지당 20문항) 상태.
잠긴 문제도 네비게이터에는 모두 표시되며, 이동만 막는다.
"""

import math
from typing import Callable, List, Set, Tuple

from config import QUESTIONS_PER_PAGE


def page_of(ordinal: int, page_size: int = QUESTIONS_PER_PAGE) -> int:
    return max(1, math.ceil(ordinal / page_size))


class Navigator:
    """
    Attributes:
        total:           전체 문제 수 (잠긴 문제 포함)
        current_ordinal: 현재 문제 번호 (1-based)
        current_page:    네비게이터 현재 페이지 (1-based)
        flagged:         '나중에 다시 보기' 표시한 문제 번호
    """

    def __init__(
        self,
        total: int,
        can_access: Callable[[int], bool],
        page_size: int = QUESTIONS_PER_PAGE,
    ) -> None:
        self.total = total
        self.page_size = page_size
        self.current_ordinal = 1
        self.current_page = 1
        self.flagged: Set[int] = set()
        self._can_access = can_access

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    def page_range(self, page: int = None) -> Tuple[int, int]:
        """페이지에 표시되는 (시작 번호, 끝 번호). 끝 번호 포함."""
        page = page or self.current_page
        start = (page - 1) * self.page_size + 1
        end = min(page * self.page_size, self.total)
        return start, end

    def page_ordinals(self, page: int = None) -> List[int]:
        start, end = self.page_range(page)
        return list(range(start, end + 1))

    def _move(self, ordinal: int) -> None:
        self.current_ordinal = ordinal
        self.current_page = page_of(ordinal, self.page_size)

    def next(self) -> bool:
        """
        다음 문제로 이동. 마지막 문제면 아무 것도 하지 않고 True.
        잠긴 문제로 넘어가려 하면 이동하지 않고 False (업그레이드 안내 대상).
        """
        target = self.current_ordinal + 1
        if target > self.total:
            return True
        if not self._can_access(target):
            return False
        self._move(target)
        return True

    def previous(self) -> bool:
        target = self.current_ordinal - 1
        if target < 1:
            return True
        if not self._can_access(target):
            return False
        self._move(target)
        return True

    def jump_to(self, ordinal: int) -> bool:
        """네비게이터 번호 클릭. 범위 밖이면 ValueError, 잠긴 문제면 False."""
        if not 1 <= ordinal <= self.total:
            raise ValueError(f"문제 번호 범위를 벗어났습니다: {ordinal} (1~{self.total})")
        if not self._can_access(ordinal):
            return False
        self._move(ordinal)
        return True

    def set_page(self, page: int) -> int:
        """현재 문제는 그대로 두고 네비게이터 페이지만 넘긴다."""
        self.current_page = max(1, min(page, self.total_pages))
        return self.current_page

    def toggle_flag(self, ordinal: int = None) -> bool:
        """문제 표시 토글. 토글 후 표시 여부 반환."""
        ordinal = ordinal or self.current_ordinal
        if ordinal in self.flagged:
            self.flagged.discard(ordinal)
            return False
        self.flagged.add(ordinal)
        return True
