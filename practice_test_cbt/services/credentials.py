"""
services/credentials.py

Bearer 토큰 보관소.
세션 컨트롤러는 전역 저장소를 직접 읽지 않고, 주입된 CredentialStore에서만 토큰을 얻는다.
"""

from typing import Optional


def is_well_formed_token(token: Optional[str]) -> bool:
    """JWT 형태(점으로 구분된 세 부분)인지 확인. 서명 검증은 하지 않는다."""
    if not token:
        return False
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


class CredentialStore:
    """메모리 토큰 보관소. API 계층은 세션 저장소 기반 구현으로 교체한다."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        token = (self._token or "").strip()
        return token or None

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
