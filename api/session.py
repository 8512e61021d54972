"""
api/session.py — 멀티유저 인메모리 세션 (쿠키 기반)

각 사용자에게 UUID 세션 ID를 발급하고, 세션별로 독립된 상태를 유지.
세션마다 토큰, 진행 중인 SessionController, 결과 화면 전달 데이터를 담는다.
TTL(기본 1시간) 경과 시 자동 만료.
"""

import threading
import time
import uuid
from typing import Any, Dict, List, Optional

from config import SESSION_TTL
from practice_test_cbt.services.credentials import CredentialStore

_lock = threading.Lock()
_sessions: Dict[str, Dict[str, Any]] = {}
_timestamps: Dict[str, float] = {}


def _new_state() -> Dict[str, Any]:
    return {
        "token": "",
        "controller": None,
        "handoff": {},
    }


def create_session() -> str:
    """새 세션을 생성하고 세션 ID를 반환."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> Optional[Dict[str, Any]]:
    """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            return None
        _timestamps[sid] = time.time()  # 접근 시 갱신
        return _sessions[sid]


def get(sid: str, key: str, default=None):
    """세션에서 값 읽기."""
    session = get_session(sid)
    if session is None:
        return default
    return session.get(key, default)


def put(sid: str, key: str, value) -> None:
    """세션에 값 쓰기."""
    with _lock:
        if sid in _sessions:
            _sessions[sid][key] = value
            _timestamps[sid] = time.time()


def reset(sid: str) -> Optional[Any]:
    """
    세션 초기화 (토큰은 유지).
    진행 중이던 컨트롤러를 반환하므로 호출 측에서 정리해야 한다.
    """
    with _lock:
        if sid not in _sessions:
            return None
        old = _sessions[sid]
        _sessions[sid] = _new_state()
        _sessions[sid]["token"] = old.get("token", "")
        _timestamps[sid] = time.time()
        return old.get("controller")


def cleanup_expired() -> List[Any]:
    """만료된 세션을 정리. 정리해야 할 컨트롤러 목록 반환."""
    now = time.time()
    controllers = []
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            controller = _sessions[sid].get("controller")
            if controller is not None:
                controllers.append(controller)
            del _sessions[sid]
            del _timestamps[sid]
    return controllers


def drain() -> List[Any]:
    """모든 세션 제거 (서버 종료 시). 정리해야 할 컨트롤러 목록 반환."""
    with _lock:
        controllers = [s["controller"] for s in _sessions.values() if s.get("controller") is not None]
        _sessions.clear()
        _timestamps.clear()
    return controllers


class SessionCredentialStore(CredentialStore):
    """세션 저장소의 'token' 값을 읽고 쓰는 토큰 보관소."""

    def __init__(self, sid: str) -> None:
        super().__init__()
        self._sid = sid

    def get_token(self) -> Optional[str]:
        token = (get(self._sid, "token", "") or "").strip()
        return token or None

    def set_token(self, token: Optional[str]) -> None:
        put(self._sid, "token", token or "")

    def clear(self) -> None:
        put(self._sid, "token", "")


def handoff_writer(sid: str):
    """결과 화면 전달 데이터를 세션에 기록하는 함수."""
    def _write(data: Dict[str, Any]) -> None:
        put(sid, "handoff", dict(data))
    return _write
