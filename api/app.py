"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + 만료 세션 정리
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import SESSION_SWEEP_INTERVAL, SESSION_TTL
from api.routes import router
import api.session as session
from practice_test_cbt.services.api_client import ExamApiClient

SESSION_COOKIE = "cbt_session"

logger = logging.getLogger(__name__)


async def _close_controllers(controllers) -> None:
    for controller in controllers:
        try:
            await controller.close()
        except Exception:
            logger.exception("세션 컨트롤러 정리 중 오류")


async def _sweep_loop() -> None:
    # 만료 세션 주기적 정리 (5분마다): 타이머 정지 + HTTP 클라이언트 종료
    while True:
        await asyncio.sleep(SESSION_SWEEP_INTERVAL)
        controllers = session.cleanup_expired()
        if controllers:
            logger.info(f"만료 세션 {len(controllers)}개 정리")
            await _close_controllers(controllers)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    sweeper = asyncio.create_task(_sweep_loop())
    try:
        yield
    finally:
        sweeper.cancel()
        await _close_controllers(session.drain())


def create_app(client_factory: Optional[Callable[[], ExamApiClient]] = None) -> FastAPI:
    """
    Args:
        client_factory: 세션마다 백엔드 클라이언트를 만드는 함수.
                        None이면 config.API_BASE_URL 로 ExamApiClient 생성.
    """
    app = FastAPI(title="Practice Test CBT", docs_url=None, redoc_url=None, lifespan=_lifespan)
    app.state.client_factory = client_factory or ExamApiClient

    # CORS (모바일 브라우저 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=SESSION_TTL,
        )
        return response

    app.include_router(router)

    @app.get("/")
    async def index():
        return {"app": "practice-test-cbt", "ok": True}

    return app
