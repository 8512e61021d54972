"""
api/routes.py — FastAPI 엔드포인트

각 엔드포인트는 세션의 SessionController 에 동작을 위임하고,
처리 결과(ActionResult)와 현재 화면 데이터를 함께 돌려준다.
로그인/업그레이드/제출 확인 안내는 오류가 아니므로 200 + signal 로 응답한다.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

import api.session as session
from practice_test_cbt.models.session_state import ActionResult
from practice_test_cbt.services.session_controller import SessionController
from practice_test_cbt.views import screen_view

router = APIRouter()
logger = logging.getLogger(__name__)


# ── Pydantic request bodies ──────────────────────────────────────────────────

class TokenBody(BaseModel):
    token: str

class LoadTestBody(BaseModel):
    provider: str = Field(..., min_length=1)
    exam_code: str = Field(..., min_length=1)
    test_id: str = Field(..., min_length=1)

class SaveAnswerBody(BaseModel):
    option: str
    checked: Optional[bool] = None     # 복수 선택: True 추가 / False 제거 / None 단독 선택
    ordinal: Optional[int] = None      # 없으면 현재 문제

class NavigateBody(BaseModel):
    action: Literal["next", "previous", "jump", "page"]
    index: Optional[int] = None

class SubmitBody(BaseModel):
    confirmed: bool = False


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _controller(request: Request) -> SessionController:
    controller = session.get(_sid(request), "controller")
    if controller is None:
        raise HTTPException(status_code=404, detail="시험 세션이 없습니다.")
    return controller


def _respond(controller: SessionController, result: Optional[ActionResult] = None) -> dict:
    body = {"screen": screen_view.render(controller)}
    if result is not None:
        body.update({
            "ok": result.ok,
            "signal": result.signal.value if result.signal else None,
            "message": result.message,
            "details": result.details,
        })
    return body


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.post("/api/set-token")
async def set_token(body: TokenBody, request: Request):
    token = body.token.strip()
    if not token:
        raise HTTPException(status_code=400, detail="토큰이 비어 있습니다.")
    session.SessionCredentialStore(_sid(request)).set_token(token)
    return {"ok": True}


@router.post("/api/logout")
async def logout(request: Request):
    session.SessionCredentialStore(_sid(request)).clear()
    return {"ok": True}


@router.post("/api/load-test")
async def load_test(body: LoadTestBody, request: Request):
    sid = _sid(request)
    previous = session.get(sid, "controller")
    if previous is not None:
        await previous.close()

    controller = SessionController(
        provider=body.provider,
        exam_code=body.exam_code,
        test_id=body.test_id,
        client=request.app.state.client_factory(),
        credentials=session.SessionCredentialStore(sid),
        handoff=session.handoff_writer(sid),
    )
    session.put(sid, "controller", controller)
    session.put(sid, "handoff", {})

    result = await controller.load()
    return _respond(controller, result)


@router.get("/api/test-state")
async def test_state(request: Request):
    return _respond(_controller(request))


@router.post("/api/start-test")
async def start_test(request: Request):
    controller = _controller(request)
    result = await controller.start()
    return _respond(controller, result)


@router.post("/api/save-answer")
async def save_answer(body: SaveAnswerBody, request: Request):
    controller = _controller(request)
    result = controller.answer(body.option, body.checked, body.ordinal)
    return _respond(controller, result)


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    controller = _controller(request)
    if body.action in ("jump", "page") and body.index is None:
        raise HTTPException(status_code=400, detail="이동할 번호가 없습니다.")

    if body.action == "next":
        result = controller.next()
    elif body.action == "previous":
        result = controller.previous()
    elif body.action == "jump":
        result = controller.jump_to(body.index)
    else:
        result = controller.set_page(body.index)
    return _respond(controller, result)


@router.post("/api/toggle-flag")
async def toggle_flag(request: Request):
    controller = _controller(request)
    return _respond(controller, controller.toggle_flag())


@router.post("/api/submit-test")
async def submit_test(body: SubmitBody, request: Request):
    controller = _controller(request)
    result = await controller.submit(auto=False, confirmed=body.confirmed)
    return _respond(controller, result)


@router.post("/api/retry")
async def retry(request: Request):
    controller = _controller(request)
    result = await controller.retry()
    return _respond(controller, result)


@router.get("/api/results")
async def get_results(request: Request):
    """결과 화면 전달 데이터. 한 번 읽으면 비워진다."""
    sid = _sid(request)
    handoff = session.get(sid, "handoff") or {}
    if not handoff:
        raise HTTPException(status_code=404, detail="결과 정보가 없습니다.")
    session.put(sid, "handoff", {})
    return handoff


@router.post("/api/reset")
async def reset_session(request: Request):
    controller = session.reset(_sid(request))
    if controller is not None:
        await controller.close()
    return {"ok": True}
