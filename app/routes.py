from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse

from app.auth_flow import AuthorizationFlow
from app.errors import AuthorizationError, Failure, NotAuthenticated, PostCreationFailed
from app.posting import PostingController
from app.state import SessionStore
from app.views import render_home, render_result

logger = logging.getLogger("x-image-poster")

SESSION_KEY = "sid"

router = APIRouter()


def session_id_for(request: Request) -> str:
    sid = request.session.get(SESSION_KEY)
    if not sid:
        sid = secrets.token_urlsafe(24)
        request.session[SESSION_KEY] = sid
    return sid


def _store(request: Request) -> SessionStore:
    return request.app.state.session_store


def _auth_flow(request: Request) -> AuthorizationFlow:
    return request.app.state.auth_flow


def _poster(request: Request) -> PostingController:
    return request.app.state.poster


@router.get("/")
def home(request: Request, error: str | None = None):
    state = _store(request).get(session_id_for(request))
    return render_home(request, state, error)


@router.get("/auth")
def begin_auth(request: Request) -> RedirectResponse:
    url = _auth_flow(request).begin_authorization(session_id_for(request))
    return RedirectResponse(url=url, status_code=302)


def oauth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    try:
        _auth_flow(request).handle_callback(session_id_for(request), code, state, error=error)
    except AuthorizationError as exc:
        return RedirectResponse(url=f"/?error={exc.code}", status_code=302)
    return RedirectResponse(url="/", status_code=302)


@router.post("/upload")
def upload(
    request: Request,
    image: UploadFile | None = File(None),
    text: str = Form(""),
):
    image_bytes = image.file.read() if image is not None else b""
    try:
        result = _poster(request).post(session_id_for(request), image_bytes, text)
    except NotAuthenticated:
        return RedirectResponse(url="/", status_code=302)
    except Exception:  # noqa: BLE001
        logger.exception("upload_failed reason=unexpected_error")
        result = Failure(PostCreationFailed("Unexpected error while posting"))
    return render_result(request, result)


@router.get("/logout")
def logout(request: Request) -> RedirectResponse:
    sid = request.session.get(SESSION_KEY)
    if sid:
        _auth_flow(request).logout(sid)
    request.session.clear()
    return RedirectResponse(url="/", status_code=302)


__all__ = ["router", "oauth_callback", "session_id_for"]
