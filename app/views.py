from __future__ import annotations

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.errors import PostResult
from app.state import AuthorizationState

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

ERROR_MESSAGES = {
    "authorization_denied": "Authorization was denied. Connect again to continue.",
    "token_exchange_failed": "Could not complete sign-in with X. Please try again.",
    "no_file_selected": "Please select an image to upload.",
}


def render_home(request: Request, state: AuthorizationState, error: str | None = None):
    error_message = None
    if error:
        error_message = ERROR_MESSAGES.get(error, "Something went wrong. Please try again.")
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "connected": state.is_authenticated,
            "error": error,
            "error_message": error_message,
        },
    )


def render_result(request: Request, result: PostResult):
    return templates.TemplateResponse(request, "result.html", {"result": result})
