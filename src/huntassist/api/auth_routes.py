from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from huntassist.api.deps import get_auth_service, get_current_user, request_token
from huntassist.api.schemas import SessionResponse, SignInRequest, SignUpRequest, UserResponse
from huntassist.config import get_settings
from huntassist.core.auth import AuthService
from huntassist.db.models import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name)


@router.post("/sign-up", response_model=UserResponse, status_code=201)
def sign_up(payload: SignUpRequest, auth: AuthService = Depends(get_auth_service)) -> UserResponse:
    user = auth.sign_up(email=payload.email, password=payload.password, name=payload.name)
    return _user_response(user)


@router.post("/sign-in", response_model=SessionResponse)
def sign_in(
    payload: SignInRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    settings = get_settings()
    user, token = auth.sign_in(email=payload.email, password=payload.password)
    max_age = settings.session_ttl_min * 60
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    return SessionResponse(user=_user_response(user), token=token, expires_in_sec=max_age)


@router.post("/sign-out", status_code=204)
def sign_out(request: Request, auth: AuthService = Depends(get_auth_service)) -> Response:
    auth.sign_out(request_token(request))
    response = Response(status_code=204)
    response.delete_cookie(get_settings().session_cookie_name)
    return response


@router.get("/session", response_model=UserResponse)
def current_session(user: User = Depends(get_current_user)) -> UserResponse:
    return _user_response(user)
