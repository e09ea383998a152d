from typing import Optional
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from waypoint.auth.auth_utils import (
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token
)
from waypoint.config.settings import settings
from waypoint.constants import ErrorMessages
from waypoint.database.store import DocumentStore, get_store
from waypoint.models import User, UserSession
from waypoint.schemas import LoginRequest, LoginResponse

router = APIRouter(prefix="/auth", tags=["Auth"])

REFRESH_COOKIE = "jwt"

def upsert_session(store: DocumentStore, username: str, refresh_token: str) -> UserSession:
    """
    Keeps exactly one session row per username.
    """
    session = store.find_one(UserSession, UserSession.username == username)
    if session:
        return store.update_one(session, set={"refresh_token": refresh_token})
    return store.insert_one(UserSession(username=username, refresh_token=refresh_token))

@router.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    response: Response,
    store: DocumentStore = Depends(get_store)
):
    """
    Authenticates a user, opens its session and returns an access token.
    The refresh token travels in an http-only cookie.
    """
    if not request.username or not request.password:
        raise HTTPException(status_code=401, detail=ErrorMessages.CREDENTIALS_REQUIRED)

    user = store.find_one(User, User.username == request.username)
    if not user or not verify_password(request.password, user.hashed_password):
        raise HTTPException(status_code=401, detail=ErrorMessages.INVALID_CREDENTIALS)

    access_token = create_access_token(user.username, user.role)
    refresh_token = create_refresh_token(user.username, user.role)
    upsert_session(store, user.username, refresh_token)

    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        httponly=True,
        max_age=settings.REFRESH_TOKEN_EXPIRE_HOURS * 60 * 60,
        samesite="strict",
        secure=True,
    )
    return {
        "username": user.username,
        "role": user.role,
        "name": user.name,
        "accessToken": access_token,
    }

@router.post("/refresh")
def refresh(
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    store: DocumentStore = Depends(get_store)
):
    """
    Issues a new access token for a live session.
    """
    if not refresh_token:
        raise HTTPException(status_code=401, detail=ErrorMessages.NOT_LOGGED_IN)

    session = store.find_one(UserSession, UserSession.refresh_token == refresh_token)
    if not session:
        raise HTTPException(status_code=403, detail=ErrorMessages.INVALID_AUTHENTICATION)

    payload = decode_token(refresh_token, settings.REFRESH_SECRET_KEY)
    if not payload or payload.get("user") != session.username:
        raise HTTPException(status_code=403, detail=ErrorMessages.INVALID_AUTHENTICATION)

    user = store.find_one(User, User.username == session.username)
    if not user:
        raise HTTPException(status_code=403, detail=ErrorMessages.INVALID_AUTHENTICATION)

    return {"accessToken": create_access_token(user.username, user.role)}

@router.post("/logout", status_code=204)
def logout(
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    store: DocumentStore = Depends(get_store)
):
    """
    Closes the session holding the cookie's refresh token.
    """
    response = Response(status_code=204)
    if refresh_token:
        store.delete_many(UserSession, UserSession.refresh_token == refresh_token)
        response.delete_cookie(REFRESH_COOKIE, httponly=True, samesite="strict", secure=True)
    return response
