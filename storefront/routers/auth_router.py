from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
import logging
from storefront.auth import SessionRegistry, authenticate
from storefront.config import Settings
from storefront.dependencies import get_current_user, get_sessions, get_settings_dep, get_store
from storefront.schemas import LoginRequest, LoginResponse, MeResponse, SuccessResponse, UserRecord, UserResponse
from storefront.store import CatalogStore

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    store: CatalogStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Authenticate user and create session.

    Process:
    1. Look up user by username and verify the password hash
    2. Discard any session id the client already holds
    3. Create a fresh session and set the cookie
    4. Return user data

    Error cases:
    - 400: username or password missing (request validation)
    - 401: unknown username or wrong password, same body for both
    """
    user = await authenticate(store, payload.username, payload.password)
    if user is None:
        logger.info("Failed login for username %r", payload.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    # Regenerate: a pre-auth session id must never become an authenticated one
    previous_id = request.cookies.get(settings.session_cookie_name)
    if previous_id:
        sessions.destroy(previous_id)

    session = sessions.create(user.id, user.is_admin)
    _set_session_cookie(response, session.session_id, settings)
    logger.info("User %s logged in", user.username)

    return LoginResponse(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Invalidate session and clear cookie.

    Returns success even if session doesn't exist (idempotent).
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        sessions.destroy(session_id)

    _clear_session_cookie(response, settings)

    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(user: UserRecord = Depends(get_current_user)):
    """
    Get authenticated user's information.

    Returns 401 if not authenticated (handled by dependency).
    """
    return MeResponse(user=UserResponse.model_validate(user))


def _set_session_cookie(response: Response, session_id: str, settings: Settings):
    """
    Set session cookie with security flags.

    The cookie only contains the session ID (opaque token).
    All user data stays server-side.
    """
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        httponly=settings.cookie_httponly,
        secure=settings.cookie_is_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.session_expire_hours * 3600,
        path="/",
    )


def _clear_session_cookie(response: Response, settings: Settings):
    """
    Clear session cookie by setting it with max_age=0.
    """
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=settings.cookie_httponly,
        secure=settings.cookie_is_secure,
        samesite=settings.cookie_samesite,
        path="/",
    )
