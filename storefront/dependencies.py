from fastapi import Depends, HTTPException, Request, status
from typing import Optional
from storefront.auth import SessionRegistry
from storefront.cache import ResponseCache
from storefront.config import Settings
from storefront.inquiries import InquiryLog
from storefront.models import Session as SessionModel
from storefront.schemas import UserRecord
from storefront.store import CatalogStore


# Process-wide collaborators are built by create_app and kept on app.state.
# Dependencies that touch the store are async so they run on the event loop
# thread, which keeps store access serialized.

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_inquiry_log(request: Request) -> InquiryLog:
    return request.app.state.inquiries


async def get_current_session(
    request: Request,
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings_dep),
) -> Optional[SessionModel]:
    """
    Resolve the session cookie to a live session record, or None.
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        return None
    return sessions.get(session_id)


async def get_current_user(
    session: Optional[SessionModel] = Depends(get_current_session),
    store: CatalogStore = Depends(get_store),
) -> UserRecord:
    """
    Dependency for routes that need a logged-in user.

    Raises 401 when there is no live session or its user is gone.
    """
    user = store.get_user(session.user_id) if session else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


async def require_admin(session: Optional[SessionModel] = Depends(get_current_session)) -> SessionModel:
    """
    Gate in front of every mutating catalog route.

    Passes only when the session carries both a user id and the admin flag.
    """
    if session is None or not session.user_id or not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return session
