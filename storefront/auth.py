from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool
from storefront.models import Session as SessionModel

logger = logging.getLogger(__name__)

# Argon2id with library defaults; salt is generated per hash
ph = PasswordHasher()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hash_password(password: str) -> str:
    """
    Hash password using Argon2id.

    Returns hash string that includes algorithm parameters and salt.
    Format: $argon2id$v=19$m=65536,t=3,p=4$salt$hash
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against stored hash.

    Uses constant-time comparison internally.
    Returns False for any verification error so callers cannot tell
    a malformed hash from a wrong password.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_session_id() -> str:
    """
    Generate cryptographically secure session identifier.

    Uses 32 bytes (256 bits) of randomness, hex encoded to 64 characters.
    """
    return secrets.token_hex(32)


class SessionRegistry:
    """
    Server-side sessions keyed by the opaque id stored in the cookie.

    Records live in the same database as the catalog; with the default
    in-memory database they are private to this process. Expiry is
    absolute: a session dies session_lifetime after login no matter how
    active it is.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        lifetime: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self.lifetime = lifetime
        self._clock = clock

    def create(self, user_id: str, is_admin: bool) -> SessionModel:
        """
        Create new session for user.

        Returns the stored record; its session_id goes into the cookie.
        """
        now = self._clock()
        record = SessionModel(
            session_id=generate_session_id(),
            user_id=user_id,
            is_admin=is_admin,
            created_at=now,
            expires_at=now + self.lifetime,
        )
        with self._session_factory() as db:
            db.add(record)
            db.commit()
        return record

    def get(self, session_id: str) -> Optional[SessionModel]:
        """
        Return the live session for this id.

        An expired record is deleted on the spot and reported as absent.
        """
        with self._session_factory() as db:
            record = db.scalar(select(SessionModel).where(SessionModel.session_id == session_id))
            if record is None:
                return None
            if record.expires_at <= self._clock():
                db.delete(record)
                db.commit()
                return None
            return record

    def destroy(self, session_id: str) -> bool:
        """
        Delete session (logout).

        Returns True if session was deleted, False if not found.
        """
        with self._session_factory() as db:
            result = db.execute(delete(SessionModel).where(SessionModel.session_id == session_id))
            db.commit()
        return result.rowcount > 0

    def prune_expired(self) -> int:
        """
        Remove expired sessions.

        Called periodically from the application lifespan task.
        Returns number of sessions cleaned up.
        """
        with self._session_factory() as db:
            result = db.execute(delete(SessionModel).where(SessionModel.expires_at <= self._clock()))
            db.commit()
        if result.rowcount:
            logger.info("Pruned %d expired sessions", result.rowcount)
        return result.rowcount


_DUMMY_HASH = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = ph.hash(secrets.token_hex(16))
    return _DUMMY_HASH


async def authenticate(store, username: str, password: str):
    """
    Look up a user and check the password.

    Returns the user record or None. Unknown username and wrong password
    give the same None, and both pay for one hash verification so response
    timing does not reveal which usernames exist.

    Verification is CPU-bound; it runs in the threadpool so the event loop
    keeps serving other requests.
    """
    user = store.get_user_by_username(username)
    password_hash = user.password_hash if user is not None else _dummy_hash()
    valid = await run_in_threadpool(verify_password, password, password_hash)
    if user is None or not valid:
        return None
    return user
