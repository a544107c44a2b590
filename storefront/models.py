from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from storefront.database import Base
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Catalog user. Only admins may mutate the catalog.

    Design notes:
    - username is unique, case-sensitive and never changes after creation
    - password_hash never leaves the store layer
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class Product(Base):
    """
    A fabric offered in the catalog.

    image is either a relative path to an uploaded file or an absolute URL;
    NULL means the client shows a placeholder.
    """
    __tablename__ = "products"

    # Autoincrement position keeps listing in insertion order
    position = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True, default=_new_id)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    category = Column(Text, nullable=False)
    image = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name})>"


class Session(Base):
    """
    Server-side session storage.

    Session lifecycle:
    1. Created on login with a fresh random session_id (old one discarded)
    2. Validated on each request against expires_at
    3. Deleted on logout, on expiry lookup, or by the periodic prune
    """
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        Index('ix_session_lookup', 'session_id', 'expires_at'),
    )

    def __repr__(self):
        return f"<Session(id={self.id}, user_id={self.user_id})>"
