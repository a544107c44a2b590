"""Catalog store: users and products behind a small CRUD interface."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from storefront.auth import hash_password, utcnow
from storefront.database import build_engine, build_session_factory, init_db
from storefront.models import Product, User
from storefront.schemas import ProductCreate, ProductRecord, ProductUpdate, UserRecord

logger = logging.getLogger(__name__)


SAMPLE_PRODUCTS = [
    {
        "name": "Premium School Uniform Fabric",
        "description": "High-quality, durable fabric perfect for school uniforms. Available in navy blue and white with excellent color retention and wrinkle resistance.",
        "price": 450,
        "category": "School Uniforms",
        "image": "/generated_images/School_uniform_fabric_samples_bdf2889f.png",
    },
    {
        "name": "Security Guard Uniform Material",
        "description": "Professional-grade fabric for security personnel. Tough, reliable, and maintains professional appearance even after extensive use.",
        "price": 520,
        "category": "Security Uniforms",
        "image": "/generated_images/Security_uniform_fabric_collection_a6e53df7.png",
    },
    {
        "name": "Corporate Staff Uniform Fabric",
        "description": "Elegant fabric for corporate and staff uniforms. Perfect blend of comfort and professionalism for office environments.",
        "price": 480,
        "category": "Staff Uniforms",
        "image": "/generated_images/Staff_uniform_fabric_samples_1370191d.png",
    },
    {
        "name": "Executive School Blazer Material",
        "description": "Premium blazer fabric for school formal wear. Sophisticated finish with excellent drape and durability.",
        "price": 650,
        "category": "School Uniforms",
        "image": "/generated_images/School_uniform_fabric_samples_bdf2889f.png",
    },
    {
        "name": "Hospital Staff Uniform Fabric",
        "description": "Medical-grade uniform fabric. Easy to clean, comfortable, and maintains color after multiple washes.",
        "price": 380,
        "category": "Staff Uniforms",
        "image": "/generated_images/Staff_uniform_fabric_samples_1370191d.png",
    },
    {
        "name": "Security Officer Formal Fabric",
        "description": "High-end fabric for senior security officers. Professional appearance with superior durability and comfort.",
        "price": 580,
        "category": "Security Uniforms",
        "image": "/generated_images/Security_uniform_fabric_collection_a6e53df7.png",
    },
]


class DuplicateUsernameError(Exception):
    """Raised when creating a user whose username is already taken."""


class CatalogStore:
    """
    Owns every User and Product record.

    Each instance gets its own engine, so with the default in-memory URL two
    stores never share data. Every method returns detached pydantic copies:
    callers may mutate what they get back without touching stored rows.
    """

    def __init__(
        self,
        database_url: str = "sqlite://",
        *,
        engine: Optional[Engine] = None,
        clock: Callable[[], datetime] = utcnow,
        seed: bool = True,
        admin_username: str = "admin",
        admin_password: str = "password",
    ):
        self.engine = engine if engine is not None else build_engine(database_url)
        self.session_factory: sessionmaker = build_session_factory(self.engine)
        self._clock = clock
        init_db(self.engine)
        if seed:
            self._seed(admin_username, admin_password)

    def _seed(self, admin_username: str, admin_password: str) -> None:
        if self.get_user_by_username(admin_username) is None:
            self.create_user(admin_username, admin_password, is_admin=True)
        with self.session_factory() as db:
            has_products = db.scalar(select(Product.position).limit(1)) is not None
        if not has_products:
            for fields in SAMPLE_PRODUCTS:
                self.create_product(ProductCreate(**fields))
            logger.info("Catalog seeded with %d sample products", len(SAMPLE_PRODUCTS))

    # Users

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.session_factory() as db:
            user = db.scalar(select(User).where(User.id == user_id))
            return UserRecord.model_validate(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self.session_factory() as db:
            user = db.scalar(select(User).where(User.username == username))
            return UserRecord.model_validate(user) if user else None

    def create_user(self, username: str, password: str, is_admin: bool = False) -> UserRecord:
        """
        Create a user, hashing the plaintext password before it is stored.

        Raises DuplicateUsernameError if the username is taken.
        """
        now = self._clock()
        user = User(
            username=username,
            password_hash=hash_password(password),
            is_admin=is_admin,
            created_at=now,
            updated_at=now,
        )
        with self.session_factory() as db:
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateUsernameError(username)
            return UserRecord.model_validate(user)

    # Products

    def get_all_products(self) -> List[ProductRecord]:
        with self.session_factory() as db:
            rows = db.scalars(select(Product).order_by(Product.position)).all()
            return [ProductRecord.model_validate(row) for row in rows]

    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        with self.session_factory() as db:
            product = db.scalar(select(Product).where(Product.id == product_id))
            return ProductRecord.model_validate(product) if product else None

    def create_product(self, fields: ProductCreate) -> ProductRecord:
        now = self._clock()
        product = Product(**fields.model_dump(), created_at=now, updated_at=now)
        with self.session_factory() as db:
            db.add(product)
            db.commit()
            return ProductRecord.model_validate(product)

    def update_product(self, product_id: str, fields: ProductUpdate) -> Optional[ProductRecord]:
        """
        Merge the fields the client actually sent over the stored product.

        Returns None for an unknown id; callers must check.
        """
        with self.session_factory() as db:
            product = db.scalar(select(Product).where(Product.id == product_id))
            if product is None:
                return None
            for name, value in fields.model_dump(exclude_unset=True).items():
                setattr(product, name, value)
            product.updated_at = self._clock()
            db.commit()
            return ProductRecord.model_validate(product)

    def delete_product(self, product_id: str) -> bool:
        with self.session_factory() as db:
            product = db.scalar(select(Product).where(Product.id == product_id))
            if product is None:
                return False
            db.delete(product)
            db.commit()
            return True
