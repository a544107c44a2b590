from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class CamelModel(BaseModel):
    """
    Base for every payload exchanged with the browser client.

    The client speaks camelCase (isAdmin, createdAt, productCategory);
    Python code uses snake_case. Both spellings are accepted on input,
    responses are always serialized by alias.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    """
    Login payload validation.

    Empty strings count as missing so the client gets a 400 rather than a
    401 for a half-filled form.
    """
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserRecord(BaseModel):
    """
    Detached copy of a stored user. Internal only: carries the hash.
    """
    id: str
    username: str
    password_hash: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserResponse(CamelModel):
    """
    Safe user representation for API responses.

    Critical: Never include password_hash in any response.
    """
    id: str
    username: str
    is_admin: bool

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class LoginResponse(CamelModel):
    success: bool = True
    user: UserResponse


class MeResponse(CamelModel):
    user: UserResponse


class SuccessResponse(CamelModel):
    success: bool = True


# Largest value a signed 64-bit INTEGER column holds
MAX_PRICE = 2**63 - 1


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        return None
    return value


class ProductCreate(CamelModel):
    """
    Product fields minus the server-assigned ones.

    category is any non-empty string; it is not checked against the labels
    the client UI offers.
    """
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: int = Field(ge=0, le=MAX_PRICE)
    category: str = Field(min_length=1)
    image: Optional[str] = None

    @field_validator("image")
    @classmethod
    def normalize_image(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ProductUpdate(CamelModel):
    """
    Partial product update. Only fields present in the request body are
    merged; use model_dump(exclude_unset=True) to get them.
    """
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, ge=0, le=MAX_PRICE)
    category: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = None

    @field_validator("name", "description", "price", "category")
    @classmethod
    def reject_null(cls, v):
        # Validators only run for fields that were sent, so this rejects
        # an explicit null without making the field required.
        if v is None:
            raise ValueError("Field may not be null")
        return v

    @field_validator("image")
    @classmethod
    def normalize_image(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ProductRecord(CamelModel):
    """
    Detached snapshot of a stored product, also the wire format.
    """
    id: str
    name: str
    description: str
    price: int
    category: str
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UploadResponse(CamelModel):
    image_url: str
    filename: str


class ContactRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    company: Optional[str] = None
    inquiry_type: Optional[str] = None
    message: str = Field(min_length=1)


class ContactResponse(CamelModel):
    success: bool = True
    message: str
    inquiry_id: str


class InquiryRecord(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    inquiry_type: str
    message: str
    status: str
    created_at: datetime


class QuoteRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    company: Optional[str] = None
    product_category: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    delivery_date: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None


class QuoteResponse(CamelModel):
    success: bool = True
    message: str
    quote_id: str


class QuoteRecord(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    product_category: str
    quantity: int
    delivery_date: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None
    status: str
    created_at: datetime
