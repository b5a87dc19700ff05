"""
Data models mirroring the LicenseChain REST API JSON.

Models are frozen pydantic models; wire keys are snake_case. Free-form
``metadata`` is typed with ``pydantic.JsonValue`` so it can only hold
null, bool, number, string, array or object values.
"""

from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, JsonValue

T = TypeVar("T")

Metadata = Dict[str, JsonValue]


class APIModel(BaseModel):
    """Base for all LicenseChain models."""

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> Dict[str, JsonValue]:
        """Dump to the wire representation, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DataEnvelope(APIModel, Generic[T]):
    """Response wrapper of the form ``{"data": ...}``."""

    data: Optional[T] = None


# License models

class License(APIModel):
    id: str
    user_id: str
    product_id: str
    license_key: str
    status: str
    created_at: str
    updated_at: str
    expires_at: Optional[str] = None
    metadata: Optional[Metadata] = None


class CreateLicenseRequest(APIModel):
    user_id: str
    product_id: str
    metadata: Optional[Metadata] = None


class VerifyLicenseResponse(APIModel):
    valid: bool = False


class LicenseListResponse(APIModel):
    data: List[License]
    total: int
    page: int
    limit: int


class LicenseStats(APIModel):
    total: int = 0
    active: int = 0
    expired: int = 0
    revoked: int = 0
    revenue: float = 0.0


# User models

class User(APIModel):
    id: str
    email: str
    name: str
    created_at: str
    updated_at: str
    metadata: Optional[Metadata] = None


class CreateUserRequest(APIModel):
    email: str
    name: str
    metadata: Optional[Metadata] = None


class UserListResponse(APIModel):
    data: List[User]
    total: int
    page: int
    limit: int


class UserStats(APIModel):
    total: int = 0
    active: int = 0
    inactive: int = 0


# Product models

class Product(APIModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    created_at: str
    updated_at: str
    metadata: Optional[Metadata] = None


class CreateProductRequest(APIModel):
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    metadata: Optional[Metadata] = None


class ProductListResponse(APIModel):
    data: List[Product]
    total: int
    page: int
    limit: int


class ProductStats(APIModel):
    total: int = 0
    active: int = 0
    revenue: float = 0.0


# Webhook models

class Webhook(APIModel):
    id: str
    url: str
    events: List[str]
    secret: Optional[str] = None
    created_at: str
    updated_at: str


class CreateWebhookRequest(APIModel):
    url: str
    events: List[str]
    secret: Optional[str] = None
