"""Pydantic schemas for API."""
from decimal import Decimal
from pydantic import BaseModel, BeforeValidator, Field, ConfigDict
from typing import Annotated, Optional
from datetime import date, datetime
from uuid import UUID

from .services.references import reference_id

# Accepts a bare id or an expanded record ({"id": ...} / {"_id": ...}).
ReferenceId = Annotated[UUID, BeforeValidator(reference_id)]


# User schemas
class UserBase(BaseModel):
    name: str
    email: str
    tel: Optional[str] = None
    role: str = Field(pattern="^(admin|staff)$")


class UserCreate(UserBase):
    password: str


class UserResponse(UserBase):
    id: UUID
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    """Brief user info for nested responses."""
    id: UUID
    name: str
    email: Optional[str] = None
    role: str
    model_config = ConfigDict(from_attributes=True)


# Auth schemas
class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# Product schemas
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    unit: str = "pcs"
    picture: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    sku: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    picture: Optional[str] = None
    is_active: Optional[bool] = None


class ProductBrief(BaseModel):
    id: UUID
    name: str
    sku: str
    category: Optional[str] = None
    stock_quantity: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    id: UUID
    name: str
    sku: str
    description: Optional[str] = None
    category: str
    price: Decimal
    stock_quantity: int
    unit: str
    picture: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ProductDeleteResponse(BaseModel):
    id: UUID
    deleted: bool
    deactivated: bool


# Stock request schemas
class StockRequestCreate(BaseModel):
    product_id: ReferenceId
    transaction_type: str = Field(pattern="^(stockIn|stockOut)$")
    # Positivity is enforced by the use-case so it surfaces as a domain error.
    item_amount: int
    transaction_date: date


class StockRequestUpdate(BaseModel):
    product_id: Optional[ReferenceId] = None
    transaction_type: Optional[str] = Field(default=None, pattern="^(stockIn|stockOut)$")
    item_amount: Optional[int] = None
    transaction_date: Optional[date] = None


class StockRequestReject(BaseModel):
    rejection_reason: Optional[str] = None


class ActivityEntryResponse(BaseModel):
    action: str
    performed_by_id: UUID
    performed_by: Optional[UserBrief] = None
    performed_at: datetime
    details: Optional[str] = None


class StockRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    user: Optional[UserBrief] = None
    product_id: UUID
    product: Optional[ProductBrief] = None
    transaction_type: str
    item_amount: int
    transaction_date: date
    status: str
    approved_by_id: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    last_modified_by_id: Optional[UUID] = None
    last_modified_by: Optional[UserBrief] = None
    activity_log: list[ActivityEntryResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RequestActionNotice(BaseModel):
    """Summary returned when an admin acts on another user's request."""
    action: str
    performed_by: str
    performed_by_role: str
    request_owner: str
    timestamp: datetime


class StockRequestMutationResponse(BaseModel):
    data: StockRequestResponse
    notification: Optional[RequestActionNotice] = None


class StockRequestDeleteResponse(BaseModel):
    message: str
    notification: Optional[RequestActionNotice] = None


# Notification schemas
class NotificationResponse(BaseModel):
    id: UUID
    recipient_id: UUID
    sender_id: UUID
    sender: Optional[UserBrief] = None
    type: str
    title: str
    message: str
    related_request_id: Optional[UUID] = None
    related_product_id: Optional[UUID] = None
    related_product: Optional[ProductBrief] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    count: int
    poll_interval_seconds: int
