"""SQLAlchemy models for users, products, stock requests and notifications."""
from sqlalchemy import (
    Boolean, Column, String, Integer, Date, DateTime, Text, Numeric,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from .database import Base


USER_ROLES = ("admin", "staff")
TRANSACTION_TYPES = ("stockIn", "stockOut")
REQUEST_STATUSES = ("pending", "approved", "rejected", "cancelled")
ACTIVITY_ACTIONS = ("created", "updated", "approved", "rejected", "cancelled")
NOTIFICATION_TYPES = ("request_created", "request_updated", "request_deleted")


class User(Base):
    """User model."""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    tel = Column(String(50), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(role.in_(USER_ROLES), name='chk_user_role'),
    )

    # Relationships
    requests = relationship("StockRequest", foreign_keys="StockRequest.user_id", back_populates="user")


class Product(Base):
    """Inventory record for one product."""
    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(30), nullable=False, default="pcs")
    picture = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(price >= 0, name='chk_product_price_non_negative'),
        CheckConstraint(stock_quantity >= 0, name='chk_product_stock_non_negative'),
    )

    # Relationships
    requests = relationship("StockRequest", back_populates="product")


class StockRequest(Base):
    """A proposal to move stock in or out for one product."""
    __tablename__ = "stock_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"), nullable=False, index=True)
    transaction_type = Column(String(20), nullable=False)
    item_amount = Column(Integer, nullable=False)
    transaction_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    approved_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    last_modified_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(item_amount > 0, name='chk_request_item_amount_positive'),
        CheckConstraint(transaction_type.in_(TRANSACTION_TYPES), name='chk_request_transaction_type'),
        CheckConstraint(status.in_(REQUEST_STATUSES), name='chk_request_status'),
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="requests")
    product = relationship("Product", back_populates="requests")
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    last_modified_by = relationship("User", foreign_keys=[last_modified_by_id])
    activity_log = relationship(
        "RequestActivity",
        back_populates="request",
        order_by=lambda: [RequestActivity.performed_at, RequestActivity.id],
        cascade="all, delete-orphan",
    )


class RequestActivity(Base):
    """Append-only activity entry, ordered by performed_at; rows are never updated."""
    __tablename__ = "request_activity"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(
        UUID(as_uuid=True),
        ForeignKey("stock_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action = Column(String(20), nullable=False)
    performed_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    performed_at = Column(DateTime(timezone=True), nullable=False)
    details = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_request_activity_request_performed', 'request_id', 'performed_at'),
        CheckConstraint(action.in_(ACTIVITY_ACTIONS), name='chk_request_activity_action'),
    )

    # Relationships
    request = relationship("StockRequest", back_populates="activity_log")
    performed_by = relationship("User")


class Notification(Base):
    """In-app notification, one row per recipient."""
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    # Not a foreign key: deletion notices outlive the request they describe.
    related_request_id = Column(UUID(as_uuid=True), nullable=True)
    related_product_id = Column(UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(type.in_(NOTIFICATION_TYPES), name='chk_notification_type'),
        Index('idx_notifications_recipient_unread', 'recipient_id', 'is_read', 'created_at'),
    )

    # Relationships
    recipient = relationship("User", foreign_keys=[recipient_id])
    sender = relationship("User", foreign_keys=[sender_id])
    related_product = relationship("Product")
