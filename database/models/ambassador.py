"""Ambassador model - referral program participant with running commission totals."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import String, Integer, Boolean, Numeric, Text, JSON, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from database.base import Base, BigIntPK

if TYPE_CHECKING:
    from database.models.ambassador_order import AmbassadorOrder

# Money columns: 10 integer digits, cents
Money = Numeric(12, 2)


class AmbassadorStatus(str, Enum):
    """Ambassador lifecycle status."""
    NONE = "none"
    PENDING = "pending"  # Application submitted, waiting for review
    APPROVED = "approved"  # Codes are live and redeemable
    REJECTED = "rejected"


class Ambassador(Base):
    """Ambassador record with codes, economics and ledger aggregates."""
    
    __tablename__ = "ambassadors"
    # Fetch server-generated timestamps on flush; lazy loads are not allowed under asyncio
    __mapper_args__ = {"eager_defaults": True}
    
    # Primary key
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    
    # Identity
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    
    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AmbassadorStatus.PENDING.value,
        server_default=AmbassadorStatus.PENDING.value,
        index=True,
        comment="none/pending/approved/rejected"
    )
    
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
        comment="Admin switch; inactive codes fail storefront validation"
    )
    
    # Codes
    referral_code: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Generated once at approval time"
    )
    referral_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    coupon_code: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Admin-settable, defaults to referral code"
    )
    
    # Economics
    discount_percent: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=10,
        server_default="10",
        comment="Customer discount percentage"
    )
    commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 4),
        nullable=False,
        default=Decimal("0.10"),
        server_default="0.10",
        comment="Fraction of order amount credited to the ambassador"
    )
    
    # Application
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    application: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    application_date: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    application_ref: Mapped[str | None] = mapped_column(String(50), nullable=True)
    review_date: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    
    # Ledger aggregates
    sales: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"), server_default="0")
    earnings: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"), server_default="0")
    orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    payments_pending: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0"), server_default="0"
    )
    payments_paid: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0"), server_default="0"
    )
    
    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
    
    # Relationships
    recent_orders: Mapped[list["AmbassadorOrder"]] = relationship(
        "AmbassadorOrder",
        back_populates="ambassador",
        cascade="all, delete-orphan",
        order_by="AmbassadorOrder.id",
        lazy="selectin",
    )
    
    def __repr__(self) -> str:
        return f"<Ambassador(id={self.id}, email='{self.email}', status='{self.status}')>"
