"""Order entries attributed to an ambassador (the recent orders list)."""
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, Boolean, ForeignKey, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from database.base import Base, BigIntPK
from database.models.ambassador import Money

if TYPE_CHECKING:
    from database.models.ambassador import Ambassador


class AmbassadorOrder(Base):
    """One redeemed order and the commission it accrued."""
    
    __tablename__ = "ambassador_orders"
    __table_args__ = (
        UniqueConstraint("ambassador_id", "order_id", name="uq_ambassador_orders_ambassador_order"),
    )
    __mapper_args__ = {"eager_defaults": True}
    
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    
    ambassador_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("ambassadors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="Storefront order ID")
    order_date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    commission: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
        index=True,
    )
    
    ambassador: Mapped["Ambassador"] = relationship("Ambassador", back_populates="recent_orders")
    
    def __repr__(self) -> str:
        return (
            f"<AmbassadorOrder(ambassador={self.ambassador_id}, order='{self.order_id}', "
            f"commission={self.commission}, paid={self.is_paid})>"
        )
