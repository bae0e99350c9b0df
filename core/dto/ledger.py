"""Ledger DTOs: redemption and payment status requests, commission records."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

# Largest amount a Numeric(12, 2) column holds
MAX_ORDER_AMOUNT = Decimal("9999999999.99")


class PaymentStatus(str, Enum):
    """Bulk payment status requested by an administrator."""
    PAID = "paid"
    WAITING = "waiting"
    PENDING = "pending"


class RedeemCodeDTO(BaseModel):
    """DTO for attributing an order to the ambassador owning a code."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    code: str = Field(..., min_length=1, max_length=50, description="Coupon or referral code")
    order_id: str = Field(..., alias="orderId", min_length=1, max_length=255, description="Storefront order ID")
    order_amount: Decimal = Field(
        ..., alias="orderAmount", gt=0, le=MAX_ORDER_AMOUNT, description="Order amount"
    )
    
    @field_validator("code", "order_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ValidateCodeDTO(BaseModel):
    """DTO for a storefront code check."""
    
    code: str = Field(..., min_length=1, max_length=50)


class OrderPaymentDTO(BaseModel):
    """DTO for flipping one order's paid flag."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    is_paid: StrictBool = Field(..., alias="isPaid")


class BulkPaymentDTO(BaseModel):
    """DTO for a bulk payment status change."""
    
    status: PaymentStatus


@dataclass(frozen=True)
class CommissionRecord:
    """Result of one successful redemption."""
    
    ambassador_id: int
    order_id: str
    order_date: datetime
    order_amount: Decimal
    commission: Decimal
    commission_rate: Decimal
    is_paid: bool = False
    
    def to_dict(self) -> dict:
        return {
            "ambassadorId": self.ambassador_id,
            "orderId": self.order_id,
            "orderDate": self.order_date.isoformat(),
            "orderAmount": float(self.order_amount),
            "commission": float(self.commission),
            "commissionRate": float(self.commission_rate),
            "isPaid": self.is_paid,
        }


@dataclass(frozen=True)
class LedgerBalance:
    """Aggregate totals compared against the per-order entries."""
    
    ambassador_id: int
    payments_pending: Decimal
    payments_paid: Decimal
    order_commission_total: Decimal
    
    @property
    def is_balanced(self) -> bool:
        return self.payments_pending + self.payments_paid == self.order_commission_total
    
    def to_dict(self) -> dict:
        return {
            "ambassadorId": self.ambassador_id,
            "paymentsPending": float(self.payments_pending),
            "paymentsPaid": float(self.payments_paid),
            "orderCommissionTotal": float(self.order_commission_total),
            "balanced": self.is_balanced,
        }
