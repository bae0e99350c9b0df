"""Ambassador DTOs for request validation and API snapshots."""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

StatusValue = Literal["none", "pending", "approved", "rejected"]


def normalize_commission_rate(v: Optional[Decimal]) -> Optional[Decimal]:
    """Accept rates given as percentages (e.g. 15) as well as fractions (0.15)."""
    if v is None:
        return v
    if v > 1:
        v = v / 100
    if v < 0 or v > 1:
        raise ValueError("commission rate must be between 0 and 1")
    return v


class ApplicationDTO(BaseModel):
    """Ambassador application submitted from the storefront form."""
    
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    motivation: Optional[str] = Field(None, max_length=5000)
    
    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("invalid email address")
        return v
    
    @field_validator("full_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
    
    def form_data(self) -> dict:
        """Whole submitted form, including fields not modelled here."""
        return self.model_dump(mode="json", by_alias=True)


class CreateAmbassadorDTO(BaseModel):
    """DTO for an ambassador created directly by an administrator."""
    
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
    
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    status: StatusValue = "approved"
    user_id: Optional[str] = Field(None, max_length=255)
    coupon_code: Optional[str] = Field(None, max_length=50)
    discount_percent: Optional[int] = Field(None, ge=0, le=100)
    commission_rate: Optional[Decimal] = Field(None, ge=0)
    reason: Optional[str] = None
    
    @field_validator("commission_rate")
    @classmethod
    def validate_commission_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return normalize_commission_rate(v)


class UpdateStatusDTO(BaseModel):
    """DTO for an admin review decision."""
    
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
    
    status: StatusValue
    coupon_code: Optional[str] = Field(None, max_length=50)
    discount_percent: Optional[int] = Field(None, ge=0, le=100)
    reviewed_by: Optional[str] = Field(None, max_length=255)
    review_notes: Optional[str] = None


class UpdateAmbassadorDTO(BaseModel):
    """
    DTO for editing ambassador details.
    
    Identity (id, email), system-generated codes and ledger aggregates are
    not part of this DTO and are ignored when sent.
    """
    
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")
    
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    user_id: Optional[str] = Field(None, max_length=255)
    coupon_code: Optional[str] = Field(None, min_length=1, max_length=50)
    discount_percent: Optional[int] = Field(None, ge=0, le=100)
    is_active: Optional[StrictBool] = None
    commission_rate: Optional[Decimal] = Field(None, ge=0)
    reason: Optional[str] = None
    review_notes: Optional[str] = None
    
    @field_validator("commission_rate")
    @classmethod
    def validate_commission_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return normalize_commission_rate(v)


class OrderEntrySnapshot(BaseModel):
    """One entry of recentOrders as returned by the API."""
    
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
    
    order_id: str
    order_date: datetime
    amount: float
    commission: float
    is_paid: bool


class AmbassadorSnapshot(BaseModel):
    """Ambassador as returned by the API."""
    
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
    
    id: int
    email: str
    name: str
    user_id: Optional[str] = None
    status: str
    is_active: bool = True
    referral_code: Optional[str] = None
    referral_link: Optional[str] = None
    coupon_code: Optional[str] = None
    discount_percent: int
    commission_rate: float
    reason: Optional[str] = None
    application_date: Optional[datetime] = None
    application_ref: Optional[str] = None
    review_date: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    sales: float
    earnings: float
    orders: int
    payments_pending: float
    payments_paid: float
    recent_orders: list[OrderEntrySnapshot] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ActiveCode(BaseModel):
    """One redeemable code in the storefront code list."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    code: str
    type: Literal["coupon", "referral"]
    discount_percent: int
    ambassador_name: str
    ambassador_id: int
