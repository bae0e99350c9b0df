"""
Data Transfer Objects (DTOs) for data validation.

This package contains Pydantic models for validating input data and the
shapes returned by the ledger services.
"""

from core.dto.ambassadors import (
    ApplicationDTO,
    CreateAmbassadorDTO,
    UpdateStatusDTO,
    UpdateAmbassadorDTO,
    AmbassadorSnapshot,
    OrderEntrySnapshot,
    ActiveCode,
)
from core.dto.ledger import (
    PaymentStatus,
    RedeemCodeDTO,
    ValidateCodeDTO,
    OrderPaymentDTO,
    BulkPaymentDTO,
    CommissionRecord,
    LedgerBalance,
    MAX_ORDER_AMOUNT,
)

__all__ = [
    'ApplicationDTO',
    'CreateAmbassadorDTO',
    'UpdateStatusDTO',
    'UpdateAmbassadorDTO',
    'AmbassadorSnapshot',
    'OrderEntrySnapshot',
    'ActiveCode',
    'PaymentStatus',
    'RedeemCodeDTO',
    'ValidateCodeDTO',
    'OrderPaymentDTO',
    'BulkPaymentDTO',
    'CommissionRecord',
    'LedgerBalance',
    'MAX_ORDER_AMOUNT',
]
