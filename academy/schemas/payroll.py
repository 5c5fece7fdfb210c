from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field
from academy.models.payroll import (
    ContractType,
    PayrollAckStatus,
    PayrollItemKind,
    PayrollRunStatus,
)


# ==================== PROFILES ====================


class PayrollProfileUpsert(BaseModel):
    teacher_id: UUID
    hourly_rate: float = Field(..., ge=0)
    base_salary_amount: Optional[float] = Field(None, ge=0)
    contract_type: ContractType = ContractType.none
    insurance_enrolled: bool = False
    effective_from: date
    notes: Optional[str] = Field(None, max_length=2000)


class PayrollProfileArchive(BaseModel):
    effective_to: Optional[date] = None


class PayrollProfileResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    hourly_rate: float
    hourly_currency: Optional[str] = None
    base_salary_amount: Optional[float] = None
    base_salary_currency: Optional[str] = None
    contract_type: ContractType
    insurance_enrolled: bool = False
    effective_from: date
    effective_to: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== RUNS ====================


class AdjustmentInput(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0)
    is_deduction: bool = False


class IncentiveInput(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)


class PayrollRunRequest(BaseModel):
    teacher_id: UUID
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    adjustments: List[AdjustmentInput] = []
    incentives: List[IncentiveInput] = []
    message_append: Optional[str] = Field(None, max_length=2000)
    request_note: Optional[str] = Field(None, max_length=2000)


class AcknowledgeRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=2000)


class PayrollRunItemResponse(BaseModel):
    id: UUID
    item_kind: PayrollItemKind
    label: str
    amount: float
    item_metadata: Optional[Dict[str, Any]] = None
    order_index: int = 0

    class Config:
        from_attributes = True


class PayrollAcknowledgementResponse(BaseModel):
    id: UUID
    status: PayrollAckStatus
    requested_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    note: Optional[str] = None

    class Config:
        from_attributes = True


class PayrollRunResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    payroll_profile_id: Optional[UUID] = None
    period_start: date
    period_end: date
    contract_type: ContractType
    insurance_enrolled: bool = False
    hourly_total: float = 0
    weekly_holiday_allowance: float = 0
    base_salary_total: float = 0
    adjustment_total: float = 0
    gross_pay: float = 0
    deductions_total: float = 0
    net_pay: float = 0
    status: PayrollRunStatus
    message_preview: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    requested_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    paid_by: Optional[UUID] = None
    items: List[PayrollRunItemResponse] = []
    acknowledgement: Optional[PayrollAcknowledgementResponse] = None

    class Config:
        from_attributes = True
