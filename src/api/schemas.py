"""Pydantic schemas for the dues API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.models.fee import FeeFrequency, ObligationStatus
from src.models.payment import PaymentMethod, VerificationStatus


# Fees
class GenerateAnnualFeesPayload(BaseModel):
    """Request payload for POST /api/fees/annual/generate."""

    year: int = Field(..., ge=1900, le=9999, description="Year to generate fees for")
    amount: Decimal = Field(..., description="Annual fee amount")
    description: str = Field("Annual HOA Fee", description="Fee description; name gets the year appended")


class AmountPayload(BaseModel):
    amount: Decimal


class FeeCreatePayload(BaseModel):
    """Request payload for POST /api/fees."""

    name: str
    amount: Decimal
    frequency: FeeFrequency
    due_date: date
    description: str = ""
    user_id: int | None = None
    address: str | None = None
    year: int | None = None
    reason: str | None = None
    status: ObligationStatus = ObligationStatus.PENDING


class FeeUpdatePayload(BaseModel):
    """Request payload for PATCH /api/fees/{fee_id}; only sent fields change."""

    name: str | None = None
    amount: Decimal | None = None
    frequency: FeeFrequency | None = None
    due_date: date | None = None
    description: str | None = None
    is_late: bool | None = None
    user_id: int | None = None
    address: str | None = None
    year: int | None = None
    reason: str | None = None
    status: ObligationStatus | None = None


class PastDuePayload(BaseModel):
    user_id: int
    amount: Decimal
    description: str
    due_date: date


class FeeResponse(BaseModel):
    """Response schema for a fee."""

    id: int
    name: str
    amount: Decimal
    frequency: FeeFrequency
    due_date: date
    description: str
    is_late: bool
    user_id: int | None = None
    address: str | None = None
    household_id: int | None = None
    year: int | None = None
    reason: str | None = None
    type: str | None = None
    status: ObligationStatus | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeePageResponse(BaseModel):
    items: list[FeeResponse]
    total: int


# Fines
class FineCreatePayload(BaseModel):
    """Request payload for POST /api/fines."""

    address: str
    member_id: int
    amount: Decimal
    reason: str
    description: str | None = None


class FineStatusPayload(BaseModel):
    status: ObligationStatus


class FineResponse(BaseModel):
    """Response schema for a fine."""

    id: int
    violation: str
    amount: Decimal
    date_issued: date
    status: ObligationStatus
    description: str
    resident_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


# Payments
class SelfReportedPaymentPayload(BaseModel):
    """Request payload for POST /api/payments/self-reported."""

    member_id: int
    fee_type: str
    amount: Decimal
    venmo_username: str
    venmo_transaction_id: str
    receipt_ref: str | None = None
    fee_id: int | None = None
    fine_id: int | None = None


class AdminPaymentPayload(BaseModel):
    """Request payload for POST /api/payments/admin."""

    member_id: int
    fee_type: str
    amount: Decimal
    method: PaymentMethod
    payment_date: date
    check_number: str | None = None
    notes: str | None = None
    fee_id: int | None = None
    fine_id: int | None = None


class VerifyPaymentPayload(BaseModel):
    """Request payload for POST /api/payments/{payment_id}/verify."""

    status: ObligationStatus = ObligationStatus.PENDING
    verification_status: VerificationStatus
    admin_notes: str | None = None


class PaymentResponse(BaseModel):
    """Response schema for a payment."""

    id: int
    user_id: int
    fee_type: str
    amount: Decimal
    payment_date: date
    status: ObligationStatus
    payment_method: PaymentMethod
    transaction_id: str
    channel_username: str | None = None
    channel_transaction_id: str | None = None
    check_number: str | None = None
    notes: str | None = None
    receipt_ref: str | None = None
    verification_status: VerificationStatus | None = None
    admin_notes: str | None = None
    fee_id: int | None = None
    fine_id: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PendingPaymentResponse(PaymentResponse):
    receipt_url: str | None = None


# Status
class MemberStandingResponse(BaseModel):
    member_id: int
    year: int
    is_current: bool


class HouseholdStatusRow(BaseModel):
    """One homeowner row of the household payment status report."""

    id: int
    first_name: str
    last_name: str
    email: str
    address: str
    unit_number: str | None = None
    household_key: str
    user_type: str
    has_paid_annual_fee: bool
    payment_status: str
    annual_fee_amount: Decimal
