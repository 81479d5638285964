"""Pydantic schemas for payments."""

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.constants import (
    BENEFICIARY_ACCOUNT_PATTERN,
    REFERENCE_PATTERN,
    SUPPORTED_CURRENCIES,
    SWIFT_CODE_PATTERN,
)
from app.models.payment import PaymentStatus


class PaymentCreate(BaseModel):
    """Schema for submitting a payment.

    Field names are snake_case; the camel/Pascal-case names sent by the
    original web client are accepted as input aliases.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=15,
        decimal_places=2,
        validation_alias=AliasChoices("amount", "Amount"),
    )
    currency: str = Field(
        default="ZAR",
        min_length=3,
        max_length=3,
        validation_alias=AliasChoices("currency", "Currency"),
    )
    swift_code: str = Field(
        ...,
        pattern=SWIFT_CODE_PATTERN,
        validation_alias=AliasChoices("swift_code", "swiftCode", "SWIFTCode"),
    )
    account_number: str = Field(
        ...,
        pattern=BENEFICIARY_ACCOUNT_PATTERN,
        validation_alias=AliasChoices(
            "account_number", "accountNumber", "AccountNumber", "beneficiary_account_number"
        ),
    )
    reference: str | None = Field(
        None,
        pattern=REFERENCE_PATTERN,
        validation_alias=AliasChoices("reference", "Reference"),
    )

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Only recognised ISO 4217 codes are accepted."""
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"'{v}' is not a supported currency code")
        return v

    @field_validator("reference", mode="before")
    @classmethod
    def blank_reference_is_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PaymentCreatedResponse(BaseModel):
    """Returned from ``POST /payments``."""

    id: str
    status: PaymentStatus


class PaymentResponse(BaseModel):
    """Canonical payment representation."""

    id: str
    owner_user_id: str
    amount: Decimal
    currency: str
    swift_code: str
    beneficiary_account_number: str
    reference: str | None = None
    status: PaymentStatus
    verified_by: str | None = None
    verified_at: datetime | None = None
    processed_by: str | None = None
    processed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
