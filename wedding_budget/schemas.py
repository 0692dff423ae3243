"""Pydantic schemas for serialising wedding budget data.

Attributes are snake_case in Python and camelCase on the wire, so the front
end keeps sending ``paymentStatus`` / ``remainingAmount`` while either form
is accepted on input. Monetary values are decimals internally and JSON
numbers in responses. Records and status summaries also carry an ``_id``
key, which is what the front end reads.
"""
from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, computed_field, field_validator
from pydantic.alias_generators import to_camel

from . import ledger
from .enums import ExpenseCategory, PaymentStatus

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _round_float(value):
    # JSON floats such as 100.1 - 33.37 arrive with binary noise past the cents.
    if isinstance(value, float) and math.isfinite(value):
        try:
            return ledger.quantize(value)
        except InvalidOperation:
            return value
    return value


MoneyIn = Annotated[Money, BeforeValidator(_round_float)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _clean_vendor(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


class ExpenseBase(CamelModel):
    category: ExpenseCategory
    description: str = Field(..., max_length=255)
    amount: MoneyIn = Field(..., ge=0, max_digits=12, decimal_places=2)
    date: Optional[datetime] = None
    vendor: Optional[str] = Field(None, max_length=255)
    payment_status: PaymentStatus = PaymentStatus.PENDING

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return _clean_text(value)

    @field_validator("vendor")
    @classmethod
    def validate_vendor(cls, value: Optional[str]) -> Optional[str]:
        return _clean_vendor(value)


class ExpenseCreate(ExpenseBase):
    total_paid: Optional[MoneyIn] = Field(None, ge=0, max_digits=12, decimal_places=2)
    remaining_amount: Optional[MoneyIn] = Field(None, ge=0, max_digits=12, decimal_places=2)


class ExpenseUpdate(CamelModel):
    category: Optional[ExpenseCategory] = None
    description: Optional[str] = Field(None, max_length=255)
    amount: Optional[MoneyIn] = Field(None, ge=0, max_digits=12, decimal_places=2)
    date: Optional[datetime] = None
    vendor: Optional[str] = Field(None, max_length=255)
    payment_status: Optional[PaymentStatus] = None
    total_paid: Optional[MoneyIn] = Field(None, ge=0, max_digits=12, decimal_places=2)
    remaining_amount: Optional[MoneyIn] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("category", "amount", "date", "payment_status")
    @classmethod
    def reject_null(cls, value):
        # Only runs for values present in the body; omitted fields keep their default.
        if value is None:
            raise ValueError("must not be null")
        return value

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("must not be null")
        return _clean_text(value)

    @field_validator("vendor")
    @classmethod
    def validate_vendor(cls, value: Optional[str]) -> Optional[str]:
        return _clean_vendor(value)


class ExpenseRead(ExpenseBase, ORMModel):
    id: int
    date: datetime
    total_paid: Money
    remaining_amount: Money

    @computed_field(alias="_id")
    @property
    def record_id(self) -> int:
        return self.id


class PaymentCreate(CamelModel):
    amount: MoneyIn = Field(..., gt=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None


class PaymentRead(ORMModel):
    id: int
    expense_id: int
    amount: Money
    notes: Optional[str] = None
    date: datetime

    @computed_field(alias="_id")
    @property
    def record_id(self) -> int:
        return self.id


class TotalRead(BaseModel):
    total: Money


class StatusSummary(CamelModel):
    payment_status: PaymentStatus
    count: int
    total_amount: Money
    total_paid: Money
    remaining_amount: Money

    @computed_field(alias="_id")
    @property
    def group_key(self) -> PaymentStatus:
        return self.payment_status


class CategorySummary(CamelModel):
    category: ExpenseCategory
    count: int
    total_amount: Money
    total_paid: Money
    remaining_amount: Money


class MessageRead(BaseModel):
    message: str

