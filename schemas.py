"""Request/response models for the HTTP API.

Requests are validated here before anything reaches the ledger. JSON keys are
camelCase on the wire (``categoryId``, ``extraCash``); snake_case is accepted
on input too.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from database import TransactionType
from goals import goal_progress, goal_savings_plan


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _reject_nulls(model: BaseModel, fields):
    nulled = [f for f in fields if f in model.model_fields_set and getattr(model, f) is None]
    if nulled:
        raise ValueError(f"{', '.join(nulled)} cannot be null")
    return model


def _fits_float(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is not None and not math.isfinite(float(value)):
        raise ValueError("value is too large")
    return value


# --- Transactions ---

class TransactionCreate(CamelModel):
    amount: Decimal = Field(gt=0)
    type: TransactionType
    category_id: Optional[int] = None
    description: Optional[str] = None
    date: datetime = Field(default_factory=datetime.now)
    attachment: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def amounts_fit_float(cls, value):
        return _fits_float(value)


class TransactionUpdate(CamelModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    attachment: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def amounts_fit_float(cls, value):
        return _fits_float(value)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        return _reject_nulls(self, ("amount", "type", "date"))


class TransactionResponse(CamelModel):
    id: int
    user_id: int
    amount: Decimal
    type: TransactionType
    category_id: Optional[int] = None
    description: Optional[str] = None
    date: datetime
    attachment: Optional[str] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    type: TransactionType
    icon: str
    color: str


# --- Savings goals ---

class SavingsGoalCreate(CamelModel):
    name: str = Field(min_length=1)
    target: Decimal = Field(gt=0)
    current: Decimal = Field(default=Decimal("0"), ge=0)
    icon: str = "smartphone"
    color: str = "#3B82F6"
    deadline: Optional[datetime] = None

    @field_validator("target", "current")
    @classmethod
    def amounts_fit_float(cls, value):
        return _fits_float(value)


class SavingsGoalUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    target: Optional[Decimal] = Field(default=None, gt=0)
    current: Optional[Decimal] = Field(default=None, ge=0)
    icon: Optional[str] = None
    color: Optional[str] = None
    deadline: Optional[datetime] = None

    @field_validator("target", "current")
    @classmethod
    def amounts_fit_float(cls, value):
        return _fits_float(value)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        return _reject_nulls(self, ("name", "target", "current", "icon", "color"))


class SavingsGoalResponse(CamelModel):
    id: int
    user_id: int
    name: str
    target: Decimal
    current: Decimal
    icon: str
    color: str
    deadline: Optional[datetime] = None
    progress: int
    remaining: float
    months_remaining: Optional[int] = None
    required_monthly: Optional[float] = None

    @classmethod
    def from_goal(cls, goal, today: Optional[datetime] = None) -> "SavingsGoalResponse":
        progress = goal_progress(goal)
        plan = goal_savings_plan(goal, today) or {}
        return cls(
            id=goal.id,
            user_id=goal.user_id,
            name=goal.name,
            target=goal.target,
            current=goal.current,
            icon=goal.icon,
            color=goal.color,
            deadline=goal.deadline,
            progress=progress.percentage,
            remaining=progress.remaining,
            months_remaining=plan.get("months_remaining"),
            required_monthly=plan.get("required_monthly"),
        )


# --- Aggregates ---

class FinancialSummaryResponse(CamelModel):
    balance: float
    income: float
    expense: float
    savings: float
    extra_cash: float


class CategoryShareResponse(CamelModel):
    category_id: Optional[int] = None
    name: str
    amount: float
    percentage: int
    color: str


class MonthlySeriesResponse(CamelModel):
    months: List[str]
    income: List[float]
    expense: List[float]
    savings: List[float]
    extra: List[float]
    net_cash_flow: List[float]


class KeyMetricsResponse(CamelModel):
    income_to_expense: Optional[float] = None
    savings_rate: int
    discretionary_share: int


class InsightResponse(CamelModel):
    kind: str
    title: str
    message: str
