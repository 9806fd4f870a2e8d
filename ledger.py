"""Ledger store: the repository every other module goes through for records.

Wraps a SQLAlchemy ``Session``. Ids come from the database's autoincrement
primary keys, each mutation is a single commit, and list methods return
plain lists so callers aggregate over a point-in-time copy.
"""

import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.orm import Session

from database import DEFAULT_USER_ID, Category, SavingsGoal, Transaction, TransactionType
from errors import EntityNotFoundError, ValidationError

logger = logging.getLogger(__name__)

TRANSACTION_FIELDS = {"amount", "type", "category_id", "description", "date", "attachment"}
GOAL_FIELDS = {"name", "target", "current", "icon", "color", "deadline"}


def to_decimal(value, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be numeric", {"field": field, "value": value})
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", {"field": field, "value": value})
    # reports work in floats
    if not math.isfinite(float(amount)):
        raise ValidationError(f"{field} is too large", {"field": field, "value": value})
    return amount


def to_transaction_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in TransactionType)
        raise ValidationError(f"type must be one of: {allowed}", {"field": "type", "value": value})


def _positive(value, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0", {"field": field, "value": value})
    return amount


def _non_negative(value, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative", {"field": field, "value": value})
    return amount


def _check_fields(changes: dict, allowed: set):
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(
            f"cannot update field(s): {', '.join(sorted(unknown))}",
            {"fields": sorted(unknown)},
        )


class LedgerStore:
    def __init__(self, db: Session):
        self.db = db

    # --- Categories ---

    def list_categories(self, tx_type=None) -> List[Category]:
        query = self.db.query(Category)
        if tx_type is not None:
            query = query.filter(Category.type == to_transaction_type(tx_type))
        return query.order_by(Category.id).all()

    def create_category(self, name: str, type, icon: str, color: str) -> Category:
        category = Category(name=name, type=to_transaction_type(type), icon=icon, color=color)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    # --- Transactions ---

    def list_transactions(self, tx_type=None) -> List[Transaction]:
        query = self.db.query(Transaction)
        if tx_type is not None:
            query = query.filter(Transaction.type == to_transaction_type(tx_type))
        return query.order_by(Transaction.id).all()

    def recent_transactions(self, limit: int = 5, tx_type=None) -> List[Transaction]:
        query = self.db.query(Transaction)
        if tx_type is not None:
            query = query.filter(Transaction.type == to_transaction_type(tx_type))
        return query.order_by(Transaction.date.desc(), Transaction.id.desc()).limit(limit).all()

    def get_transaction(self, transaction_id: int) -> Transaction:
        transaction = self.db.get(Transaction, transaction_id)
        if transaction is None:
            logger.warning("Transaction %s not found", transaction_id)
            raise EntityNotFoundError("Transaction", transaction_id)
        return transaction

    def create_transaction(
        self,
        amount,
        type,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        date: Optional[datetime] = None,
        attachment: Optional[str] = None,
    ) -> Transaction:
        transaction = Transaction(
            user_id=DEFAULT_USER_ID,
            amount=_positive(amount, "amount"),
            type=to_transaction_type(type),
            category_id=category_id,
            description=description,
            date=date or datetime.now(),
            attachment=attachment,
        )
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        logger.info("Created %s transaction %s", transaction.type.value, transaction.id)
        return transaction

    def update_transaction(self, transaction_id: int, **changes) -> Transaction:
        _check_fields(changes, TRANSACTION_FIELDS)
        transaction = self.get_transaction(transaction_id)
        if "amount" in changes:
            changes["amount"] = _positive(changes["amount"], "amount")
        if "type" in changes:
            changes["type"] = to_transaction_type(changes["type"])
        if changes.get("date", transaction.date) is None:
            raise ValidationError("date must not be empty", {"field": "date"})
        for field, value in changes.items():
            setattr(transaction, field, value)
        self.db.commit()
        self.db.refresh(transaction)
        logger.info("Updated transaction %s (%s)", transaction_id, ", ".join(sorted(changes)))
        return transaction

    def delete_transaction(self, transaction_id: int) -> None:
        transaction = self.get_transaction(transaction_id)
        self.db.delete(transaction)
        self.db.commit()
        logger.info("Deleted transaction %s", transaction_id)

    # --- Savings goals ---

    def list_goals(self) -> List[SavingsGoal]:
        return self.db.query(SavingsGoal).order_by(SavingsGoal.id).all()

    def get_goal(self, goal_id: int) -> SavingsGoal:
        goal = self.db.get(SavingsGoal, goal_id)
        if goal is None:
            logger.warning("Savings goal %s not found", goal_id)
            raise EntityNotFoundError("Savings goal", goal_id)
        return goal

    def create_goal(
        self,
        name: str,
        target,
        icon: str,
        color: str,
        current=0,
        deadline: Optional[datetime] = None,
    ) -> SavingsGoal:
        if not name:
            raise ValidationError("name must not be empty", {"field": "name"})
        goal = SavingsGoal(
            user_id=DEFAULT_USER_ID,
            name=name,
            target=_positive(target, "target"),
            current=_non_negative(current, "current"),
            icon=icon,
            color=color,
            deadline=deadline,
        )
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)
        logger.info("Created savings goal %s (%s)", goal.id, goal.name)
        return goal

    def update_goal(self, goal_id: int, **changes) -> SavingsGoal:
        _check_fields(changes, GOAL_FIELDS)
        goal = self.get_goal(goal_id)
        if "target" in changes:
            changes["target"] = _positive(changes["target"], "target")
        if "current" in changes:
            changes["current"] = _non_negative(changes["current"], "current")
        for field, value in changes.items():
            setattr(goal, field, value)
        self.db.commit()
        self.db.refresh(goal)
        logger.info("Updated savings goal %s (%s)", goal_id, ", ".join(sorted(changes)))
        return goal

    def delete_goal(self, goal_id: int) -> None:
        goal = self.get_goal(goal_id)
        self.db.delete(goal)
        self.db.commit()
        logger.info("Deleted savings goal %s", goal_id)
