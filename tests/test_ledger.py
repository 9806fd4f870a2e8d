from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from categories import DEFAULT_CATEGORIES, CategoryDirectory, seed_categories
from database import TransactionType
from errors import EntityNotFoundError, ValidationError
from seed_db import SAMPLE_TRANSACTIONS, seed


# --- Categories ---

def test_seed_categories_once(store):
    assert seed_categories(store) == 16
    assert seed_categories(store) == 0
    assert len(store.list_categories()) == len(DEFAULT_CATEGORIES)


def test_seeded_category_ids_are_stable(store):
    seed_categories(store)
    directory = CategoryDirectory(store.list_categories())

    assert directory.name_for(1) == "Salary"
    assert directory.name_for(6) == "Shopping"
    assert directory.name_for(8) == "Bills & Utilities"
    assert directory.name_for(16) == "Gifts"
    assert directory.get(16).type == TransactionType.EXTRA


def test_categories_by_type(store):
    seed_categories(store)
    expense = store.list_categories("expense")

    assert [c.name for c in expense] == [
        "Shopping", "Food & Dining", "Bills & Utilities", "Transportation", "Entertainment"
    ]
    assert len(store.list_categories(TransactionType.SAVING)) == 4
    assert len(CategoryDirectory(store.list_categories()).by_type("extra")) == 2


def test_categories_unknown_type_rejected(store):
    with pytest.raises(ValidationError):
        store.list_categories("transfer")


# --- Transactions ---

def test_create_assigns_increasing_ids(store):
    first = store.create_transaction(amount=100, type="income")
    second = store.create_transaction(amount=50, type="expense", category_id=6)

    assert second.id > first.id
    assert first.user_id == 1
    assert first.amount == Decimal("100")
    assert first.type is TransactionType.INCOME
    assert isinstance(first.date, datetime)


def test_amount_stored_as_decimal_text(store, db):
    store.create_transaction(amount="1234.10", type="expense")
    raw = db.execute(text("SELECT amount FROM transactions")).scalar_one()

    assert raw == "1234.10"
    assert store.list_transactions()[0].amount == Decimal("1234.10")


@pytest.mark.parametrize("amount", [0, -5, "abc", "NaN", None, "1e400", Decimal("-1e400")])
def test_create_rejects_invalid_amount(store, amount):
    with pytest.raises(ValidationError):
        store.create_transaction(amount=amount, type="expense")
    assert store.list_transactions() == []


def test_create_rejects_unknown_type(store):
    with pytest.raises(ValidationError):
        store.create_transaction(amount=10, type="transfer")


def test_filter_by_type(seeded_store):
    expenses = seeded_store.list_transactions("expense")
    assert [t.description for t in expenses] == ["Shopping Mall", "Food & Dining", "Electricity Bill"]
    assert seeded_store.list_transactions(TransactionType.EXTRA) == []


def test_recent_transactions_newest_first(seeded_store):
    recent = seeded_store.recent_transactions(3)
    assert [t.date.day for t in recent] == [15, 14, 12]


def test_recent_transactions_by_type(seeded_store):
    recent = seeded_store.recent_transactions(1, "expense")
    assert [t.description for t in recent] == ["Shopping Mall"]


def test_update_transaction(store):
    created = store.create_transaction(amount=100, type="expense", description="Lunch")
    updated = store.update_transaction(created.id, amount="120.50", type="extra", description=None)

    assert updated.id == created.id
    assert updated.amount == Decimal("120.50")
    assert updated.type is TransactionType.EXTRA
    assert updated.description is None


def test_update_rejects_invalid_values(store):
    created = store.create_transaction(amount=100, type="expense")

    with pytest.raises(ValidationError):
        store.update_transaction(created.id, amount=0)
    with pytest.raises(ValidationError):
        store.update_transaction(created.id, type="bogus")
    with pytest.raises(ValidationError):
        store.update_transaction(created.id, date=None)
    assert store.get_transaction(created.id).amount == Decimal("100")


def test_update_cannot_touch_id_or_user(store):
    created = store.create_transaction(amount=100, type="expense")
    with pytest.raises(ValidationError):
        store.update_transaction(created.id, id=99)
    with pytest.raises(ValidationError):
        store.update_transaction(created.id, user_id=2)


def test_update_missing_transaction(store):
    with pytest.raises(EntityNotFoundError) as excinfo:
        store.update_transaction(404, amount=10)
    assert excinfo.value.entity_id == 404
    assert str(excinfo.value) == "Transaction not found"


def test_delete_transaction(store):
    created = store.create_transaction(amount=100, type="expense")
    store.delete_transaction(created.id)

    assert store.list_transactions() == []
    with pytest.raises(EntityNotFoundError):
        store.delete_transaction(created.id)


# --- Savings goals ---

def test_create_goal_defaults_current_to_zero(store):
    goal = store.create_goal(name="Vacation", target=100000, icon="plane", color="#F59E0B")
    assert goal.current == Decimal("0")
    assert goal.deadline is None


@pytest.mark.parametrize("target,current", [(0, 0), (-1, 0), (100, -1), ("1e400", 0), (100, "1e309")])
def test_create_goal_rejects_invalid_amounts(store, target, current):
    with pytest.raises(ValidationError):
        store.create_goal(name="Bad", target=target, current=current, icon="x", color="#000")


def test_goal_current_may_exceed_target(store):
    goal = store.create_goal(name="Phone", target=100, current=150, icon="x", color="#000")
    assert goal.current == Decimal("150")


def test_update_goal_current_to_zero(store):
    goal = store.create_goal(name="Phone", target=100, current=40, icon="x", color="#000")
    updated = store.update_goal(goal.id, current=0)
    assert updated.current == Decimal("0")


def test_update_and_delete_missing_goal(store):
    with pytest.raises(EntityNotFoundError):
        store.update_goal(7, name="Nope")
    with pytest.raises(EntityNotFoundError):
        store.delete_goal(7)
    with pytest.raises(EntityNotFoundError):
        store.get_goal(7)


def test_saving_transaction_does_not_fund_goals(seeded_store):
    goal = seeded_store.list_goals()[0]
    before = goal.current

    seeded_store.create_transaction(amount=5000, type="saving", category_id=13, description="Phone fund")

    assert seeded_store.get_goal(goal.id).current == before == Decimal("32500")


# --- Seeding ---

def test_seed_loads_sample_ledger_once(db):
    assert seed(db) == {"categories": 16, "transactions": len(SAMPLE_TRANSACTIONS)}
    assert seed(db) == {"categories": 0, "transactions": 0}


def test_seed_without_sample(db, store):
    seed(db, with_sample=False)
    assert store.list_transactions() == []
    assert store.list_goals() == []
