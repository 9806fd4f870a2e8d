import enum
import os
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Database Setup
# Default to local SQLite, but allow override (e.g. Postgres)
DB_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")

# Single-user app: every record belongs to this user
DEFAULT_USER_ID = int(os.getenv("FINANCE_USER_ID", "1"))


def make_engine(url: str):
    """Create an engine, keeping in-memory SQLite on one shared connection."""
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(DB_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class TransactionType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"
    EXTRA = "extra"


class DecimalText(TypeDecorator):
    """Stores Decimal values as text so amounts never pass through a float."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


def _type_column():
    return Column(
        Enum(
            TransactionType,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )


# --- Models ---

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = _type_column()
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, default=DEFAULT_USER_ID)
    amount = Column(DecimalText, nullable=False)
    type = _type_column()
    category_id = Column(Integer, nullable=True)  # loose reference, may be unresolvable
    description = Column(String, nullable=True)
    date = Column(DateTime, nullable=False, default=datetime.now)
    attachment = Column(String, nullable=True)


class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, default=DEFAULT_USER_ID)
    name = Column(String, nullable=False)
    target = Column(DecimalText, nullable=False)
    current = Column(DecimalText, nullable=False, default=Decimal("0"))
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)
    deadline = Column(DateTime, nullable=True)

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
