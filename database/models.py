from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String
from database.database import Base

CATEGORIES = ("Revenue", "Expense")
STATUSES = ("Paid", "Pending")


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # hash bcrypt, jamais le mot de passe en clair
    created_at = Column("createdAt", DateTime, default=lambda: datetime.now(timezone.utc))


class TransactionModel(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_positive"),
        CheckConstraint(
            "category IN ('Revenue', 'Expense')", name="ck_transactions_category"
        ),
        CheckConstraint("status IN ('Paid', 'Pending')", name="ck_transactions_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, index=True)

    # Pas de clé étrangère: user_id peut référencer un utilisateur inexistant
    user_id = Column(String, nullable=False, index=True)
    user_name = Column(String, nullable=False)
    user_profile = Column(String, nullable=True)

    created_at = Column("createdAt", DateTime, default=lambda: datetime.now(timezone.utc))
