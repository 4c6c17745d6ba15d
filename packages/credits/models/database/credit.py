"""
Database entities for the credit ledger.
"""

from sqlalchemy import CheckConstraint, Column, String, DateTime, Integer, Index, Text
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType


class CreditAccountEntity(Base):
    """One balance row per user. ``user_id`` is the auth subject."""

    __tablename__ = "credit_accounts"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, unique=True, index=True)
    balance = Column(Integer, nullable=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_accounts_balance_non_negative"),
    )


class CreditReservationEntity(Base):
    """
    Credits held for one generation session.

    The debit happens at reservation time; COMMITTED keeps it, RELEASED
    refunds it. Rows left HELD past the TTL are released by the sweep.
    """

    __tablename__ = "credit_reservations"

    id = Column(String(64), primary_key=True)
    session_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    state = Column(String(20), nullable=False, index=True)  # held, committed, released

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_credit_reservation_state_date", "state", "created_at"),)


class CreditTransactionEntity(Base):
    """Append-only audit log of balance changes."""

    __tablename__ = "credit_transactions"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    transaction_type = Column(String(20), nullable=False)  # grant, consumption, refund

    # Signed: negative for consumption
    amount = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=False)
    reservation_id = Column(String(64), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (Index("idx_credit_tx_user_date", "user_id", "created_at"),)
