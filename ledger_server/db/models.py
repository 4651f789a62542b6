"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ledger_server.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    balance = Column(Integer, nullable=False, default=0)
    is_frozen = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    transactions = relationship("TransactionRecord", back_populates="account")
    withdrawals = relationship("Withdrawal", back_populates="account", foreign_keys="Withdrawal.account_id")


class Withdrawal(Base):
    __tablename__ = "withdrawals"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    destination = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    estimated_reference_value = Column(Float)
    requested_at = Column(DateTime(timezone=True), default=utcnow)
    processed_at = Column(DateTime(timezone=True))
    processed_by = Column(String(36), ForeignKey("accounts.id"))
    note = Column(Text)
    external_reference = Column(String(255))

    account = relationship("Account", back_populates="withdrawals", foreign_keys=[account_id])


class TransactionRecord(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # deposit, withdrawal, transfer_in, transfer_out, admin_adjust
    amount = Column(Integer, nullable=False)
    annotation = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    account = relationship("Account", back_populates="transactions")


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
