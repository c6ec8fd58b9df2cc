"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from qrwallet.infrastructure.database.base import Base, UTCDateTime


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),
        CheckConstraint("total_credited_cents >= 0", name="ck_wallets_total_credited_non_negative"),
        CheckConstraint("total_debited_cents >= 0", name="ck_wallets_total_debited_non_negative"),
    )

    account_id = Column(String(64), primary_key=True)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    frozen = Column(Boolean, nullable=False, default=False, index=True)
    total_credited_cents = Column(BigInteger, nullable=False, default=0)
    total_debited_cents = Column(BigInteger, nullable=False, default=0)
    movement_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    last_movement_at = Column(UTCDateTime(timezone=True))
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime(timezone=True), onupdate=utc_now)

    movements = relationship("WalletMovement", back_populates="wallet", order_by="WalletMovement.sequence")
    token = relationship("AuthorizationToken", back_populates="wallet", uselist=False)

    __mapper_args__ = {"version_id_col": version}


class WalletMovement(Base):
    __tablename__ = "wallet_movements"
    __table_args__ = (
        UniqueConstraint("account_id", "sequence", name="uq_wallet_movements_account_sequence"),
        CheckConstraint("amount_cents > 0", name="ck_wallet_movements_amount_positive"),
        CheckConstraint("balance_after_cents >= 0", name="ck_wallet_movements_balance_after_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(64), ForeignKey("wallets.account_id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    kind = Column(String(10), nullable=False)  # credit, debit
    amount_cents = Column(BigInteger, nullable=False)
    balance_before_cents = Column(BigInteger, nullable=False)
    balance_after_cents = Column(BigInteger, nullable=False)
    actor_id = Column(String(64), nullable=False, index=True)
    actor_role = Column(String(30), nullable=False)
    description = Column(String(500), nullable=False)
    category = Column(String(30), nullable=False, default="other", index=True)
    meta = Column(Text)
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utc_now, index=True)

    wallet = relationship("Wallet", back_populates="movements")
    provenance = relationship("ProvenanceArtifact", back_populates="movement", uselist=False)


class AuthorizationToken(Base):
    __tablename__ = "authorization_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    token = Column(String(128), unique=True, nullable=False, index=True)
    account_id = Column(String(64), ForeignKey("wallets.account_id"), unique=True, nullable=False)
    key_id = Column(String(32), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(UTCDateTime(timezone=True))  # null means never expires
    scan_count = Column(Integer, nullable=False, default=0)
    last_scanned_at = Column(UTCDateTime(timezone=True))
    last_scanned_by = Column(String(64))
    issued_at = Column(UTCDateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime(timezone=True), onupdate=utc_now)

    wallet = relationship("Wallet", back_populates="token")


class ProvenanceArtifact(Base):
    __tablename__ = "provenance_artifacts"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_provenance_artifacts_quantity_positive"),
        CheckConstraint("total_value_cents >= 0", name="ck_provenance_artifacts_total_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    movement_id = Column(String(36), ForeignKey("wallet_movements.id"), unique=True, nullable=False)
    account_id = Column(String(64), ForeignKey("wallets.account_id"), nullable=False, index=True)
    item_category = Column(String(100), nullable=False, index=True)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit = Column(String(20), nullable=False, default="piece")
    value_per_unit_cents = Column(BigInteger, nullable=False)
    total_value_cents = Column(BigInteger, nullable=False)
    condition = Column(String(30), nullable=False, default="non-working")
    verified_by = Column(String(64), nullable=False, index=True)
    notes = Column(String(500))
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utc_now)

    movement = relationship("WalletMovement", back_populates="provenance")
