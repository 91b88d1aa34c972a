# app/models/ledger.py
import enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Text,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class TransactionKind(str, enum.Enum):
    CLOSING = "daily_closing"       # Corte / conteo físico del cajón
    WITHDRAWAL = "cash_withdrawal"  # Retiro del cajón hacia una persona
    DEPOSIT = "cash_deposit"        # Devolución de efectivo al cajón
    SPENDING = "cash_spending"      # Gasto del efectivo que trae la persona


class SpendingCategory(str, enum.Enum):
    GENERAL = "General"
    SUPPLIES = "Supplies"
    FOOD = "Food"
    TRANSPORT = "Transport"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Person(Base):
    """
    Persona que puede tener efectivo retirado del cajón.
    Se crea al primer retiro a su nombre; nunca se elimina.
    """
    __tablename__ = "persons"
    __table_args__ = (
        CheckConstraint("total_cash >= 0", name="ck_persons_total_cash_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    total_cash = Column(Numeric(10, 2), default=0, nullable=False)  # Efectivo en su poder

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    transactions = relationship("CashTransaction", back_populates="person")


class CashTransaction(Base):
    """
    Registro inmutable de un evento de efectivo (bitácora append-only).
    Los campos de denominaciones solo aplican al corte.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        Index("ix_transactions_created", "created_at", "id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(36), unique=True, nullable=False, index=True)
    kind = Column(
        Enum(
            TransactionKind,
            name="transaction_kind",
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
    )
    person_id = Column(Integer, ForeignKey("persons.id"), nullable=True)
    photo_path = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    # Corte diario
    counted_by = Column(String, nullable=True)
    bills_100 = Column(Integer, default=0)
    bills_50 = Column(Integer, default=0)
    bills_20 = Column(Integer, default=0)
    bills_10 = Column(Integer, default=0)
    bills_5 = Column(Integer, default=0)
    coins_toonies = Column(Integer, default=0)
    coins_loonies = Column(Integer, default=0)
    coins_quarters = Column(Integer, default=0)
    coins_dimes = Column(Integer, default=0)
    coins_nickels = Column(Integer, default=0)
    coins_pennies = Column(Integer, default=0)

    # Retiro / depósito
    recipient_name = Column(String, nullable=True)
    withdrawal_reason = Column(Text, nullable=True)

    # Gasto
    spending_description = Column(Text, nullable=True)
    spending_category = Column(
        Enum(
            SpendingCategory,
            name="spending_category",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=True,
    )

    session_id = Column(String(36), nullable=True)  # Sesión de la foto (informativo)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    person = relationship("Person", back_populates="transactions")


class TillBalance(Base):
    """
    Total vigente del cajón. Una sola fila (id=1), mantenida junto con
    cada transacción; se puede recalcular desde la bitácora.
    """
    __tablename__ = "till_balance"

    id = Column(Integer, primary_key=True)
    total_till_cash = Column(Numeric(10, 2), default=0, nullable=False)
    last_updated = Column(DateTime(timezone=True), server_default=func.now())
    updated_by = Column(Integer, ForeignKey("persons.id"), nullable=True)

    updater = relationship("Person")
