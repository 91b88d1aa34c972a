"""
Registro de movimientos de efectivo.

Cada envío del formulario es aceptado o rechazado de una sola vez:
primero se valida todo (sin tocar la base), luego se aplica dentro de
ledger_scope, de modo que bitácora, saldo de la persona y saldo del
cajón se confirman juntos o no se confirma nada.

    Corte     -> agrega transacción y REEMPLAZA el total del cajón
    Retiro    -> get-or-create persona, +persona, -cajón
    Gasto     -> persona debe existir y tener saldo, -persona
    Depósito  -> persona debe existir y tener saldo, -persona, +cajón
"""

import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import ledger as store
from app.database import ledger_scope
from app.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from app.models import SpendingCategory, TransactionKind
from app.schemas.ledger import (
    ClosingCreate, ClosingResult, DepositCreate, MovementResult,
    SpendingCreate, WithdrawalCreate,
)
from app.utils.denominations import DENOMINATIONS, MAX_AMOUNT, calculate_total, to_cents

logger = logging.getLogger(__name__)


def _new_transaction_id() -> str:
    return str(uuid.uuid4())


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _reject(message: str, fields: List[str], kind: TransactionKind):
    logger.warning("Rechazado %s: %s (%s)", kind.value, message, ", ".join(fields))
    raise ValidationError(message, fields=fields)


def _check_amount(amount, invalid: List[str]) -> Optional[Decimal]:
    if amount is None:
        invalid.append("amount")
        return None
    try:
        value = to_cents(amount)
    except (InvalidOperation, ValueError):
        invalid.append("amount")
        return None
    if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
        invalid.append("amount")
        return None
    return value


def _parse_category(raw: Optional[str]) -> Optional[SpendingCategory]:
    raw = _clean(raw)
    if not raw:
        return SpendingCategory.GENERAL
    for member in SpendingCategory:
        if member.value.lower() == raw.lower():
            return member
    return None


# --------------------------------------------------------------------------
# CORTE DIARIO
# --------------------------------------------------------------------------
def record_closing(db: Session, closing_in: ClosingCreate) -> ClosingResult:
    kind = TransactionKind.CLOSING
    person_name = _clean(closing_in.person_name)
    photo_path = _clean(closing_in.photo_path)
    counts = {field: getattr(closing_in, field) for field in DENOMINATIONS}

    invalid = [
        field for field, count in counts.items()
        if count is None or count < 0 or Decimal(count) * DENOMINATIONS[field] > MAX_AMOUNT
    ]
    if not person_name:
        invalid.insert(0, "person_name")
    if not photo_path:
        invalid.append("photo_path")
    if invalid:
        _reject("Datos de corte inválidos", invalid, kind)

    total = calculate_total(counts)
    if total > MAX_AMOUNT:
        _reject(f"El corte excede el máximo de ${MAX_AMOUNT}", [f for f, c in counts.items() if c], kind)

    transaction_id = _new_transaction_id()

    with ledger_scope(db):
        counter = store.find_person_by_name(db, person_name)
        store.append_transaction(
            db,
            transaction_id=transaction_id,
            kind=kind,
            amount=total,
            photo_path=photo_path,
            counted_by=person_name,
            session_id=closing_in.session_id,
            **counts,
        )
        # El conteo físico manda: se reemplaza, no se suma
        store.set_till_balance(db, total, updated_by=counter.id if counter else None)

    logger.info("Corte %s registrado por %s: $%s", transaction_id, person_name, total)
    return ClosingResult(transaction_id=transaction_id, total_amount=total)


# --------------------------------------------------------------------------
# RETIRO DEL CAJÓN
# --------------------------------------------------------------------------
def record_withdrawal(db: Session, withdrawal_in: WithdrawalCreate) -> MovementResult:
    kind = TransactionKind.WITHDRAWAL
    name = _clean(withdrawal_in.recipient_name)
    reason = _clean(withdrawal_in.reason)
    photo_path = _clean(withdrawal_in.photo_path)

    invalid: List[str] = []
    if not name:
        invalid.append("recipient_name")
    amount = _check_amount(withdrawal_in.amount, invalid)
    if not reason:
        invalid.append("reason")
    if not photo_path:
        invalid.append("photo_path")
    if invalid:
        _reject("Faltan campos requeridos", invalid, kind)

    transaction_id = _new_transaction_id()

    with ledger_scope(db):
        person, created = store.get_or_create_person(db, name)
        store.append_transaction(
            db,
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            photo_path=photo_path,
            person_id=person.id,
            recipient_name=name,
            withdrawal_reason=reason,
            session_id=withdrawal_in.session_id,
        )
        new_balance = store.adjust_person_balance(db, person.id, amount)
        till_balance = store.adjust_till_balance(db, -amount, updated_by=person.id)

    if created:
        logger.info("Nueva persona registrada: %s", name)
    if till_balance < 0:
        logger.warning("El cajón quedó en negativo ($%s) tras el retiro %s", till_balance, transaction_id)
    logger.info("Retiro %s: $%s para %s", transaction_id, amount, name)

    return MovementResult(
        transaction_id=transaction_id,
        message=f"{name} ahora tiene ${amount:.2f} adicionales en efectivo",
        new_balance=new_balance,
        till_balance=till_balance,
    )


# --------------------------------------------------------------------------
# GASTO DEL EFECTIVO RETIRADO
# --------------------------------------------------------------------------
def record_spending(db: Session, spending_in: SpendingCreate) -> MovementResult:
    kind = TransactionKind.SPENDING
    name = _clean(spending_in.user_name)
    description = _clean(spending_in.description)
    photo_path = _clean(spending_in.photo_path)

    invalid: List[str] = []
    if not name:
        invalid.append("user_name")
    amount = _check_amount(spending_in.amount, invalid)
    if not description:
        invalid.append("description")
    category = _parse_category(spending_in.category)
    if category is None:
        invalid.append("category")
    if not photo_path:
        invalid.append("photo_path")
    if invalid:
        _reject("Faltan campos requeridos", invalid, kind)

    transaction_id = _new_transaction_id()

    with ledger_scope(db):
        person = store.find_person_by_name(db, name)
        if person is None:
            logger.warning("Gasto rechazado: %s no existe", name)
            raise NotFoundError(f"Persona '{name}' no encontrada", fields=["user_name"])

        available = to_cents(person.total_cash or 0)
        if amount > available:
            logger.warning("Gasto rechazado: %s pidió $%s con saldo $%s", name, amount, available)
            raise InsufficientFundsError(
                f"Saldo insuficiente. {name} tiene ${available:.2f}",
                available=available,
                requested=amount,
            )

        store.append_transaction(
            db,
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            photo_path=photo_path,
            person_id=person.id,
            spending_description=description,
            spending_category=category,
            session_id=spending_in.session_id,
        )
        # El cajón no cambia: el efectivo ya salió al momento del retiro
        new_balance = store.adjust_person_balance(db, person.id, -amount)

    logger.info("Gasto %s: $%s de %s (%s)", transaction_id, amount, name, category.value)
    return MovementResult(
        transaction_id=transaction_id,
        message=f"Gasto de ${amount:.2f} registrado para {name}. Saldo restante: ${new_balance:.2f}",
        new_balance=new_balance,
    )


# --------------------------------------------------------------------------
# DEPÓSITO AL CAJÓN
# --------------------------------------------------------------------------
def record_deposit(db: Session, deposit_in: DepositCreate) -> MovementResult:
    kind = TransactionKind.DEPOSIT
    name = _clean(deposit_in.user_name)
    reason = _clean(deposit_in.reason) or None
    photo_path = _clean(deposit_in.photo_path)

    invalid: List[str] = []
    if not name:
        invalid.append("user_name")
    amount = _check_amount(deposit_in.amount, invalid)
    if not photo_path:
        invalid.append("photo_path")
    if invalid:
        _reject("Faltan campos requeridos", invalid, kind)

    transaction_id = _new_transaction_id()

    with ledger_scope(db):
        person = store.find_person_by_name(db, name)
        if person is None:
            logger.warning("Depósito rechazado: %s no existe", name)
            raise NotFoundError(f"Persona '{name}' no encontrada", fields=["user_name"])

        store.append_transaction(
            db,
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            photo_path=photo_path,
            person_id=person.id,
            recipient_name=name,
            withdrawal_reason=reason,
            session_id=deposit_in.session_id,
        )
        # adjust_person_balance rechaza si deja a la persona en negativo
        new_balance = store.adjust_person_balance(db, person.id, -amount)
        till_balance = store.adjust_till_balance(db, amount, updated_by=person.id)

    logger.info("Depósito %s: $%s de %s al cajón", transaction_id, amount, name)
    return MovementResult(
        transaction_id=transaction_id,
        message=f"{name} devolvió ${amount:.2f} al cajón. Saldo restante: ${new_balance:.2f}",
        new_balance=new_balance,
        till_balance=till_balance,
    )
