from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConstraintError, DuplicateError, InsufficientFundsError, NotFoundError, ValidationError
from app.models import CashTransaction, Person, TillBalance, TransactionKind
from app.utils.denominations import MAX_AMOUNT, to_cents

TILL_ROW_ID = 1


def _now():
    return datetime.now(timezone.utc)


def _check_bound(new_total: Decimal, label: str) -> None:
    if abs(new_total) > MAX_AMOUNT:
        raise ValidationError(f"El {label} excedería el máximo de ${MAX_AMOUNT}", fields=["amount"])


# --------------------------------------------------------------------------
# PERSONAS
# --------------------------------------------------------------------------
def find_person_by_name(db: Session, name: str) -> Optional[Person]:
    return db.query(Person).filter(Person.name == name).first()


def get_person(db: Session, person_id: int) -> Person:
    person = db.get(Person, person_id)
    if person is None:
        raise NotFoundError(f"Persona {person_id} no encontrada", fields=["person_id"])
    return person


def create_person(db: Session, name: str) -> Person:
    """Crea la persona con saldo 0. Falla si el nombre ya existe."""
    if find_person_by_name(db, name) is not None:
        raise DuplicateError(f"La persona '{name}' ya existe", fields=["name"])

    person = Person(name=name, total_cash=Decimal("0.00"), updated_at=_now())
    db.add(person)
    try:
        db.flush()  # Para obtener el ID y disparar el UNIQUE(name)
    except IntegrityError as exc:
        raise DuplicateError(f"La persona '{name}' ya existe", fields=["name"]) from exc
    return person


def get_or_create_person(db: Session, name: str) -> Tuple[Person, bool]:
    """
    Obtiene la persona por nombre o la crea.
    Debe llamarse dentro de ledger_scope (el candado serializa la creación).
    """
    person = find_person_by_name(db, name)
    if person is not None:
        return person, False
    return create_person(db, name), True


def adjust_person_balance(db: Session, person_id: int, delta: Decimal) -> Decimal:
    """Suma `delta` al efectivo de la persona; nunca la deja en negativo."""
    person = get_person(db, person_id)
    current = to_cents(person.total_cash or 0)
    new_balance = to_cents(current + delta)
    if new_balance < 0:
        raise InsufficientFundsError(
            f"Saldo insuficiente. {person.name} tiene ${current:.2f}",
            available=current,
            requested=to_cents(-delta),
        )
    _check_bound(new_balance, f"saldo de {person.name}")
    person.total_cash = new_balance
    person.updated_at = _now()
    return new_balance


def set_person_balance(db: Session, person_id: int, new_total: Decimal) -> Decimal:
    """Sobrescribe el saldo (solo para la conciliación)."""
    person = get_person(db, person_id)
    person.total_cash = to_cents(new_total)
    person.updated_at = _now()
    return person.total_cash


def list_persons_with_balance(db: Session) -> List[Person]:
    return db.query(Person).filter(Person.total_cash > 0).order_by(Person.name).all()


# --------------------------------------------------------------------------
# BITÁCORA DE TRANSACCIONES
# --------------------------------------------------------------------------
def append_transaction(db: Session, transaction_id: str, kind, amount: Decimal, photo_path: str, **fields) -> CashTransaction:
    """
    Agrega un registro inmutable a la bitácora.
    El tipo debe ser uno de los cuatro reconocidos y el id único.
    """
    try:
        kind = TransactionKind(kind)
    except ValueError:
        raise ConstraintError(f"Tipo de transacción no reconocido: {kind}", fields=["kind"])

    amount = to_cents(amount)
    if amount < 0:
        raise ConstraintError("El monto de la transacción no puede ser negativo", fields=["amount"])

    exists = db.query(CashTransaction.id).filter(CashTransaction.transaction_id == transaction_id).first()
    if exists:
        raise ConstraintError(f"La transacción {transaction_id} ya existe", fields=["transaction_id"])

    tx = CashTransaction(
        transaction_id=transaction_id,
        kind=kind,
        amount=amount,
        photo_path=photo_path,
        created_at=_now(),
        **fields,
    )
    db.add(tx)
    try:
        db.flush()
    except IntegrityError as exc:
        raise ConstraintError(f"No se pudo registrar la transacción {transaction_id}") from exc
    return tx


def list_recent_transactions(db: Session, limit: int = 50) -> List[Tuple[CashTransaction, Optional[str]]]:
    """Más recientes primero, con el nombre de la persona (LEFT JOIN)."""
    return (
        db.query(CashTransaction, Person.name)
        .outerjoin(Person, CashTransaction.person_id == Person.id)
        .order_by(CashTransaction.created_at.desc(), CashTransaction.id.desc())
        .limit(limit)
        .all()
    )


def list_transactions_chronological(db: Session) -> List[CashTransaction]:
    return db.query(CashTransaction).order_by(CashTransaction.created_at, CashTransaction.id).all()


# --------------------------------------------------------------------------
# SALDO DEL CAJÓN (fila única)
# --------------------------------------------------------------------------
def get_till_balance(db: Session) -> Optional[TillBalance]:
    return db.get(TillBalance, TILL_ROW_ID)


def ensure_till_balance(db: Session) -> TillBalance:
    till = get_till_balance(db)
    if till is None:
        till = TillBalance(id=TILL_ROW_ID, total_till_cash=Decimal("0.00"), last_updated=_now())
        db.add(till)
        db.flush()
    return till


def set_till_balance(db: Session, new_total: Decimal, updated_by: Optional[int] = None) -> Decimal:
    """Reemplaza el total (corte físico manda sobre la contabilidad)."""
    till = ensure_till_balance(db)
    till.total_till_cash = to_cents(new_total)
    till.last_updated = _now()
    till.updated_by = updated_by
    return till.total_till_cash


def adjust_till_balance(db: Session, delta: Decimal, updated_by: Optional[int] = None) -> Decimal:
    # Sin piso: un retiro puede dejar el cajón en negativo
    till = ensure_till_balance(db)
    new_total = to_cents(to_cents(till.total_till_cash or 0) + delta)
    _check_bound(new_total, "saldo del cajón")
    till.total_till_cash = new_total
    till.last_updated = _now()
    till.updated_by = updated_by
    return till.total_till_cash
