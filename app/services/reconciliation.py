"""
Conciliación del cajón contra la bitácora.

El saldo del cajón y los saldos por persona se mantienen como totales
corridos; aquí se recalculan repitiendo toda la bitácora para detectar
(y opcionalmente corregir) diferencias.
"""

import logging
from decimal import Decimal
from typing import Dict

from sqlalchemy.orm import Session

from app.crud import ledger as store
from app.database import ledger_scope
from app.models import Person, TransactionKind
from app.schemas.ledger import PersonDrift, ReconciliationReport
from app.utils.denominations import to_cents

logger = logging.getLogger(__name__)


def _replay(db: Session):
    till = Decimal("0.00")
    persons: Dict[int, Decimal] = {}
    transactions = store.list_transactions_chronological(db)

    for tx in transactions:
        amount = to_cents(tx.amount)
        if tx.kind == TransactionKind.CLOSING:
            till = amount
        elif tx.kind == TransactionKind.WITHDRAWAL:
            till -= amount
            persons[tx.person_id] = persons.get(tx.person_id, Decimal("0.00")) + amount
        elif tx.kind == TransactionKind.DEPOSIT:
            till += amount
            persons[tx.person_id] = persons.get(tx.person_id, Decimal("0.00")) - amount
        elif tx.kind == TransactionKind.SPENDING:
            persons[tx.person_id] = persons.get(tx.person_id, Decimal("0.00")) - amount

    return to_cents(till), persons, len(transactions)


def _build_report(db: Session) -> ReconciliationReport:
    recomputed_till, recomputed_persons, count = _replay(db)

    till_row = store.get_till_balance(db)
    stored_till = to_cents(till_row.total_till_cash if till_row else 0)

    drifts = []
    for person in db.query(Person).order_by(Person.name).all():
        stored = to_cents(person.total_cash or 0)
        recomputed = to_cents(recomputed_persons.get(person.id, Decimal("0.00")))
        if stored != recomputed:
            drifts.append(PersonDrift(
                person_id=person.id,
                name=person.name,
                stored=stored,
                recomputed=recomputed,
                drift=stored - recomputed,
            ))

    return ReconciliationReport(
        stored_till=stored_till,
        recomputed_till=recomputed_till,
        till_drift=stored_till - recomputed_till,
        persons=drifts,
        transactions_replayed=count,
    )


def reconcile(db: Session, repair: bool = False) -> ReconciliationReport:
    """
    Compara los totales guardados con los recalculados.
    Con repair=True sobrescribe los guardados (dentro del alcance atómico).
    """
    if not repair:
        report = _build_report(db)
        if not report.is_consistent:
            logger.warning(
                "Diferencia detectada: cajón %s (guardado %s, bitácora %s), %d persona(s)",
                report.till_drift, report.stored_till, report.recomputed_till, len(report.persons),
            )
        return report

    with ledger_scope(db):
        report = _build_report(db)
        if report.till_drift != 0:
            till = store.ensure_till_balance(db)
            store.set_till_balance(db, report.recomputed_till, updated_by=till.updated_by)
        for drift in report.persons:
            if drift.recomputed < 0:
                # La bitácora no puede dejar a nadie en negativo; no se corrige a ciegas
                logger.error("Saldo recalculado negativo para %s: %s", drift.name, drift.recomputed)
                continue
            store.set_person_balance(db, drift.person_id, drift.recomputed)

    report.repaired = True
    if report.is_consistent:
        logger.info("Conciliación sin diferencias (%d transacciones)", report.transactions_replayed)
        return report
    logger.warning(
        "Conciliación aplicada: cajón %s -> %s, %d persona(s) corregidas",
        report.stored_till, report.recomputed_till, len(report.persons),
    )
    return report
