# app/routers/cash.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app import config
from app.database import get_db
from app.schemas.ledger import (
    ClosingCreate, ClosingResult, DepositCreate, MovementResult,
    PersonBalanceRead, ReconciliationReport, SpendingCreate,
    TillBalanceRead, TransactionRead, WithdrawalCreate,
)
from app.services import queries, reconciliation, recorder

router = APIRouter()

# --------------------------------------------------------------------------
# 1. REGISTRO DE MOVIMIENTOS
# --------------------------------------------------------------------------
@router.post("/daily-closing", response_model=ClosingResult)
def record_daily_closing(closing_in: ClosingCreate, db: Session = Depends(get_db)):
    """Corte diario: el conteo físico reemplaza el total del cajón."""
    return recorder.record_closing(db, closing_in)

@router.post("/cash-withdrawal", response_model=MovementResult)
def record_cash_withdrawal(withdrawal_in: WithdrawalCreate, db: Session = Depends(get_db)):
    """Retiro de efectivo del cajón hacia una persona."""
    return recorder.record_withdrawal(db, withdrawal_in)

@router.post("/cash-spending", response_model=MovementResult)
def record_cash_spending(spending_in: SpendingCreate, db: Session = Depends(get_db)):
    """Gasto del efectivo que la persona retiró previamente."""
    return recorder.record_spending(db, spending_in)

@router.post("/cash-deposit", response_model=MovementResult)
def record_cash_deposit(deposit_in: DepositCreate, db: Session = Depends(get_db)):
    """Devolución de efectivo de una persona al cajón."""
    return recorder.record_deposit(db, deposit_in)

# --------------------------------------------------------------------------
# 2. CONSULTAS
# --------------------------------------------------------------------------
@router.get("/cash-balance", response_model=TillBalanceRead)
def get_cash_balance(db: Session = Depends(get_db)):
    return queries.get_till_balance(db)

@router.get("/user-balances", response_model=List[PersonBalanceRead])
def get_user_balances(db: Session = Depends(get_db)):
    """Personas con efectivo en su poder, ordenadas por nombre."""
    return queries.list_person_balances(db)

@router.get("/transactions", response_model=List[TransactionRead])
def get_transactions(
    limit: int = Query(config.DEFAULT_TX_LIMIT, ge=1, le=config.MAX_TX_LIMIT),
    db: Session = Depends(get_db),
):
    return queries.list_recent_transactions(db, limit=limit)

# --------------------------------------------------------------------------
# 3. CONCILIACIÓN
# --------------------------------------------------------------------------
@router.get("/cash-balance/reconcile", response_model=ReconciliationReport)
def check_reconciliation(db: Session = Depends(get_db)):
    """Recalcula cajón y saldos desde la bitácora sin modificar nada."""
    return reconciliation.reconcile(db, repair=False)

@router.post("/cash-balance/reconcile", response_model=ReconciliationReport)
def apply_reconciliation(db: Session = Depends(get_db)):
    """Sobrescribe los totales guardados con los recalculados."""
    return reconciliation.reconcile(db, repair=True)
