# schemas/ledger.py
from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

# --- Models for Creation ---
# Los campos son opcionales a propósito: la validación de negocio
# (campos vacíos, negativos) la hace el registrador y responde con
# los nombres de los campos inválidos.

class ClosingCreate(BaseModel):
    person_name: Optional[str] = None
    photo_path: Optional[str] = None
    session_id: Optional[str] = None

    bills_100: int = 0
    bills_50: int = 0
    bills_20: int = 0
    bills_10: int = 0
    bills_5: int = 0
    coins_toonies: int = 0
    coins_loonies: int = 0
    coins_quarters: int = 0
    coins_dimes: int = 0
    coins_nickels: int = 0
    coins_pennies: int = 0

class WithdrawalCreate(BaseModel):
    recipient_name: Optional[str] = None
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    photo_path: Optional[str] = None
    session_id: Optional[str] = None

class SpendingCreate(BaseModel):
    user_name: Optional[str] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    category: Optional[str] = None  # "General" si se omite
    photo_path: Optional[str] = None
    session_id: Optional[str] = None

class DepositCreate(BaseModel):
    user_name: Optional[str] = None
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    photo_path: Optional[str] = None
    session_id: Optional[str] = None

# --- Results ---

class ClosingResult(BaseModel):
    success: bool = True
    transaction_id: str
    total_amount: Decimal

class MovementResult(BaseModel):
    success: bool = True
    transaction_id: str
    message: str
    new_balance: Decimal                   # Saldo de la persona después del movimiento
    till_balance: Optional[Decimal] = None # Solo retiros y depósitos tocan el cajón

class PhotoUploadResult(BaseModel):
    success: bool = True
    session_id: str
    photo_path: str

# --- Models for Reading ---

class TillBalanceRead(BaseModel):
    total_till_cash: Decimal = Decimal("0.00")
    last_updated: Optional[datetime] = None
    updated_by: Optional[str] = None

class PersonBalanceRead(BaseModel):
    id: int
    name: str
    total_cash: Decimal
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TransactionRead(BaseModel):
    id: int
    transaction_id: str
    type: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    photo_path: str
    amount: Decimal

    counted_by: Optional[str] = None
    bills_100: int = 0
    bills_50: int = 0
    bills_20: int = 0
    bills_10: int = 0
    bills_5: int = 0
    coins_toonies: int = 0
    coins_loonies: int = 0
    coins_quarters: int = 0
    coins_dimes: int = 0
    coins_nickels: int = 0
    coins_pennies: int = 0

    recipient_name: Optional[str] = None
    withdrawal_reason: Optional[str] = None
    spending_description: Optional[str] = None
    spending_category: Optional[str] = None

    created_at: datetime

# --- Reconciliation ---

class PersonDrift(BaseModel):
    person_id: int
    name: str
    stored: Decimal
    recomputed: Decimal
    drift: Decimal

class ReconciliationReport(BaseModel):
    stored_till: Decimal
    recomputed_till: Decimal
    till_drift: Decimal
    persons: List[PersonDrift] = []
    transactions_replayed: int
    repaired: bool = False

    @property
    def is_consistent(self) -> bool:
        return self.till_drift == 0 and not self.persons
