# app/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from app.database import Base

# 2. Libro de caja
from .ledger import (
    Person,
    CashTransaction,
    TillBalance,
    TransactionKind,
    SpendingCategory,
)
