"""
Errores tipados del libro de caja.

Cada error lleva un código estable (para la API), el estatus HTTP con el
que se presenta y datos estructurados para que el cliente pueda corregir
y reenviar el formulario.

    LedgerError
    +-- ValidationError          400  campos faltantes o inválidos
    +-- NotFoundError            404  la persona no existe
    +-- InsufficientFundsError   400  el monto supera el saldo disponible
    +-- DuplicateError           409  nombre de persona repetido
    +-- ConstraintError          409  id de transacción repetido / tipo inválido
    +-- StorageError             500  falla de E/S de la base de datos
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional


class LedgerError(Exception):
    code = "LEDGER_ERROR"
    status_code = 500

    def __init__(self, message: str, fields: Optional[List[str]] = None, **data: Any):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "code": self.code, "fields": self.fields}
        for key, value in self.data.items():
            payload[key] = float(value) if isinstance(value, Decimal) else value
        return payload


class ValidationError(LedgerError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = 404


class InsufficientFundsError(LedgerError):
    code = "INSUFFICIENT_FUNDS"
    status_code = 400

    def __init__(self, message: str, available: Decimal, requested: Optional[Decimal] = None):
        extra = {"available": available}
        if requested is not None:
            extra["requested"] = requested
        super().__init__(message, fields=["amount"], **extra)
        self.available = available
        self.requested = requested


class DuplicateError(LedgerError):
    code = "DUPLICATE"
    status_code = 409


class ConstraintError(LedgerError):
    code = "CONSTRAINT_VIOLATION"
    status_code = 409


class StorageError(LedgerError):
    code = "STORAGE_ERROR"
    status_code = 500
