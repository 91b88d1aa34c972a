#app/routers/reports.py
import io
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
import pandas as pd

from app import config
from app.database import get_db
from app.services import queries

router = APIRouter()

EXPORT_COLUMNS = {
    "created_at": "Fecha",
    "type": "Tipo",
    "transaction_id": "Transacción",
    "user_name": "Persona",
    "counted_by": "Contó",
    "amount": "Monto",
    "withdrawal_reason": "Motivo",
    "spending_description": "Descripción",
    "spending_category": "Categoría",
    "photo_path": "Foto",
}


def build_transactions_frame(rows) -> pd.DataFrame:
    data = []
    for tx in rows:
        row = {}
        for field, label in EXPORT_COLUMNS.items():
            value = getattr(tx, field)
            if field == "amount":
                value = float(value)
            elif field == "created_at" and value is not None:
                value = value.replace(tzinfo=None)  # Excel no acepta zona horaria
            row[label] = value
        data.append(row)
    return pd.DataFrame(data, columns=list(EXPORT_COLUMNS.values()))


@router.get("/transactions.xlsx")
def export_transactions(
    limit: int = Query(config.MAX_TX_LIMIT, ge=1, le=config.MAX_TX_LIMIT),
    db: Session = Depends(get_db),
):
    """Bitácora reciente en Excel (más recientes primero)."""
    df = build_transactions_frame(queries.list_recent_transactions(db, limit=limit))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Movimientos")
    output.seek(0)

    filename = f"movimientos_{datetime.now().strftime('%Y%m%d')}.xlsx"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )
