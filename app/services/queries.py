from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from app import config
from app.crud import ledger as store
from app.schemas.ledger import PersonBalanceRead, TillBalanceRead, TransactionRead
from app.utils.denominations import DENOMINATIONS, to_cents


def get_till_balance(db: Session) -> TillBalanceRead:
    """Saldo vigente del cajón; cero si aún no se inicializa."""
    till = store.get_till_balance(db)
    if till is None:
        return TillBalanceRead(total_till_cash=Decimal("0.00"))
    return TillBalanceRead(
        total_till_cash=to_cents(till.total_till_cash or 0),
        last_updated=till.last_updated,
        updated_by=till.updater.name if till.updater else None,
    )


def list_person_balances(db: Session) -> List[PersonBalanceRead]:
    return [PersonBalanceRead.model_validate(p) for p in store.list_persons_with_balance(db)]


def list_recent_transactions(db: Session, limit: int = config.DEFAULT_TX_LIMIT) -> List[TransactionRead]:
    rows = store.list_recent_transactions(db, limit=limit)
    result = []
    for tx, person_name in rows:
        data = {field: getattr(tx, field) or 0 for field in DENOMINATIONS}
        result.append(TransactionRead(
            id=tx.id,
            transaction_id=tx.transaction_id,
            type=tx.kind.value,
            user_id=tx.person_id,
            user_name=person_name,
            photo_path=tx.photo_path,
            amount=to_cents(tx.amount),
            counted_by=tx.counted_by,
            recipient_name=tx.recipient_name,
            withdrawal_reason=tx.withdrawal_reason,
            spending_description=tx.spending_description,
            spending_category=tx.spending_category.value if tx.spending_category else None,
            created_at=tx.created_at,
            **data,
        ))
    return result
