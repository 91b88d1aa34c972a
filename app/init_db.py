import logging

from app.database import SessionLocal, engine, Base
from app.crud.ledger import ensure_till_balance
from app.models import TillBalance  # registra las tablas en Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=None, session_factory=None):
    """
    Crea las tablas (si faltan) y la fila única del cajón en 0.
    Es idempotente: se puede correr en cada arranque.
    """
    bind = bind or engine
    session_factory = session_factory or SessionLocal

    Base.metadata.create_all(bind=bind)

    db = session_factory()
    try:
        created = db.get(TillBalance, 1) is None
        ensure_till_balance(db)
        db.commit()
    finally:
        db.close()

    if created:
        logger.info("Saldo del cajón inicializado en 0")
    logger.info("Esquema listo en %s", bind.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    from app.logging_config import setup_logging

    setup_logging("init_db")
    init_db()
