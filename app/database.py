import logging
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app import config
from app.exceptions import ConstraintError, LedgerError, StorageError

logger = logging.getLogger(__name__)


def build_engine(url: str):
    # connect_args={"check_same_thread": False} es necesario solo para SQLite
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ESTA es la Base que todos los modelos deben usar
Base = declarative_base()

# Un solo escritor a la vez: get-or-create de personas y
# lectura-verificación-escritura de saldos no deben intercalarse.
_write_lock = threading.RLock()


# Dependencia para obtener la DB en los endpoints
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def ledger_scope(db: Session):
    """
    Alcance transaccional de escritura del libro de caja.

    Todo lo que ocurra dentro se confirma junto o no se confirma nada:
    commit al salir normalmente, rollback ante cualquier excepción.
    Los errores de SQLAlchemy (y los desbordes numéricos) se traducen
    a ConstraintError o StorageError.
    """
    with _write_lock:
        try:
            yield db
            db.commit()
        except LedgerError:
            db.rollback()
            raise
        except IntegrityError as exc:
            db.rollback()
            logger.warning("Rollback por restricción: %s", exc.orig)
            raise ConstraintError(f"Restricción de base de datos violada: {exc.orig}") from exc
        except (DataError, OverflowError) as exc:
            # Valor fuera del rango de la columna
            db.rollback()
            logger.error("Rollback por valor fuera de rango: %s", exc)
            raise StorageError("Valor fuera del rango permitido por la base de datos") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Rollback por error de almacenamiento", exc_info=True)
            raise StorageError("Error al escribir en la base de datos") from exc
        except Exception:
            db.rollback()
            logger.warning("Rollback por error inesperado", exc_info=True)
            raise
