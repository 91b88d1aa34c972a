"""
Fixtures comunes: cada prueba usa su propia base SQLite en tmp_path.
"""

import os
import tempfile

# Antes de importar app.*: sin archivo de log y fotos en un directorio temporal
_SCRATCH = tempfile.mkdtemp(prefix="cashapp-tests-")
os.environ["CASHAPP_LOG_DIR"] = ""
os.environ["CASHAPP_UPLOAD_DIR"] = os.path.join(_SCRATCH, "uploads")
os.environ["CASHAPP_DATABASE_URL"] = f"sqlite:///{os.path.join(_SCRATCH, 'unused.db')}"

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.database import build_engine, get_db  # noqa: E402
from app.init_db import init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.ledger import ClosingCreate, WithdrawalCreate  # noqa: E402
from app.services import recorder  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    init_db(bind=engine, session_factory=sessionmaker(bind=engine))
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alex_with_cash(db):
    """Corte de $43.00 y retiro de $50.00 para Alex."""
    recorder.record_closing(db, ClosingCreate(person_name="Sam", photo_path="photo-1.jpg", bills_20=2, coins_loonies=3))
    recorder.record_withdrawal(db, WithdrawalCreate(
        recipient_name="Alex", amount=Decimal("50.00"), reason="Compras", photo_path="photo-2.jpg",
    ))
    return db

