import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.exceptions import LedgerError
from app.init_db import init_db
from app.logging_config import setup_logging
from app.routers import cash, photos, reports

# 1. LOGGING (consola + archivo diario)
setup_logging("cashapp")
logger = logging.getLogger(__name__)


# 2. CREACIÓN AUTOMÁTICA DE TABLAS Y DEL CAJÓN
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("API de caja lista (%s)", config.APP_ENV)
    yield


app = FastAPI(
    title="Cash Till Ledger",
    description="Control de efectivo del cajón: cortes, retiros y gastos del personal",
    version="1.0.0",
    lifespan=lifespan,
)

# 3. CONFIGURACIÓN DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. FOTOS DE VERIFICACIÓN
config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(config.UPLOAD_DIR)), name="uploads")

# 5. REGISTRO DE ROUTERS (BACKEND API)
app.include_router(cash.router, prefix="/api", tags=["💰 Caja"])
app.include_router(photos.router, prefix="/api", tags=["📷 Fotos"])
app.include_router(reports.router, prefix="/api/reports", tags=["📊 Reportes"])


@app.get("/api/health")
def health_check():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


# --- 6. MANEJO DE ERRORES ---
@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    content = exc.to_dict()
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        if config.IS_PRODUCTION:
            # En producción no se exponen detalles internos
            content["detail"] = "Error interno del servidor"
    return JSONResponse(status_code=exc.status_code, content=content)
