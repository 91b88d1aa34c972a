# app/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

# Por defecto SQLite local; cambia la URL si usas PostgreSQL
DATABASE_URL = os.getenv("CASHAPP_DATABASE_URL", "sqlite:///./cashapp.db")

# Fotos de verificación (se sirven en /uploads)
UPLOAD_DIR = Path(os.getenv("CASHAPP_UPLOAD_DIR", "./uploads"))
MAX_PHOTO_BYTES = int(os.getenv("CASHAPP_MAX_PHOTO_BYTES", 10 * 1024 * 1024))  # 10MB

CORS_ORIGINS = [o.strip() for o in os.getenv("CASHAPP_CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("CASHAPP_LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("CASHAPP_LOG_DIR", "./logs")  # Vacío = sin archivo

DEFAULT_TX_LIMIT = int(os.getenv("CASHAPP_DEFAULT_TX_LIMIT", 50))
MAX_TX_LIMIT = int(os.getenv("CASHAPP_MAX_TX_LIMIT", 500))
