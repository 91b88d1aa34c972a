import logging
import random
import time
from pathlib import Path
from typing import BinaryIO

from app import config
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


def build_photo_name(original_filename: str) -> str:
    """photo-<epoch ms>-<aleatorio><ext>, igual que las fotos del formulario."""
    ext = Path(original_filename or "").suffix.lower()
    return f"photo-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


def save_photo(stream: BinaryIO, original_filename: str, content_type: str, upload_dir: Path = None) -> str:
    """
    Guarda la foto de verificación y devuelve su referencia (nombre de archivo).
    Solo imágenes y hasta MAX_PHOTO_BYTES. Se copia por bloques: un archivo
    demasiado grande se corta en cuanto rebasa el límite y no queda en disco.
    """
    if not (content_type or "").startswith("image/"):
        raise ValidationError("Solo se permiten imágenes", fields=["photo"])

    target_dir = Path(upload_dir or config.UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = build_photo_name(original_filename)
    target = target_dir / filename

    size = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > config.MAX_PHOTO_BYTES:
                    raise ValidationError("Archivo demasiado grande", fields=["photo"])
                out.write(chunk)
        if size == 0:
            raise ValidationError("No se recibió ninguna foto", fields=["photo"])
    except Exception:
        target.unlink(missing_ok=True)
        raise

    logger.info("Foto guardada: %s (%d bytes)", filename, size)
    return filename
