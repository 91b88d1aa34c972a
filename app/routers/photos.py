import uuid
from fastapi import APIRouter, UploadFile, File

from app.schemas.ledger import PhotoUploadResult
from app.utils.photos import save_photo

router = APIRouter()

# def (no async): la copia a disco es bloqueante y corre en el threadpool
@router.post("/upload-photo", response_model=PhotoUploadResult)
def upload_photo(photo: UploadFile = File(...)):
    """Recibe la foto de verificación; el formulario luego envía photo_path."""
    filename = save_photo(photo.file, photo.filename, photo.content_type)
    return PhotoUploadResult(session_id=str(uuid.uuid4()), photo_path=filename)
