"""File upload API endpoints."""
import logging
from fastapi import APIRouter, HTTPException
from app.errors import ImageJobError
from app.models.schemas import UploadFileRequest, UploadFileResponse
from app.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadFileResponse)
async def upload_file(upload: UploadFileRequest):
    """
    Validate a base64 image upload and return its storage URL.

    Args:
        upload: File name, base64 data and MIME type

    Returns:
        File URL and decoded size in bytes
    """
    try:
        stored = upload_service.upload(upload.filename, upload.file_data, upload.mime_type)
        return UploadFileResponse(file_url=stored.file_url, file_size=stored.file_size)
    except ImageJobError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading file: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
