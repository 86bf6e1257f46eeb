"""Pydantic schemas for API requests and responses."""
from datetime import datetime
from typing import Annotated, Optional
from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    TypeAdapter,
    ValidationError,
)
from app.models.job import JobStatus

_http_url = TypeAdapter(AnyHttpUrl)


def _check_http_url(value: str) -> str:
    """Validate as an http(s) URL but keep the string exactly as sent."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError(f"Not a valid http(s) URL: {value!r}")
    return value


HttpUrlString = Annotated[str, AfterValidator(_check_http_url)]


class UploadFileRequest(BaseModel):
    """Schema for uploading an image as base64."""
    filename: str = Field(min_length=1)
    file_data: str = Field(description="Base64 encoded file contents")
    mime_type: str = Field(pattern=r"^image/(jpeg|jpg|png|webp)$")


class UploadFileResponse(BaseModel):
    """Schema for upload response."""
    file_url: str
    file_size: int


class ImageJobCreate(BaseModel):
    """Schema for creating an image job."""
    original_filename: str = Field(min_length=1)
    original_file_url: HttpUrlString
    file_size_original: PositiveInt


class ImageJobStatusUpdate(BaseModel):
    """Schema for a partial status update. Omitted fields are left untouched."""
    status: JobStatus
    processed_file_url: Optional[HttpUrlString] = None
    error_message: Optional[str] = None
    file_size_processed: Optional[PositiveInt] = None

    def changes(self) -> dict:
        """Fields the client actually supplied, excluding status."""
        supplied = self.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        supplied.pop("status", None)
        return supplied


class ImageJobResponse(BaseModel):
    """Schema for image job response."""
    id: int
    original_filename: str
    original_file_url: str
    processed_file_url: Optional[str]
    status: JobStatus
    error_message: Optional[str]
    created_at: datetime
    completed_at: Optional[datetime]
    file_size_original: int
    file_size_processed: Optional[int]

    model_config = ConfigDict(from_attributes=True)


class ImageJobListResponse(BaseModel):
    """Schema for image job list response."""
    jobs: list[ImageJobResponse]
    total: int
