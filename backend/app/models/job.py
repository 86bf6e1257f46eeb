"""Image job database model."""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, Index
from sqlalchemy.types import TypeDecorator
from app.database import Base


class JobStatus(str, enum.Enum):
    """Lifecycle states of an image job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC and always read back timezone-aware.

    SQLite keeps no offset, so values are normalised to UTC on the way in
    and tagged with UTC on the way out.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class ImageJob(Base):
    """Background removal job for one uploaded image."""

    __tablename__ = "image_jobs"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Source image
    original_filename = Column(String, nullable=False)
    original_file_url = Column(String, nullable=False)
    file_size_original = Column(Integer, nullable=False)

    # Result, only present once completed
    processed_file_url = Column(String, nullable=True)
    file_size_processed = Column(Integer, nullable=True)

    # Status tracking
    status = Column(
        Enum(
            JobStatus,
            name="image_job_status",
            values_callable=lambda statuses: [s.value for s in statuses],
            create_constraint=True,
            validate_strings=True,
        ),
        nullable=False,
        default=JobStatus.PENDING,
    )
    error_message = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    completed_at = Column(UTCDateTime, nullable=True)

    # Indexes
    __table_args__ = (
        Index("idx_image_jobs_status", "status"),
        Index("idx_image_jobs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ImageJob {self.id} status={self.status.value}>"
