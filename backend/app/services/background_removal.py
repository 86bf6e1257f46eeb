"""Background removal providers."""

import abc
import logging
import time
from typing import NamedTuple, Optional
from app.config import settings
from app.models.job import ImageJob
from app.services.upload_service import sanitize_filename

logger = logging.getLogger(__name__)


class ProcessedImage(NamedTuple):
    file_url: str
    file_size: int


class BackgroundRemover(abc.ABC):
    """Removes the background from a job's original image."""

    @abc.abstractmethod
    async def remove_background(self, job: ImageJob) -> ProcessedImage:
        """
        Produce the processed image for a job.

        Args:
            job: Job being processed

        Returns:
            ProcessedImage with the result URL and size

        Raises:
            Exception: Any failure; the caller marks the job failed
        """


class SimulatedBackgroundRemover(BackgroundRemover):
    """Stands in for a remove-background API without calling anything.

    The processed file is reported as a fixed percentage of the original
    size and its URL is fabricated from the job id and a timestamp.
    """

    def __init__(self, base_url: Optional[str] = None, size_percent: Optional[int] = None):
        self.base_url = base_url or settings.STORAGE_BASE_URL
        self.size_percent = (
            settings.PROCESSED_SIZE_PERCENT if size_percent is None else size_percent
        )

    def processed_size(self, original_size: int) -> int:
        """floor(original_size * percent / 100), clamped to 1 so it stays positive."""
        return max(1, original_size * self.size_percent // 100)

    async def remove_background(self, job: ImageJob) -> ProcessedImage:
        timestamp = int(time.time() * 1000)
        file_url = (
            f"{self.base_url}/processed_{job.id}_{timestamp}_"
            f"{sanitize_filename(job.original_filename)}"
        )
        file_size = self.processed_size(job.file_size_original)

        logger.debug(f"Simulated background removal for job {job.id}: {file_size} bytes")
        return ProcessedImage(file_url=file_url, file_size=file_size)
