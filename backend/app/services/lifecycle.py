"""Image job lifecycle: pending -> processing -> completed | failed."""

import logging
from app.errors import (
    AlreadyCompletedError,
    AlreadyInProgressError,
    ProcessingFailedError,
    UnprocessableError,
)
from app.models.job import ImageJob, JobStatus
from app.services.background_removal import BackgroundRemover
from app.services.job_store import JobStore

logger = logging.getLogger(__name__)


def ensure_pending(job: ImageJob):
    """
    Reject jobs that cannot start processing.

    Raises:
        AlreadyCompletedError: Job is completed
        AlreadyInProgressError: Job is processing
        UnprocessableError: Job has failed, failures are terminal
    """
    if job.status == JobStatus.COMPLETED:
        raise AlreadyCompletedError(job.id)
    if job.status == JobStatus.PROCESSING:
        raise AlreadyInProgressError(job.id)
    if job.status == JobStatus.FAILED:
        raise UnprocessableError(job.id)


class JobLifecycle:
    """Runs background removal for pending jobs."""

    def __init__(self, store: JobStore, remover: BackgroundRemover):
        self.store = store
        self.remover = remover

    async def remove_background(self, job_id: int) -> ImageJob:
        """
        Process a pending job exactly once.

        Args:
            job_id: Job ID

        Returns:
            The completed job

        Raises:
            NotFoundError: Job does not exist
            AlreadyCompletedError, AlreadyInProgressError, UnprocessableError:
                Job is not pending
            ProcessingFailedError: Removal raised; the job is stored as failed
        """
        job = await self.store.get_by_id(job_id)
        ensure_pending(job)

        # Only one caller wins the pending -> processing claim
        claimed = await self.store.compare_and_set_status(
            job_id, JobStatus.PENDING, JobStatus.PROCESSING
        )
        if not claimed:
            job = await self.store.get_by_id(job_id)
            ensure_pending(job)
            raise AlreadyInProgressError(job_id)

        job = await self.store.get_by_id(job_id)
        logger.info(f"Processing image job {job_id}")

        try:
            processed = await self.remover.remove_background(job)
        except Exception as e:
            logger.error(f"Background removal failed for job {job_id}: {e}", exc_info=True)
            await self.store.update_status(
                job_id, JobStatus.FAILED, error_message=str(e) or type(e).__name__
            )
            raise ProcessingFailedError(job_id, str(e)) from e

        job = await self.store.update_status(
            job_id,
            JobStatus.COMPLETED,
            processed_file_url=processed.file_url,
            file_size_processed=processed.file_size,
            error_message=None,
        )
        logger.info(f"Image job {job_id} finished with status: {job.status.value}")
        return job
