"""Persistence operations for image jobs."""

import logging
from typing import List
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.errors import NotFoundError
from app.models.job import ImageJob, JobStatus, TERMINAL_STATUSES, utcnow

logger = logging.getLogger(__name__)


class JobStore:
    """Create, read and update image job rows through one session."""

    UPDATABLE_FIELDS = {"processed_file_url", "file_size_processed", "error_message"}

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, original_filename: str, original_file_url: str, file_size_original: int
    ) -> ImageJob:
        """
        Insert a new pending job.

        Args:
            original_filename: Name of the uploaded file
            original_file_url: Where the upload is stored
            file_size_original: Upload size in bytes

        Returns:
            Created job with id and created_at assigned
        """
        job = ImageJob(
            original_filename=original_filename,
            original_file_url=original_file_url,
            file_size_original=file_size_original,
            status=JobStatus.PENDING,
        )
        self.session.add(job)
        await self.session.commit()
        await self.session.refresh(job)

        logger.info(f"Created image job {job.id} for {original_filename}")
        return job

    async def get_by_id(self, job_id: int) -> ImageJob:
        """
        Load a job, always re-reading the row.

        Raises:
            NotFoundError: No job with that id
        """
        job = await self.session.get(ImageJob, job_id, populate_existing=True)
        if job is None:
            raise NotFoundError(job_id)
        return job

    async def list_all(self) -> List[ImageJob]:
        """All jobs, newest first."""
        result = await self.session.execute(
            select(ImageJob).order_by(ImageJob.created_at.desc(), ImageJob.id.desc())
        )
        return list(result.scalars().all())

    async def update_status(self, job_id: int, status: JobStatus, **changes) -> ImageJob:
        """
        Set a job's status and any of the optional result fields.

        Only keyword fields that are passed are written, whatever their
        value. completed_at is set when the new status is terminal.

        Args:
            job_id: Job ID
            status: New status
            **changes: Any of processed_file_url, file_size_processed, error_message

        Returns:
            Updated job

        Raises:
            NotFoundError: No job with that id
        """
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        job = await self.get_by_id(job_id)

        job.status = status
        for field, value in changes.items():
            setattr(job, field, value)
        if status in TERMINAL_STATUSES:
            job.completed_at = utcnow()

        await self.session.commit()
        await self.session.refresh(job)

        logger.info(f"Image job {job_id} status set to {status.value}")
        return job

    async def compare_and_set_status(
        self, job_id: int, expected: JobStatus, new: JobStatus
    ) -> bool:
        """
        Move a job from one status to another in a single conditional UPDATE.

        Returns:
            True if this call changed the row, False if the job was not in
            the expected status (or does not exist)
        """
        result = await self.session.execute(
            update(ImageJob)
            .where(ImageJob.id == job_id, ImageJob.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1
