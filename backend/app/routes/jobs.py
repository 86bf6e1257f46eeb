"""Image job API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.errors import ImageJobError
from app.models.schemas import (
    ImageJobCreate,
    ImageJobStatusUpdate,
    ImageJobResponse,
    ImageJobListResponse,
)
from app.services.job_store import JobStore
from app.services.lifecycle import JobLifecycle

logger = logging.getLogger(__name__)

router = APIRouter()


def get_job_store(db: AsyncSession = Depends(get_db)) -> JobStore:
    """Job store bound to the request's session."""
    return JobStore(db)


def get_lifecycle(
    request: Request, store: JobStore = Depends(get_job_store)
) -> JobLifecycle:
    """Lifecycle handler using the application's background remover."""
    return JobLifecycle(store, request.app.state.background_remover)


@router.post("", response_model=ImageJobResponse, status_code=201)
async def create_image_job(
    job_data: ImageJobCreate, store: JobStore = Depends(get_job_store)
):
    """
    Create a pending image job.

    Args:
        job_data: Job creation data
        store: Job store

    Returns:
        Created job
    """
    try:
        job = await store.create(
            original_filename=job_data.original_filename,
            original_file_url=job_data.original_file_url,
            file_size_original=job_data.file_size_original,
        )
        return ImageJobResponse.model_validate(job)

    except Exception as e:
        logger.error(f"Error creating image job: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=ImageJobListResponse)
async def list_image_jobs(store: JobStore = Depends(get_job_store)):
    """
    List all image jobs, newest first.

    Returns:
        Jobs and total count
    """
    try:
        jobs = await store.list_all()
        return ImageJobListResponse(
            jobs=[ImageJobResponse.model_validate(job) for job in jobs],
            total=len(jobs),
        )

    except Exception as e:
        logger.error(f"Error listing image jobs: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{job_id}", response_model=ImageJobResponse)
async def get_image_job(job_id: int, store: JobStore = Depends(get_job_store)):
    """
    Get image job details by ID.

    Args:
        job_id: Job ID
        store: Job store

    Returns:
        Job details
    """
    try:
        job = await store.get_by_id(job_id)
        return ImageJobResponse.model_validate(job)

    except ImageJobError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting image job {job_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{job_id}/status", response_model=ImageJobResponse)
async def update_image_job_status(
    job_id: int,
    update: ImageJobStatusUpdate,
    store: JobStore = Depends(get_job_store),
):
    """
    Set a job's status and, optionally, its result or error fields.

    Args:
        job_id: Job ID
        update: New status and supplied fields
        store: Job store

    Returns:
        Updated job
    """
    try:
        job = await store.update_status(job_id, update.status, **update.changes())
        return ImageJobResponse.model_validate(job)

    except ImageJobError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating image job {job_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{job_id}/remove-background", response_model=ImageJobResponse)
async def remove_background(
    job_id: int, lifecycle: JobLifecycle = Depends(get_lifecycle)
):
    """
    Run background removal for a pending job.

    Args:
        job_id: Job ID
        lifecycle: Lifecycle handler

    Returns:
        Completed job
    """
    try:
        job = await lifecycle.remove_background(job_id)
        return ImageJobResponse.model_validate(job)

    except ImageJobError as e:
        if e.status_code >= 500:
            logger.error(f"Background removal for job {job_id} failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error removing background for job {job_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
