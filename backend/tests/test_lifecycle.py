import asyncio

import pytest

from app.errors import (
    AlreadyCompletedError,
    AlreadyInProgressError,
    NotFoundError,
    ProcessingFailedError,
    UnprocessableError,
)
from app.models.job import JobStatus
from app.services.background_removal import (
    BackgroundRemover,
    SimulatedBackgroundRemover,
)
from app.services.job_store import JobStore
from app.services.lifecycle import JobLifecycle


class FailingRemover(BackgroundRemover):
    async def remove_background(self, job):
        raise RuntimeError("remove.bg API returned 500")


@pytest.fixture
def lifecycle(store):
    return JobLifecycle(
        store, SimulatedBackgroundRemover(base_url="https://storage.example.com")
    )


async def create_job(store, status=JobStatus.PENDING, size=1024000):
    job = await store.create(
        original_filename="test-image.jpg",
        original_file_url="https://storage.example.com/test-image.jpg",
        file_size_original=size,
    )
    if status != JobStatus.PENDING:
        job = await store.update_status(job.id, status)
    return job


async def test_pending_job_completes(lifecycle, store):
    job = await create_job(store)

    result = await lifecycle.remove_background(job.id)

    assert result.id == job.id
    assert result.status == JobStatus.COMPLETED
    assert result.file_size_processed == 716800
    assert result.processed_file_url.startswith(
        f"https://storage.example.com/processed_{job.id}_"
    )
    assert result.completed_at is not None
    assert result.error_message is None

    stored = await store.get_by_id(job.id)
    assert stored.status == JobStatus.COMPLETED
    assert stored.file_size_processed == 716800


async def test_original_fields_preserved(lifecycle, store):
    job = await create_job(store)
    created_at = job.created_at

    result = await lifecycle.remove_background(job.id)

    assert result.original_filename == "test-image.jpg"
    assert result.original_file_url == "https://storage.example.com/test-image.jpg"
    assert result.file_size_original == 1024000
    assert result.created_at == created_at


async def test_unknown_job(lifecycle):
    with pytest.raises(NotFoundError):
        await lifecycle.remove_background(999)


@pytest.mark.parametrize(
    "status, error",
    [
        (JobStatus.COMPLETED, AlreadyCompletedError),
        (JobStatus.PROCESSING, AlreadyInProgressError),
        (JobStatus.FAILED, UnprocessableError),
    ],
)
async def test_non_pending_job_rejected_without_mutation(lifecycle, store, status, error):
    job = await create_job(store, status=status)
    before = (job.status, job.completed_at, job.processed_file_url, job.error_message)

    with pytest.raises(error):
        await lifecycle.remove_background(job.id)

    after = await store.get_by_id(job.id)
    assert (after.status, after.completed_at, after.processed_file_url, after.error_message) == before


async def test_jobs_processed_independently(lifecycle, store):
    first = await create_job(store)
    second = await create_job(store, size=2000)

    result1 = await lifecycle.remove_background(first.id)
    result2 = await lifecycle.remove_background(second.id)

    assert result1.processed_file_url != result2.processed_file_url
    assert result2.file_size_processed == 1400


async def test_removal_failure_marks_job_failed(store):
    job = await create_job(store)
    lifecycle = JobLifecycle(store, FailingRemover())

    with pytest.raises(ProcessingFailedError, match="remove.bg API returned 500"):
        await lifecycle.remove_background(job.id)

    failed = await store.get_by_id(job.id)
    assert failed.status == JobStatus.FAILED
    assert failed.error_message == "remove.bg API returned 500"
    assert failed.completed_at is not None
    assert failed.processed_file_url is None
    assert failed.file_size_processed is None

    with pytest.raises(UnprocessableError):
        await lifecycle.remove_background(job.id)


async def test_concurrent_requests_process_once(database):
    async with database.session() as setup:
        job = await JobStore(setup).create(
            original_filename="race.png",
            original_file_url="https://storage.example.com/race.png",
            file_size_original=1000,
        )

    async def attempt():
        async with database.session() as session:
            lifecycle = JobLifecycle(JobStore(session), SimulatedBackgroundRemover())
            return await lifecycle.remove_background(job.id)

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    completed = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(completed) == 1
    assert completed[0].status == JobStatus.COMPLETED
    assert len(rejected) == 1
    assert isinstance(rejected[0], (AlreadyInProgressError, AlreadyCompletedError))


def test_simulated_size_floor():
    remover = SimulatedBackgroundRemover()
    assert remover.processed_size(1024000) == 716800
    assert remover.processed_size(15) == 10
    assert remover.processed_size(1) == 1
