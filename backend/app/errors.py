"""Domain errors raised by the upload and job services."""


class ImageJobError(Exception):
    """Base error. Routes turn it into an HTTP error with status_code."""

    status_code = 500


class NotFoundError(ImageJobError):
    status_code = 404

    def __init__(self, job_id: int):
        super().__init__(f"Image job with ID {job_id} not found")
        self.job_id = job_id


class InvalidFormatError(ImageJobError):
    status_code = 400


class TooLargeError(ImageJobError):
    status_code = 413


class AlreadyCompletedError(ImageJobError):
    status_code = 409

    def __init__(self, job_id: int):
        super().__init__(f"Image job {job_id} is already completed")
        self.job_id = job_id


class AlreadyInProgressError(ImageJobError):
    status_code = 409

    def __init__(self, job_id: int):
        super().__init__(f"Image job {job_id} is already being processed")
        self.job_id = job_id


class UnprocessableError(ImageJobError):
    status_code = 422

    def __init__(self, job_id: int):
        super().__init__(f"Image job {job_id} has failed and cannot be reprocessed")
        self.job_id = job_id


class ProcessingFailedError(ImageJobError):
    """Background removal raised; the job has been marked failed."""

    status_code = 502

    def __init__(self, job_id: int, message: str):
        super().__init__(f"Background removal failed for image job {job_id}: {message}")
        self.job_id = job_id
        self.message = message
