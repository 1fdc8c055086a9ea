"""Processing queue: job lifecycle and the fire-and-forget dispatcher."""

import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..models.processing_job import ProcessingJob

logger = logging.getLogger(__name__)

# Failed jobs go back to the queue this many times before they stay failed.
MAX_RETRIES = 1


class JobService:
    """
    Manages the lifecycle of image processing jobs.

    Jobs are created on upload, claimed by the worker, and tracked
    through queued -> running -> completed/failed transitions.
    """

    def __init__(self, db: Session):
        self.db = db

    def enqueue(self, user_id: str, file_id: str) -> ProcessingJob:
        """Create a queued job for one uploaded file."""
        job = ProcessingJob(user_id=user_id, file_id=file_id, status="queued")
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)

        logger.info("Enqueued processing job", extra={"job_id": job.id, "file_id": file_id})
        return job

    def claim_next(self) -> Optional[ProcessingJob]:
        """
        Claim the oldest queued job for processing.

        Sets status to 'running' and records started_at timestamp.

        Returns:
            The claimed job, or None if no queued jobs exist
        """
        job = (
            self.db.query(ProcessingJob)
            .filter(ProcessingJob.status == "queued")
            .order_by(ProcessingJob.id.asc())
            .first()
        )
        if not job:
            return None

        job.status = "running"
        job.started_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(job)

        logger.info("Claimed processing job", extra={"job_id": job.id, "file_id": job.file_id})
        return job

    def complete(self, job_id: str) -> ProcessingJob:
        """Mark a job as successfully completed."""
        job = self.db.get(ProcessingJob, job_id)
        if not job:
            raise ValueError(f"Job not found: {job_id}")

        job.status = "completed"
        job.completed_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(job)
        return job

    def fail(self, job_id: str, error_message: str) -> ProcessingJob:
        """
        Mark a job as failed, re-queuing it while retries remain.

        Args:
            job_id: The job to mark as failed
            error_message: Description of what went wrong
        """
        job = self.db.get(ProcessingJob, job_id)
        if not job:
            raise ValueError(f"Job not found: {job_id}")

        job.retry_count += 1

        if job.retry_count <= MAX_RETRIES:
            job.status = "queued"
            job.error_message = f"Retry after: {error_message}"
            logger.info(f"Job {job_id} failed, re-queuing (retry {job.retry_count})")
        else:
            job.status = "failed"
            job.error_message = error_message
            job.completed_at = datetime.now(timezone.utc)
            logger.warning(f"Job {job_id} failed permanently: {error_message}")

        self.db.commit()
        self.db.refresh(job)
        return job

    def get_job(self, job_id: str) -> Optional[ProcessingJob]:
        return self.db.get(ProcessingJob, job_id)

    def jobs_for_file(self, file_id: str) -> list[ProcessingJob]:
        return (
            self.db.query(ProcessingJob)
            .filter(ProcessingJob.file_id == file_id)
            .order_by(ProcessingJob.id.asc())
            .all()
        )


class ProcessingDispatcher:
    """Enqueue processing jobs without ever failing the caller.

    The upload has already been stored when dispatch runs; a queue error is
    logged and the upload still succeeds.
    """

    def __init__(self, job_service: JobService):
        self.job_service = job_service

    def dispatch(self, user_id: str, file_id: str) -> Optional[ProcessingJob]:
        try:
            return self.job_service.enqueue(user_id, file_id)
        except SQLAlchemyError as e:
            self.job_service.db.rollback()
            logger.error(
                "Could not enqueue processing job",
                extra={"file_id": file_id, "error": str(e)},
            )
            return None
