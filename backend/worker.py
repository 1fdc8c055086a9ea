"""
Polling worker for image processing jobs.

Checks the processing_jobs table every WORKER_POLL_INTERVAL seconds, claims
one job at a time, and runs PROCESSOR_COMMAND for it:

    <PROCESSOR_COMMAND> --user-id <user> --file-id <file> --path <local path>

A zero exit code completes the job; anything else fails it, and the
JobService re-queues a job once before giving up.

Usage:
    PROCESSOR_COMMAND="thumbnailer" python worker.py
"""

import os
import shlex
import subprocess
import sys
import time
import logging

# Add the package to the path when run from a checkout
sys.path.insert(0, os.path.dirname(__file__))

from sqlalchemy.orm import sessionmaker

from files_manager.core.config import settings
from files_manager.core.logging_config import setup_logging
from files_manager.database import create_db_engine, create_session_factory, init_schema
from files_manager.models.processing_job import ProcessingJob
from files_manager.repositories.file_repository import FileRepository
from files_manager.services.job_service import JobService

# stderr kept on a failed job; enough for a traceback tail
MAX_ERROR_CHARS = 2000

logger = logging.getLogger("worker")


def build_command(job: ProcessingJob, local_path: str) -> list[str]:
    return shlex.split(settings.processor_command) + [
        "--user-id", job.user_id,
        "--file-id", job.file_id,
        "--path", local_path,
    ]


def process_job(session_factory: sessionmaker, job: ProcessingJob) -> None:
    """Run the processor for a single claimed job and record the outcome."""
    db = session_factory()
    try:
        service = JobService(db)
        record = FileRepository(db).find_by_id(job.file_id, user_id=job.user_id)
        if record is None or not record.local_path:
            service.fail(job.id, "File record not found")
            return

        logger.info(f"Processing job {job.id} for file {job.file_id}")
        result = subprocess.run(
            build_command(job, record.local_path),
            capture_output=True,
            text=True,
            timeout=settings.worker_job_timeout,
        )

        if result.returncode == 0:
            service.complete(job.id)
            logger.info(f"Job {job.id} completed successfully")
        else:
            error_msg = result.stderr[-MAX_ERROR_CHARS:] if result.stderr else f"Exit code {result.returncode}"
            service.fail(job.id, error_msg)

    except subprocess.TimeoutExpired:
        JobService(db).fail(job.id, f"Job timed out after {settings.worker_job_timeout}s")
        logger.warning(f"Job {job.id} timed out")
    except OSError as e:
        JobService(db).fail(job.id, str(e))
        logger.error(f"Job {job.id} could not start processor: {e}")
    finally:
        db.close()


def run_once(session_factory: sessionmaker) -> bool:
    """Claim and process one job. Returns False when the queue is empty."""
    db = session_factory()
    try:
        job = JobService(db).claim_next()
    finally:
        db.close()

    if job is None:
        return False
    process_job(session_factory, job)
    return True


def main() -> None:
    """Poll for queued jobs and process them sequentially."""
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)

    if not settings.processor_command:
        logger.critical("PROCESSOR_COMMAND is not set; nothing to run jobs with")
        raise SystemExit(1)

    engine = create_db_engine(settings.database_url, settings)
    init_schema(engine)
    session_factory = create_session_factory(engine)

    logger.info(f"Worker started, polling every {settings.worker_poll_interval}s")
    logger.info(f"Processor command: {settings.processor_command}")

    try:
        while True:
            try:
                if not run_once(session_factory):
                    time.sleep(settings.worker_poll_interval)
            except Exception as e:
                logger.error(f"Worker error: {e}")
                time.sleep(settings.worker_poll_interval)
    except KeyboardInterrupt:
        logger.info("Worker shutting down")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
