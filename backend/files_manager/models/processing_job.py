"""Processing job model: the queue of post-upload work for images."""

from sqlalchemy import Column, String, Text, Integer, DateTime
from sqlalchemy.sql import func
from ..database import Base
from .ids import new_id


class ProcessingJob(Base):
    """
    One request to derive secondary content from an uploaded image.

    Status transitions: queued -> running -> completed | failed
    A job that fails for the first time is put back in the queue once.
    """

    __tablename__ = "processing_jobs"

    id = Column(String(32), primary_key=True, default=new_id)

    user_id = Column(String(32), nullable=False)
    file_id = Column(String(32), nullable=False)

    # Allowed values: queued, running, completed, failed
    status = Column(String(20), nullable=False, default="queued")
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
