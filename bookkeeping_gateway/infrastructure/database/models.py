"""SQLAlchemy ORM models for the transition audit log"""

import uuid
from sqlalchemy import Column, Boolean, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class StatusTransitionRecord(Base):
    """One bulk approve/reject run as seen by the reviewer"""

    __tablename__ = "status_transition"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    target = Column(Text, nullable=False, index=True)
    requested_count = Column(Integer, nullable=False)
    processed_count = Column(Integer, nullable=False)
    failed_count = Column(Integer, nullable=False)
    reconciled = Column(Boolean, nullable=False)
    processed_ids = Column(JSON, nullable=False)
    failed_ids = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
