from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from app.core.config import settings
from app.models.model_base import Base
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    # Microsecond resolution; server-side CURRENT_TIMESTAMP on SQLite is whole seconds
    return datetime.now(timezone.utc)


class Medication(Base):
    __tablename__ = settings.MEDICATION_TABLE

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(255), nullable=False, index=True)
    medication_name = Column(String(255), nullable=False)
    frequency = Column(String(50), nullable=False)
    time_to_take = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
