from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime
from studytracker.database import Base


class LocalState(Base):
    __tablename__ = "local_state"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)  # JSON string
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))
