"""Short-lived cache of the last generated topic suggestions per user."""

from sqlalchemy import JSON, Column, DateTime, String

from educel.database import Base, utcnow


class TopicOptionsCache(Base):
    __tablename__ = "topic_options_cache"

    user_id = Column(String(36), primary_key=True)
    options = Column(JSON, nullable=False)
    session_id = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
