"""Per-user preferences read by the generation pipeline."""

from sqlalchemy import JSON, Column, DateTime, String

from educel.database import Base, utcnow


class UserPrefs(Base):
    __tablename__ = "user_prefs"

    user_id = Column(String(36), primary_key=True)
    preferred_topics = Column(JSON, nullable=False, default=list)
    depth = Column(String(20), nullable=False, default="concise")  # concise | deeper
    theme = Column(String(20), nullable=False, default="auto")     # light | dark | auto
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
