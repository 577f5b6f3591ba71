"""Learn item model — a generated micro-learning card."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, UniqueConstraint

from educel.database import Base, as_utc, utcnow


class LearnItem(Base):
    __tablename__ = "learn_items"
    # Dedup key: at most one row per (user, normalized topic).
    __table_args__ = (UniqueConstraint("user_id", "topic", name="uq_learn_items_user_topic"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    topic = Column(String(500), nullable=False)                 # normalized
    source_type = Column(String(20), nullable=False, default="topic_choice")
    content = Column(JSON, nullable=False)
    expanded_content = Column(JSON(none_as_null=True), nullable=True)
    expanded_created_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=True)  # null once saved

    def is_expired(self, now=None) -> bool:
        expires_at = as_utc(self.expires_at)
        if expires_at is None:
            return False
        return expires_at <= (now or utcnow())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "topic": self.topic,
            "source_type": self.source_type,
            "content": self.content,
            "expanded_content": self.expanded_content,
            "expanded_created_at": _iso(self.expanded_created_at),
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
        }


def _iso(value):
    value = as_utc(value)
    return value.isoformat() if value else None
