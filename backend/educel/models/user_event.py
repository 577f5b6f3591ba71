"""User event model — immutable engagement records."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, UniqueConstraint

from educel.database import Base, utcnow


class UserEvent(Base):
    __tablename__ = "user_events"
    # Only content_viewed rows carry view_session_id; NULLs never collide.
    __table_args__ = (
        UniqueConstraint(
            "user_id", "learn_item_id", "view_session_id", name="uq_user_events_view_session"
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    event_type = Column(String(30), nullable=False)
    topic = Column(String(500), nullable=True)
    learn_item_id = Column(String(36), nullable=True)
    slot = Column(String(1), nullable=True)  # A | B | C
    meta = Column(JSON, nullable=False, default=dict)
    view_session_id = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
