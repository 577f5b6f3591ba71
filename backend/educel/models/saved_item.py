"""Saved item model — a user's bookmark over a learn item or lesson plan."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, String, UniqueConstraint

from educel.database import Base, utcnow


class SavedItem(Base):
    __tablename__ = "saved_items"
    __table_args__ = (
        UniqueConstraint("user_id", "item_type", "item_id", name="uq_saved_items_user_item"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    item_type = Column(String(20), nullable=False)  # learning | lesson_plan
    item_id = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
