"""Lesson plan model — a multi-day study plan derived from a learn item."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String

from educel.database import Base, as_utc, utcnow


class LessonPlan(Base):
    __tablename__ = "lesson_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    learn_item_id = Column(String(36), nullable=True, index=True)
    title = Column(String(500), nullable=False)
    topic = Column(String(500), nullable=False)
    goals = Column(JSON, nullable=False)          # list[str], >= 2
    resources = Column(JSON, nullable=False)      # list[{title, url, type}], >= 3
    exercises = Column(JSON, nullable=False)      # list[str], >= 2
    daily_plan = Column(JSON, nullable=False)     # list[{day, focus, activities}], >= 7
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        created_at = as_utc(self.created_at)
        return {
            "id": self.id,
            "user_id": self.user_id,
            "learn_item_id": self.learn_item_id,
            "title": self.title,
            "topic": self.topic,
            "goals": self.goals,
            "resources": self.resources,
            "exercises": self.exercises,
            "daily_plan": self.daily_plan,
            "created_at": created_at.isoformat() if created_at else None,
        }
