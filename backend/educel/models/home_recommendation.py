"""Home recommendation model — which topics were shown, in which slot."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text

from educel.database import Base, utcnow


class HomeRecommendation(Base):
    __tablename__ = "home_recommendations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    session_id = Column(String(36), nullable=False)
    topic = Column(String(500), nullable=False)  # normalized
    hook = Column(Text, nullable=True)
    slot = Column(String(1), nullable=False)     # A | B | C
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
