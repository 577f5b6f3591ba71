"""SQLAlchemy ORM models."""

from educel.models.learn_item import LearnItem
from educel.models.lesson_plan import LessonPlan
from educel.models.saved_item import SavedItem
from educel.models.user_prefs import UserPrefs
from educel.models.user_event import UserEvent
from educel.models.topic_options_cache import TopicOptionsCache
from educel.models.home_recommendation import HomeRecommendation

__all__ = [
    "LearnItem",
    "LessonPlan",
    "SavedItem",
    "UserPrefs",
    "UserEvent",
    "TopicOptionsCache",
    "HomeRecommendation",
]
