"""Models for generated health advice."""

from pydantic import BaseModel


class HealthInsight(BaseModel):
    """Short health tip generated for the day's progress."""

    emoji: str
    title: str
    message: str
