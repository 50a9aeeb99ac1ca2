"""
Notification Data Transfer Objects (DTOs)

This module contains the data models used by the meeting notification pipeline:
- NotificationWeatherContext: what we know about an upcoming meeting
- NotificationWeatherResult: model-produced weather briefing (schema validated)
- NotificationRecord: per (session, event) send state
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skybrief.constants import NOTIFICATION_SETTINGS


@dataclass
class NotificationWeatherContext:
    """Meeting details the notification weather is generated for."""
    meeting_location: str
    meeting_time: datetime
    user_timezone: str
    meeting_duration_minutes: int = NOTIFICATION_SETTINGS.DEFAULT_MEETING_DURATION_MINUTES
    user_default_location: Optional[str] = None


class NotificationWeatherResult(BaseModel):
    """Weather briefing for one meeting."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    weather_summary: str = Field(alias="weatherSummary", min_length=1)
    actionable_advice: str = Field(alias="actionableAdvice", min_length=1)
    severity: Literal["low", "medium", "high"]
    relevant_alerts: List[str] = Field(default_factory=list, alias="relevantAlerts")

    @field_validator("relevant_alerts", mode="before")
    @classmethod
    def _none_means_no_alerts(cls, value):
        return [] if value is None else value


@dataclass
class NotificationRecord:
    """Send state for one (session, event) pair."""
    session_id: str
    event_id: str
    scheduled_for: datetime
    sent_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return notification_key(self.session_id, self.event_id)


def notification_key(session_id: str, event_id: str) -> str:
    return f"{session_id}:{event_id}"
