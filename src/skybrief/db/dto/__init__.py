"""
Persistence Data Transfer Objects (DTOs)

This module contains the records kept by the in-memory stores:
- UserProfile and NotificationPreferences (SMS registration)
- StoredTokens (OAuth tokens per session)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True
    advance_notice_minutes: int = Field(default=60, alias="advanceNoticeMinutes")


class UserProfile(BaseModel):
    """A session that registered for SMS weather notifications."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId", min_length=1)
    sms_phone_number: Optional[str] = Field(default=None, alias="smsPhoneNumber")
    timezone: Optional[str] = None
    default_location: Optional[str] = Field(default=None, alias="defaultLocation")
    resolved_location: Optional[str] = Field(default=None, alias="resolvedLocation")
    notification_preferences: NotificationPreferences = Field(
        default_factory=NotificationPreferences,
        alias="notificationPreferences",
    )


class StoredTokens(BaseModel):
    """OAuth tokens issued for a session."""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    created_at: datetime
