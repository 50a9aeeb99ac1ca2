"""
Routes Data Transfer Objects (DTOs)

This module contains all Pydantic models used by API routes:
- Response model for the weather endpoint
- Request and response models for SMS registration
- Auth session and health check response models

JSON field names follow the frontend's camelCase convention through aliases.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CalendarResultSummary(BaseModel):
    """What the calendar step did, as shown to the user."""
    message: str


class WeatherResponse(_CamelModel):
    """Response model for the weather endpoint."""
    location: str
    forecast: str
    query: str
    calendar_result: Optional[CalendarResultSummary] = Field(default=None, alias="calendarResult")


class SMSRegistrationRequest(_CamelModel):
    """Request model for SMS registration."""
    phone_number: str = Field(alias="phoneNumber", min_length=1)
    client_ip: str = Field(alias="clientIP", min_length=1)


class SMSRegistrationResponse(BaseModel):
    success: bool
    message: str


class SMSStatusResponse(_CamelModel):
    notifications_enabled: bool = Field(alias="notificationsEnabled")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")


class SessionStatusResponse(_CamelModel):
    success: bool
    has_tokens: bool = Field(alias="hasTokens")


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: Optional[str] = None
    components: Optional[Dict[str, str]] = None
