"""
Supervisor Data Transfer Objects (DTOs)

This module contains the result of one weather request pipeline run.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class WeatherAnswer:
    """Humanized weather answer, plus the calendar result when augmentation succeeded."""
    location: str
    forecast: str
    query: str
    calendar_result: Optional[Any] = None
