"""
Calendar Agent Constants
"""
import pytz


class CALENDAR_SETTINGS:
    """Calendar settings"""
    PRIMARY_CALENDAR_ID = "primary"
    DEFAULT_MAX_RESULTS = 10
    # events.list rejects larger pages
    MAX_RESULTS_LIMIT = 2500
    DEFAULT_ORDER_BY = "startTime"


class GOOGLE_CALENDAR_SETTINGS:
    """Google Calendar settings"""
    SCOPES = ["https://www.googleapis.com/auth/calendar.events"]
    API_VERSION = "v3"
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    AUTH_URI = "https://accounts.google.com/o/oauth2/auth"


UTC_TIMEZONE = pytz.UTC
