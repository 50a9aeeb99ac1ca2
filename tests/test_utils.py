from datetime import datetime
from types import SimpleNamespace

import pytest
import pytz

from skybrief.agents.calendaragent.utils.datetime_utils import (
    format_local_time,
    get_timezone,
    parse_google_calendar_datetime,
    to_utc_iso,
)
from skybrief.exceptions import InvalidRequestError, PhoneNumberError
from skybrief.utils.location import (
    extract_client_ip,
    get_today_for_timezone,
    resolve_meeting_location,
)
from skybrief.utils.phone import is_valid_phone_number, validate_and_format_phone_number


class TestPhoneNumbers:
    def test_french_national_format(self):
        assert validate_and_format_phone_number("0123456789") == "+33123456789"
        assert validate_and_format_phone_number("0652942901") == "+33652942901"

    def test_international_format(self):
        assert validate_and_format_phone_number("+33123456789") == "+33123456789"
        assert validate_and_format_phone_number("+16502530000") == "+16502530000"

    def test_double_zero_prefix(self):
        assert validate_and_format_phone_number("0033123456789") == "+33123456789"

    def test_separators_are_ignored(self):
        assert validate_and_format_phone_number("06 52 94 29 01") == "+33652942901"
        assert validate_and_format_phone_number("+44 (20) 7031-3000") == "+442070313000"

    @pytest.mark.parametrize("value", ["123", "01234567890", "abc", "", "   "])
    def test_invalid_formats(self, value):
        with pytest.raises(PhoneNumberError):
            validate_and_format_phone_number(value)

    def test_unassigned_country_code(self):
        with pytest.raises(PhoneNumberError):
            validate_and_format_phone_number("+99912345678")

    def test_impossible_north_american_area_code(self):
        # NANP area codes never start with 1
        with pytest.raises(PhoneNumberError):
            validate_and_format_phone_number("+11234567890")

    def test_non_french_numbers(self):
        assert validate_and_format_phone_number("+4915123456789") == "+4915123456789"

    def test_other_default_region(self):
        assert validate_and_format_phone_number("02070313000", default_region="GB") == "+442070313000"

    def test_is_valid_phone_number(self):
        assert is_valid_phone_number("0123456789")
        assert is_valid_phone_number("+33123456789")
        assert not is_valid_phone_number("123")
        assert not is_valid_phone_number("abc")


class TestLocationHelpers:
    def test_today_for_timezone(self):
        now = datetime(2024, 1, 1, 23, 30, tzinfo=pytz.UTC)

        assert get_today_for_timezone("UTC", now) == "2024-01-01"
        assert get_today_for_timezone("Asia/Tokyo", now) == "2024-01-02"

    def test_today_for_unknown_timezone(self):
        with pytest.raises(InvalidRequestError, match="Invalid timezone"):
            get_today_for_timezone("Mars/Olympus")

    def test_client_ip_from_forwarded_header(self):
        request = SimpleNamespace(
            headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"},
            client=SimpleNamespace(host="10.0.0.1"),
        )

        assert extract_client_ip(request) == "203.0.113.7"

    def test_client_ip_from_peer(self):
        request = SimpleNamespace(headers={}, client=SimpleNamespace(host="10.0.0.1"))

        assert extract_client_ip(request) == "10.0.0.1"

    def test_meeting_location_preferred(self):
        assert resolve_meeting_location(" Paris ", "London") == "Paris"

    def test_meeting_location_falls_back_to_default(self):
        assert resolve_meeting_location("", "London") == "London"

    def test_meeting_location_missing(self):
        with pytest.raises(InvalidRequestError, match="No location available"):
            resolve_meeting_location(None, "  ")


class TestDatetimeUtils:
    def test_unknown_timezone_is_utc(self):
        assert get_timezone("Nowhere/Place") is pytz.UTC
        assert get_timezone(None) is pytz.UTC

    def test_parse_datetime_with_offset(self):
        dt = parse_google_calendar_datetime({"dateTime": "2024-01-01T10:00:00+01:00"})

        assert dt == datetime(2024, 1, 1, 9, 0, tzinfo=pytz.UTC)

    def test_parse_zulu_datetime(self):
        dt = parse_google_calendar_datetime({"dateTime": "2024-01-01T10:00:00Z"})

        assert dt == datetime(2024, 1, 1, 10, 0, tzinfo=pytz.UTC)

    def test_parse_all_day_event(self):
        dt = parse_google_calendar_datetime({"date": "2024-01-01"}, "Europe/Paris")

        assert dt.isoformat() == "2024-01-01T00:00:00+01:00"

    @pytest.mark.parametrize("value", [None, {}, {"dateTime": "not-a-date"}, {"date": "01/01/2024"}])
    def test_parse_invalid(self, value):
        assert parse_google_calendar_datetime(value) is None

    def test_to_utc_iso(self):
        paris = pytz.timezone("Europe/Paris")

        assert to_utc_iso(paris.localize(datetime(2024, 1, 1, 10, 0))) == "2024-01-01T09:00:00+00:00"
        assert to_utc_iso(datetime(2024, 1, 1, 10, 0)) == "2024-01-01T10:00:00+00:00"

    def test_format_local_time(self):
        dt = datetime(2024, 1, 1, 14, 5, tzinfo=pytz.UTC)

        assert format_local_time(dt, "Europe/Paris") == "3:05 PM"
        assert format_local_time(datetime(2024, 1, 1, 0, 30, tzinfo=pytz.UTC), "UTC") == "12:30 AM"
