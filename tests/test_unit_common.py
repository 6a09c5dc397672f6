"""Unit tests for the date/time wire formats in schemas/common.py."""

from datetime import date, time

import pytest
from pydantic import ValidationError as PydanticValidationError

from babytracker.core.exceptions import ValidationError
from babytracker.schemas.common import format_time, parse_date, parse_time
from babytracker.schemas.feed_entry import FeedEntryCreate, FeedEntryResponse
from babytracker.schemas.sleep_session import SleepSessionCreate


class TestParsing:
    def test_date(self):
        assert parse_date("2025-03-01") == date(2025, 3, 1)

    @pytest.mark.parametrize("value", ["2025-3-1", "01.03.2025", "2025-02-30", "", "2025-03-01T10:00"])
    def test_bad_dates(self, value):
        with pytest.raises(ValidationError):
            parse_date(value)

    def test_time_with_and_without_seconds(self):
        assert parse_time("08:30") == time(8, 30)
        assert parse_time("23:59:30") == time(23, 59, 30)

    @pytest.mark.parametrize("value", ["8:30", "24:00", "12:60", "noon", "08:30:00.5"])
    def test_bad_times(self, value):
        with pytest.raises(ValidationError):
            parse_time(value)

    def test_format_time(self):
        assert format_time(time(6, 5)) == "06:05"
        assert format_time(time(6, 5, 9)) == "06:05:09"


class TestSchemas:
    def test_bad_time_is_a_field_error(self):
        with pytest.raises(PydanticValidationError) as exc:
            SleepSessionCreate(
                baby_id="7b4c6c06-43e2-4a8f-9a55-6c8a4e5d2f11", date="2025-03-01", start_time="25:00",
            )
        assert exc.value.errors()[0]["loc"] == ("start_time",)

    def test_python_dump_keeps_time_objects(self):
        entry = FeedEntryCreate(
            baby_id="7b4c6c06-43e2-4a8f-9a55-6c8a4e5d2f11", date="2025-03-01", time="08:30",
            feed_type="bottle",
        )
        assert entry.model_dump()["time"] == time(8, 30)
        assert entry.model_dump(mode="json")["time"] == "08:30"

    def test_response_serializes_wire_formats(self):
        response = FeedEntryResponse.model_validate({
            "id": "7b4c6c06-43e2-4a8f-9a55-6c8a4e5d2f11",
            "user_id": "u-1",
            "baby_id": None,
            "date": date(2025, 3, 1),
            "time": time(8, 30),
            "feed_type": "bottle",
            "starting_breast": None,
            "temperature": None,
            "did_pee": False,
            "did_poo": False,
            "did_throw_up": False,
            "comment": None,
            "created_at": "2025-03-01T08:31:00Z",
            "updated_at": None,
        })
        data = response.model_dump(mode="json")
        assert data["date"] == "2025-03-01"
        assert data["time"] == "08:30"
