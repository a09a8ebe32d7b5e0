import pytest

from familyhub.utils.datetimes import (
    add_minutes,
    build_event_datetime,
    normalize_event_datetime,
    parse_event_datetime,
    resolve_event_window,
    travel_date_of,
)


class TestNormalizeEventDatetime:
    def test_date_only_becomes_midnight(self):
        assert normalize_event_datetime("2024-03-01") == "2024-03-01T00:00:00"

    def test_offset_is_preserved(self):
        assert normalize_event_datetime("2024-03-01T09:00:00-05:00") == "2024-03-01T09:00:00-05:00"

    def test_zulu_suffix_is_kept(self):
        assert normalize_event_datetime("2024-03-01T14:00:00Z") == "2024-03-01T14:00:00Z"

    def test_naive_value_is_not_converted(self):
        assert normalize_event_datetime("2024-03-01 09:30") == "2024-03-01T09:30:00"

    def test_compact_offset(self):
        assert normalize_event_datetime("2024-03-01T09:00:00+0130") == "2024-03-01T09:00:00+01:30"

    @pytest.mark.parametrize("value", ["", "   ", "tomorrow", "2024-13-01"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_event_datetime(value)


class TestBuildEventDatetime:
    def test_timed(self):
        assert build_event_datetime("2024-03-01", "09:15", False) == "2024-03-01T09:15:00"

    def test_all_day_start(self):
        assert build_event_datetime("2024-03-01", None, True) == "2024-03-01T00:00:00"

    def test_all_day_end_is_exclusive(self):
        assert build_event_datetime("2024-02-29", None, True, is_end=True) == "2024-03-01T00:00:00"


class TestResolveEventWindow:
    def test_zero_length_event_gets_default_duration(self):
        start, end = resolve_event_window("2024-03-01T09:00:00", "2024-03-01T09:00:00", False)
        assert (start, end) == ("2024-03-01T09:00:00", "2024-03-01T10:00:00")

    def test_explicit_end_is_used(self):
        _, end = resolve_event_window("2024-03-01T09:00:00", "2024-03-01T09:30:00", False)
        assert end == "2024-03-01T09:30:00"

    def test_provider_end_in_metadata_is_next_candidate(self):
        _, end = resolve_event_window(
            "2024-03-01T09:00:00",
            "2024-03-01T08:00:00",
            False,
            {"google_end_time": "2024-03-01T11:00:00"},
        )
        assert end == "2024-03-01T11:00:00"

    def test_duration_minutes_from_metadata(self):
        _, end = resolve_event_window(
            "2024-03-01T09:00:00", None, False, {"duration_minutes": 45}
        )
        assert end == "2024-03-01T09:45:00"

    def test_offset_start_keeps_offset_on_synthesized_end(self):
        _, end = resolve_event_window("2024-03-01T09:00:00-05:00", None, False)
        assert end == "2024-03-01T10:00:00-05:00"

    def test_single_all_day_event_ends_next_midnight(self):
        start, end = resolve_event_window("2024-03-01", "2024-03-01", True)
        assert (start, end) == ("2024-03-01T00:00:00", "2024-03-02T00:00:00")

    def test_multi_day_all_day_event_keeps_its_end(self):
        _, end = resolve_event_window("2024-03-01", "2024-03-04T00:00:00", True)
        assert end == "2024-03-04T00:00:00"


def test_add_minutes_crosses_midnight():
    assert add_minutes("2024-03-01T23:30:00", 60) == "2024-03-02T00:30:00"


def test_travel_date_of():
    assert travel_date_of("2024-05-01T22:15:00-07:00") == "2024-05-01"
