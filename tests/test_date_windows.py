from datetime import date, datetime

import pytest

from errors import ValidationError
from services.date_windows import (
    IST,
    WindowPolicy,
    business_day_key,
    normalize_window,
    previous_window,
)


def test_two_am_ist_belongs_to_previous_business_day():
    assert business_day_key(datetime(2024, 1, 2, 2, 0, tzinfo=IST)) == "2024-01-01"


def test_naive_timestamps_are_read_as_utc():
    # 05:29 IST on the 2nd, still the 1st's business day
    assert business_day_key(datetime(2024, 1, 1, 23, 59)) == "2024-01-01"
    # 05:30 IST on the 2nd opens the 2nd
    assert business_day_key(datetime(2024, 1, 2, 0, 0)) == "2024-01-02"


def test_single_day_business_window_spans_whole_day():
    w = normalize_window("2024-01-01", "2024-01-01", WindowPolicy.BUSINESS_DAY)
    assert w.start == datetime(2024, 1, 1, 0, 0)
    assert w.end == datetime(2024, 1, 2, 0, 0)
    assert w.end_inclusive is False
    assert w.days() == ["2024-01-01"]
    assert w.mongo_range() == {"$gte": w.start, "$lt": w.end}


def test_trimmed_window_stops_a_millisecond_early():
    w = normalize_window("2024-01-01", "2024-01-02", WindowPolicy.BUSINESS_DAY_TRIMMED)
    assert w.end == datetime(2024, 1, 2, 23, 59, 59, 999000)
    assert not w.contains(datetime(2024, 1, 2, 23, 59, 59, 999000))
    assert w.contains(datetime(2024, 1, 2, 23, 59, 59, 998000))


def test_closed_window_includes_upper_bound():
    w = normalize_window("2024-01-01", "2024-01-01", WindowPolicy.BUSINESS_DAY_CLOSED)
    assert w.end_inclusive is True
    assert w.mongo_range() == {"$gte": datetime(2024, 1, 1), "$lte": datetime(2024, 1, 2)}


def test_browser_instant_uses_ist_calendar_date():
    # local midnight in India, as a browser sends it
    w = normalize_window(
        "2023-12-31T18:30:00.000Z", "2024-01-01T18:30:00.000Z", WindowPolicy.BUSINESS_DAY
    )
    assert w.first_day == date(2024, 1, 1)
    assert w.last_day == date(2024, 1, 2)


def test_calendar_utc_window():
    w = normalize_window("2024-01-01", "2024-01-03", WindowPolicy.CALENDAR_UTC)
    assert w.start == datetime(2024, 1, 1)
    assert w.end == datetime(2024, 1, 3, 23, 59, 59, 999000)
    assert w.end_inclusive is True
    assert w.day_key(datetime(2024, 1, 2, 20, 0)) == "2024-01-02"


def test_previous_window_for_day_policies_has_same_length_and_no_gap():
    w = normalize_window("2024-01-01", "2024-01-03", WindowPolicy.CALENDAR_UTC)
    prev = previous_window(w)
    assert prev.first_day == date(2023, 12, 29)
    assert prev.last_day == date(2023, 12, 31)
    assert prev.policy is WindowPolicy.CALENDAR_UTC


def test_previous_instant_window():
    w = normalize_window("2024-01-10T00:00:00Z", "2024-01-12T00:00:00Z", WindowPolicy.INSTANT)
    prev = previous_window(w)
    assert prev.start == datetime(2024, 1, 8)
    assert prev.end == datetime(2024, 1, 10)
    assert prev.end_inclusive is False


def test_zero_width_instant_window_compares_against_previous_day():
    w = normalize_window("2024-01-10T12:00:00Z", "2024-01-10T12:00:00Z", WindowPolicy.INSTANT)
    prev = previous_window(w)
    assert prev.start == datetime(2024, 1, 9)
    assert prev.end == datetime(2024, 1, 10)


@pytest.mark.parametrize(
    "start,end",
    [(None, "2024-01-01"), ("2024-01-01", ""), ("yesterday", "2024-01-01"), ("2024-01-05", "2024-01-01")],
)
def test_bad_ranges_are_rejected(start, end):
    with pytest.raises(ValidationError):
        normalize_window(start, end, WindowPolicy.BUSINESS_DAY)


def test_calendar_window_reads_browser_instants_as_ist_days():
    # "today" picked on 10 Jan in India
    w = normalize_window(
        "2024-01-09T18:30:00.000Z", "2024-01-10T18:29:59.999Z", WindowPolicy.CALENDAR_UTC
    )
    assert w.first_day == w.last_day == date(2024, 1, 10)
    assert w.start == datetime(2024, 1, 10)
    assert w.end == datetime(2024, 1, 10, 23, 59, 59, 999000)


@pytest.mark.parametrize("policy", list(WindowPolicy))
def test_dates_at_the_calendar_limits_are_rejected(policy):
    with pytest.raises(ValidationError):
        w = normalize_window("9999-12-31", "9999-12-31T23:59:59-05:00", policy)
        previous_window(w)
    with pytest.raises(ValidationError):
        w = normalize_window("0001-01-01", "0001-01-02", policy)
        previous_window(w)


def test_overlong_range_is_rejected():
    with pytest.raises(ValidationError):
        normalize_window("2000-01-01", "2024-01-01", WindowPolicy.BUSINESS_DAY_TRIMMED)
    with pytest.raises(ValidationError):
        normalize_window("2000-01-01T00:00:00Z", "2024-01-01T00:00:00Z", WindowPolicy.INSTANT)
    w = normalize_window("2023-01-01", "2024-12-31", WindowPolicy.BUSINESS_DAY)
    assert len(w.days()) == 731
