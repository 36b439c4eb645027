"""
Tests for events: crontab expressions, due checks and fluent helpers.
"""

from datetime import datetime, timezone

import pytest

from taskscheduler.event import Event

UTC = timezone.utc

# 2024-06-02 is a Sunday, 2024-06-03 a Monday
SUNDAY_NOON = datetime(2024, 6, 2, 12, 0, tzinfo=UTC)
MONDAY_NOON = datetime(2024, 6, 3, 12, 0, tzinfo=UTC)


def make_event(command="echo hi"):
    return Event("task1", command)


def test_default_expression_is_due_every_minute():
    event = make_event()
    assert event.expression == "* * * * *"
    assert event.is_due("UTC", now=MONDAY_NOON)
    assert event.is_due("UTC")


def test_daily_at_matches_only_that_minute():
    event = make_event().daily_at("02:30")
    assert event.expression == "30 2 * * *"
    assert event.is_due("UTC", now=datetime(2024, 6, 3, 2, 30, 45, tzinfo=UTC))
    assert not event.is_due("UTC", now=datetime(2024, 6, 3, 2, 31, tzinfo=UTC))


def test_due_check_uses_given_timezone():
    event = make_event().cron("0 9 * * *")
    now = datetime(2024, 6, 3, 7, 0, tzinfo=UTC)  # 09:00 in Berlin (CEST)
    assert event.is_due("Europe/Berlin", now=now)
    assert not event.is_due("UTC", now=now)


def test_event_timezone_overrides_argument():
    event = make_event().cron("0 9 * * *").in_timezone("Europe/Berlin")
    now = datetime(2024, 6, 3, 7, 0, tzinfo=UTC)
    assert event.is_due("UTC", now=now)


def test_sunday_is_zero_and_seven():
    for expression in ("0 12 * * 0", "0 12 * * 7", "0 12 * * sun"):
        event = make_event().cron(expression)
        assert event.is_due("UTC", now=SUNDAY_NOON), expression
        assert not event.is_due("UTC", now=MONDAY_NOON), expression


def test_weekdays_and_weekends():
    weekdays = make_event().weekdays()
    weekends = make_event().weekends()
    assert weekdays.expression == "* * * * 1-5"
    assert weekdays.is_due("UTC", now=MONDAY_NOON)
    assert not weekdays.is_due("UTC", now=SUNDAY_NOON)
    assert weekends.is_due("UTC", now=SUNDAY_NOON)
    assert not weekends.is_due("UTC", now=MONDAY_NOON)


def test_day_of_month_or_day_of_week():
    # Midnight on the 13th, or midnight on any Friday
    event = make_event().cron("0 0 13 * 5")
    assert event.is_due("UTC", now=datetime(2024, 6, 13, tzinfo=UTC))  # Thursday
    assert event.is_due("UTC", now=datetime(2024, 6, 14, tzinfo=UTC))  # Friday
    assert not event.is_due("UTC", now=datetime(2024, 6, 12, tzinfo=UTC))


def test_macros():
    event = make_event().cron("@daily")
    assert event.is_due("UTC", now=datetime(2024, 6, 3, tzinfo=UTC))
    assert not event.is_due("UTC", now=MONDAY_NOON)
    assert make_event().cron("@hourly").hourly_at(15).expression == "15 * * * *"


def test_next_run_date():
    event = make_event().cron("30 2 * * *")
    next_run = event.next_run_date("UTC", now=datetime(2024, 6, 3, 1, 0, tzinfo=UTC))
    assert next_run == datetime(2024, 6, 3, 2, 30, tzinfo=UTC)


def test_frequency_helpers_rewrite_single_fields():
    assert make_event().every_five_minutes().expression == "*/5 * * * *"
    assert make_event().every_n_minutes(1).expression == "* * * * *"
    assert make_event().daily_at("14:05").expression == "5 14 * * *"
    assert make_event().at("7").expression == "0 7 * * *"
    assert make_event().hourly_at(15).weekdays().expression == "15 * * * 1-5"
    assert make_event().days("monday", 3).expression == "* * * * 1,3"
    assert make_event().twice_daily(3, 15).expression == "0 3,15 * * *"
    assert make_event().daily().on(1).expression == "0 0 1 * *"
    assert make_event().fridays().hour(18).minute(30).expression == "30 18 * * 5"
    assert make_event().quarterly().expression == "0 0 1 */3 *"


def test_every_n_minutes_is_due_on_interval():
    event = make_event().every_fifteen_minutes()
    assert event.is_due("UTC", now=datetime(2024, 6, 3, 12, 45, tzinfo=UTC))
    assert not event.is_due("UTC", now=datetime(2024, 6, 3, 12, 46, tzinfo=UTC))


@pytest.mark.parametrize("expression", ["61 * * * *", "* * *", "* * * * 9", "* * * * mon-xyz"])
def test_invalid_expression_is_rejected(expression):
    event = make_event()
    with pytest.raises(ValueError):
        event.cron(expression)
    assert event.expression == "* * * * *"


def test_invalid_time_and_timezone_are_rejected():
    with pytest.raises(ValueError):
        make_event().daily_at("25:00")
    with pytest.raises(ValueError):
        make_event().every_n_minutes(0)
    with pytest.raises(ValueError):
        make_event().in_timezone("Mars/Olympus_Mons")


def test_id_is_immutable():
    event = make_event()
    with pytest.raises(AttributeError):
        event.id = "other"
    assert event.id == "task1"


def test_command_types():
    closure = make_event(lambda: None)
    assert closure.is_closure
    assert not make_event().is_closure
    with pytest.raises(TypeError):
        Event("task2", 42)


def test_metadata_and_summary():
    event = make_event("backup.sh").in_directory("/srv").user("backup")
    assert event.summary_for_display() == "backup.sh"
    event.describe("Nightly backup")
    assert event.summary_for_display() == "Nightly backup"
    assert event.working_dir == "/srv"
    assert event.run_as == "backup"


def test_ping_urls():
    event = make_event().ping_before("https://example.com/start").then_ping("https://example.com/done")
    assert event.has_ping_before() and event.has_ping_after()
    assert event.get_ping_after_url() == "https://example.com/done"

    other = make_event()
    assert not other.has_ping_before()
    with pytest.raises(LookupError):
        other.get_ping_before_url()
    with pytest.raises(ValueError):
        other.then_ping("  ")


def test_naive_now_is_rejected():
    event = make_event()
    with pytest.raises(ValueError, match="timezone-aware"):
        event.is_due("UTC", now=datetime(2024, 6, 3, 12, 0))
    with pytest.raises(ValueError):
        event.next_run_date("UTC", now=datetime(2024, 6, 3, 12, 0))
