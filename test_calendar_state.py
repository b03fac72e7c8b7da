"""
Calendar view-model tests.
Run:  pytest test_calendar_state.py
"""

from datetime import date, datetime

from postsync.scheduler.calendar_state import CalendarState


def _post(post_id, day, platforms=("X",)):
    return {
        "id": post_id,
        "status": "scheduled",
        "scheduled_date": day.isoformat(),
        "scheduled_time": "10:00",
        "platforms": list(platforms),
    }


def test_month_is_normalized_to_first_day():
    state = CalendarState(month=datetime(2024, 6, 18, 15, 30))
    assert state.month == date(2024, 6, 1)
    assert state.month_label() == "June 2024"


def test_default_month_is_current():
    state = CalendarState()
    assert state.month.day == 1


def test_navigation_wraps_years():
    state = CalendarState(month=date(2024, 12, 15))
    state.next_month()
    assert state.month == date(2025, 1, 1)
    state.previous_month()
    state.previous_month()
    assert state.month == date(2024, 11, 1)

    state.set_month(date(2024, 1, 31))
    state.previous_month()
    assert state.month == date(2023, 12, 1)


def test_go_to_today():
    state = CalendarState(month=date(2020, 1, 1))
    state.go_to_today(today=date(2030, 3, 5))
    assert state.month == date(2030, 3, 1)


def test_month_bounds():
    assert CalendarState(month=date(2024, 2, 9)).month_bounds() == (date(2024, 2, 1), date(2024, 2, 29))
    assert CalendarState(month=date(2023, 2, 9)).month_bounds() == (date(2023, 2, 1), date(2023, 2, 28))
    assert CalendarState(month=date(2024, 12, 1)).month_bounds() == (date(2024, 12, 1), date(2024, 12, 31))


def test_toggle_platform():
    state = CalendarState(month=date(2024, 6, 1), selected_platforms=["X", "LinkedIn"])
    assert state.platform_filter == frozenset({"X", "LinkedIn"})

    state.toggle_platform("X")
    assert state.selected_platforms == ["LinkedIn"]
    state.toggle_platform("Instagram")
    assert state.platform_filter == frozenset({"LinkedIn", "Instagram"})

    state.clear_platforms()
    assert state.platform_filter == frozenset()


def test_buckets_apply_platform_filter():
    x_post = _post("x", date(2024, 6, 4), platforms=("X",))
    li_post = _post("li", date(2024, 6, 4), platforms=("LinkedIn",))
    state = CalendarState(month=date(2024, 6, 1))

    day4 = [b for b in state.buckets([x_post, li_post]) if b.day == date(2024, 6, 4)][0]
    assert day4.posts == [x_post, li_post]

    state.toggle_platform("LinkedIn")
    day4 = [b for b in state.buckets([x_post, li_post]) if b.day == date(2024, 6, 4)][0]
    assert day4.posts == [li_post]


def test_weeks_chunk_grid_rows():
    state = CalendarState(month=date(2024, 6, 1))
    weeks = state.weeks([])
    # 6 padding + 30 days
    assert [len(w) for w in weeks] == [7, 7, 7, 7, 7, 1]
    assert weeks[0][6].day == date(2024, 6, 1)
    assert weeks[-1][0].day == date(2024, 6, 30)

    # September 2024 starts on a Sunday
    state.set_month(date(2024, 9, 1))
    assert state.weeks([])[0][0].day == date(2024, 9, 1)
