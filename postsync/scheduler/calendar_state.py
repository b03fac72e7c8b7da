"""
Calendar State — the month/filter view-model behind the Calendar page.
Held in st.session_state and changed only through its setters; the
bucketing itself stays in schedule_window.
"""

import calendar
from datetime import date, datetime

from .schedule_window import TIMEZONE, bucket_by_day


PLATFORMS = ["X", "LinkedIn", "Facebook", "Instagram", "YouTube", "TikTok"]


def _first_of_month(value):
    return date(value.year, value.month, 1)


class CalendarState:
    """Current month plus the platform allow-set for the calendar grid."""

    def __init__(self, month=None, selected_platforms=()):
        if month is None:
            month = datetime.now(TIMEZONE).date()
        self.month = _first_of_month(month)
        self.selected_platforms = []
        for name in selected_platforms:
            self.toggle_platform(name)

    def __repr__(self):
        return f"CalendarState(month={self.month.isoformat()}, platforms={self.selected_platforms})"

    # ── Month navigation ─────────────────────────────────────────────────

    def set_month(self, value):
        self.month = _first_of_month(value)

    def previous_month(self):
        if self.month.month == 1:
            self.month = date(self.month.year - 1, 12, 1)
        else:
            self.month = date(self.month.year, self.month.month - 1, 1)

    def next_month(self):
        if self.month.month == 12:
            self.month = date(self.month.year + 1, 1, 1)
        else:
            self.month = date(self.month.year, self.month.month + 1, 1)

    def go_to_today(self, today=None):
        if today is None:
            today = datetime.now(TIMEZONE).date()
        self.set_month(today)

    def month_bounds(self):
        """(first_day, last_day) of the current month, for the store query."""
        _, days = calendar.monthrange(self.month.year, self.month.month)
        return self.month, date(self.month.year, self.month.month, days)

    def month_label(self):
        return self.month.strftime("%B %Y")

    # ── Platform filter ──────────────────────────────────────────────────

    def toggle_platform(self, name):
        if name in self.selected_platforms:
            self.selected_platforms.remove(name)
        else:
            self.selected_platforms.append(name)

    def clear_platforms(self):
        self.selected_platforms = []

    @property
    def platform_filter(self):
        return frozenset(self.selected_platforms)

    # ── Grid ─────────────────────────────────────────────────────────────

    def buckets(self, posts):
        return bucket_by_day(posts, self.month, self.platform_filter)

    def weeks(self, posts):
        """Buckets chunked into rows of 7; the last row may be short."""
        cells = self.buckets(posts)
        return [cells[i:i + 7] for i in range(0, len(cells), 7)]
