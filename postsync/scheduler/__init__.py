"""
Scheduler Module — Scheduled-post windows, calendar state and Supabase storage.
Handles upcoming-post selection, relative time labels and month-grid buckets.
"""

from .schedule_window import (
    ScheduleBucket,
    due_instant,
    is_upcoming,
    is_due,
    select_upcoming,
    partition_posts,
    count_by_status,
    relative_label,
    elapsed_label,
    bucket_by_day,
    leading_padding,
    format_due_display,
    caption_preview,
    UPCOMING_LIMIT,
)
from .calendar_state import CalendarState, PLATFORMS
