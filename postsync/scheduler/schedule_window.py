"""
Schedule Window — upcoming / past / due selection for scheduled posts.
Pure functions over post rows (dicts from the `posts` table) and a reference "now".
Used by the dashboard, calendar and scheduled-posts views.
"""

import os
import html
import math
import calendar
import logging
from collections import namedtuple
from datetime import date, datetime, time

import pytz
from dateutil.parser import parse as parse_dt

logger = logging.getLogger("schedule_window")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [Window] %(message)s", "%H:%M:%S"))
    logger.addHandler(handler)


# ─── Configuration ────────────────────────────────────────────────────────────

TIMEZONE = pytz.timezone(os.getenv("POSTSYNC_TIMEZONE", "UTC"))

# Used for every post that has a date but no time-of-day
DEFAULT_POST_TIME = os.getenv("DEFAULT_POST_TIME", "12:00")

# How many posts the dashboard "Upcoming Schedule" card shows
UPCOMING_LIMIT = int(os.getenv("UPCOMING_LIMIT", "3"))

STATUS_DRAFT = "draft"
STATUS_SCHEDULED = "scheduled"
STATUS_PUBLISHED = "published"

ScheduleBucket = namedtuple("ScheduleBucket", ["day", "posts"])
ScheduleBucket.__doc__ = "One calendar cell: a date (None for padding) and its posts."


# ─── Parsing ─────────────────────────────────────────────────────────────────

def _parse_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_time(value):
    if value is None or value == "":
        value = DEFAULT_POST_TIME
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    text = str(value).strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time().replace(second=0)
        except ValueError:
            continue
    return None


def _align(instant, now):
    """Make `instant` and `now` comparable (both naive or both aware)."""
    if instant.tzinfo is None and now.tzinfo is not None:
        instant = TIMEZONE.localize(instant)
    elif instant.tzinfo is not None and now.tzinfo is None:
        now = TIMEZONE.localize(now)
    return instant, now


def _now(now=None):
    return now if now is not None else datetime.now(TIMEZONE)


# ─── Core Algorithm ──────────────────────────────────────────────────────────

def due_instant(post, tz=None):
    """
    Combine a post's scheduled_date and scheduled_time into one datetime.

    Posts without a time-of-day fall back to DEFAULT_POST_TIME (noon).

    Args:
        post: Post row (dict) with "scheduled_date" and "scheduled_time".
        tz: Optional pytz timezone; when given the result is localized to it.

    Returns:
        datetime or None: None when the date is missing or either part
        does not parse.
    """
    day = _parse_date(post.get("scheduled_date"))
    if day is None:
        return None
    at = _parse_time(post.get("scheduled_time"))
    if at is None:
        return None

    combined = datetime.combine(day, at)
    if tz is not None:
        combined = tz.localize(combined)
    return combined


def _due_for(post, now):
    due = due_instant(post)
    if due is None:
        logger.debug(f"Skipping post {post.get('id')}: unparsable schedule "
                     f"({post.get('scheduled_date')!r} {post.get('scheduled_time')!r})")
        return None
    due, _ = _align(due, now)
    return due


def is_upcoming(post, now=None):
    """True iff the post is scheduled and its due instant is not before now."""
    if post.get("status") != STATUS_SCHEDULED:
        return False
    now = _now(now)
    due = _due_for(post, now)
    if due is None:
        return False
    return due >= now


def is_due(post, now=None):
    """True iff the post is still scheduled but its due instant has passed."""
    if post.get("status") != STATUS_SCHEDULED:
        return False
    now = _now(now)
    due = _due_for(post, now)
    if due is None:
        return False
    return due < now


def select_upcoming(posts, now=None, limit=UPCOMING_LIMIT):
    """
    Pick the next posts to go out, soonest first.

    Ties on the due instant keep their input order. A limit of None or
    math.inf means no limit; zero or negative yields an empty list.

    Returns:
        list[dict]: At most `limit` upcoming posts.
    """
    if limit is not None and limit <= 0:
        return []
    if limit == math.inf:
        limit = None

    now = _now(now)
    candidates = []
    for post in posts:
        if post.get("status") != STATUS_SCHEDULED:
            continue
        due = _due_for(post, now)
        if due is None:
            continue
        if due >= now:
            candidates.append((due, post))

    candidates.sort(key=lambda pair: pair[0])
    selected = [post for _, post in candidates]
    return selected if limit is None else selected[:int(limit)]


def partition_posts(posts, now=None):
    """
    Split posts into (past, upcoming) by due instant, keeping input order.
    Posts whose schedule does not parse appear in neither list.
    """
    now = _now(now)
    past, upcoming = [], []
    for post in posts:
        due = _due_for(post, now)
        if due is None:
            continue
        (upcoming if due >= now else past).append(post)
    return past, upcoming


def count_by_status(posts):
    """Dashboard totals: all posts plus per-status counts."""
    counts = {
        "total": 0,
        STATUS_SCHEDULED: 0,
        STATUS_DRAFT: 0,
        STATUS_PUBLISHED: 0,
    }
    for post in posts:
        counts["total"] += 1
        status = post.get("status")
        if status in counts:
            counts[status] += 1
    return counts


# ─── Labels ──────────────────────────────────────────────────────────────────

def _plural(n, unit):
    return f"{n} {unit}{'' if n == 1 else 's'}"


def format_due_display(dt):
    """Format a due instant for display, e.g. "Mon, Jun 17, 2024 at 09:30 AM"."""
    return dt.strftime("%a, %b %d, %Y at %I:%M %p")


def caption_preview(post, limit=160):
    """Truncated, HTML-escaped caption for card markup."""
    caption = post.get("caption") or "(no caption)"
    return html.escape(caption[:limit]) + ("…" if len(caption) > limit else "")


def relative_label(post, now=None):
    """
    Human "time until" label for a post's due instant.

    Each unit is floored, so 90 minutes reads "in 1 hour". A week or more
    out falls back to the absolute date-time.

    Returns:
        str: e.g. "very soon", "in 30 minutes", "in 2 days"; "" when the
        post cannot be scheduled.
    """
    now = _now(now)
    due = _due_for(post, now)
    if due is None:
        return ""

    secs = int((due - now).total_seconds())
    if secs < 60:
        return "very soon"
    if secs < 3600:
        return f"in {_plural(secs // 60, 'minute')}"
    if secs < 86400:
        return f"in {_plural(secs // 3600, 'hour')}"
    if secs < 7 * 86400:
        return f"in {_plural(secs // 86400, 'day')}"
    return format_due_display(due)


def elapsed_label(instant, now=None):
    """
    Human "time since" label for a past instant (e.g. a post's updated_at).

    Args:
        instant: datetime or ISO 8601 timestamp string.
        now: Reference time; defaults to the current time.

    Returns:
        str: "today", "yesterday", "3 days ago", "2 weeks ago",
        "4 months ago"; "" when `instant` does not parse.
    """
    if not instant:
        return ""
    if not isinstance(instant, datetime):
        try:
            instant = parse_dt(str(instant))
        except (ValueError, OverflowError):
            return ""

    now = _now(now)
    instant, now = _align(instant, now)
    days = int((now - instant).total_seconds() // 86400)

    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{_plural(days // 7, 'week')} ago"
    return f"{_plural(days // 30, 'month')} ago"


# ─── Calendar Buckets ────────────────────────────────────────────────────────

def leading_padding(month):
    """Blank cells before day 1 in a Sunday-first week grid (0-6)."""
    first = date(month.year, month.month, 1)
    return (first.weekday() + 1) % 7


def bucket_by_day(posts, month, platform_filter=None):
    """
    Group posts into calendar cells for one month.

    The result starts with `leading_padding(month)` empty buckets, then one
    bucket per day in order. Within a day, posts keep their input order.

    Args:
        posts: Post rows (dicts).
        month: Any date/datetime inside the month to render.
        platform_filter: Iterable of platform names. When non-empty, only
                         posts sharing at least one platform are kept.

    Returns:
        list[ScheduleBucket]
    """
    wanted = set(platform_filter or ())
    _, days_in_month = calendar.monthrange(month.year, month.month)

    by_day = {}
    for post in posts:
        day = _parse_date(post.get("scheduled_date"))
        if day is None or (day.year, day.month) != (month.year, month.month):
            continue
        if wanted and not wanted.intersection(post.get("platforms") or ()):
            continue
        by_day.setdefault(day.day, []).append(post)

    buckets = [ScheduleBucket(None, []) for _ in range(leading_padding(month))]
    for day_num in range(1, days_in_month + 1):
        buckets.append(ScheduleBucket(
            date(month.year, month.month, day_num),
            by_day.get(day_num, []),
        ))
    return buckets
