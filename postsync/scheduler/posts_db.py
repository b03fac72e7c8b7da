"""
Posts DB — Supabase CRUD for the `posts` table.
Handles scheduling, drafts, status updates and the calendar month query.
"""

import os
import logging
from datetime import date, datetime, time, timezone
from supabase import create_client

logger = logging.getLogger("posts_db")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [PostsDB] %(message)s", "%H:%M:%S"))
    logger.addHandler(handler)


# ─── Supabase Client ─────────────────────────────────────────────────────────

def _get_client():
    """Get Supabase client from environment variables."""
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment")
    return create_client(url, key)


TABLE_NAME = os.getenv("POSTS_TABLE", "posts")

CALENDAR_STATUSES = ["scheduled", "published"]


# ─── Serialization ───────────────────────────────────────────────────────────

def _date_str(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _time_str(value):
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    return str(value)[:5]


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _scoped(query, user_id):
    return query.eq("user_id", user_id) if user_id else query


# ─── Read Operations ─────────────────────────────────────────────────────────

def get_posts(user_id=None, status=None):
    """
    List posts, optionally filtered by owner and status.

    Args:
        user_id: Owner to filter on, or None for all rows.
        status: "draft", "scheduled", "published", or None for all.

    Returns:
        list[dict]: Posts, latest scheduled_date first.
    """
    client = _get_client()

    query = _scoped(client.table(TABLE_NAME).select("*"), user_id)
    if status:
        query = query.eq("status", status)

    result = query.order("scheduled_date", desc=True).execute()
    return result.data or []


def get_scheduled_posts(user_id=None):
    """Scheduled posts in schedule order (date, then time)."""
    client = _get_client()

    result = (
        _scoped(client.table(TABLE_NAME).select("*"), user_id)
        .eq("status", "scheduled")
        .order("scheduled_date", desc=False)
        .order("scheduled_time", desc=False)
        .execute()
    )
    return result.data or []


def get_posts_for_month(first_day, last_day, user_id=None):
    """
    Fetch scheduled and published posts whose scheduled_date falls in
    [first_day, last_day]. Drafts never reach the calendar.

    Returns:
        list[dict]: Posts in schedule order.
    """
    client = _get_client()

    result = (
        _scoped(client.table(TABLE_NAME).select("*"), user_id)
        .in_("status", CALENDAR_STATUSES)
        .gte("scheduled_date", _date_str(first_day))
        .lte("scheduled_date", _date_str(last_day))
        .order("scheduled_date", desc=False)
        .order("scheduled_time", desc=False)
        .execute()
    )
    return result.data or []


def get_drafts(user_id=None):
    """Drafts, most recently edited first."""
    client = _get_client()

    result = (
        _scoped(client.table(TABLE_NAME).select("*"), user_id)
        .eq("status", "draft")
        .order("updated_at", desc=True)
        .execute()
    )
    return result.data or []


def get_post(post_id):
    """Fetch a single post by id, or None if it does not exist."""
    client = _get_client()
    result = client.table(TABLE_NAME).select("*").eq("id", post_id).limit(1).execute()
    return result.data[0] if result.data else None


# ─── Write Operations ────────────────────────────────────────────────────────

def _insert(data):
    client = _get_client()
    try:
        result = client.table(TABLE_NAME).insert(data).execute()
    except Exception as e:
        logger.error(f"❌ Insert into {TABLE_NAME} failed: {e}")
        raise
    return result.data[0] if result.data else {}


def schedule_post(caption, platforms, scheduled_date, scheduled_time=None,
                  image_url=None, video_url=None, platform_accounts=None, user_id=None):
    """
    Insert a new scheduled post.

    Args:
        caption: Post text.
        platforms: Non-empty list of platform names (e.g. ["X", "LinkedIn"]).
        scheduled_date: date or "YYYY-MM-DD" string.
        scheduled_time: time or "HH:MM" string; None leaves the default to readers.
        image_url / video_url: Public media URL (at most one is usually set).
        platform_accounts: {platform: account username}.
        user_id: Owner of the post.

    Returns:
        dict: The inserted row data.
    """
    if not platforms:
        raise ValueError("At least one platform is required to schedule a post")
    if not scheduled_date:
        raise ValueError("scheduled_date is required to schedule a post")

    data = {
        "user_id": user_id,
        "caption": caption,
        "image_url": image_url,
        "video_url": video_url,
        "media_type": "video" if video_url else ("image" if image_url else None),
        "scheduled_date": _date_str(scheduled_date),
        "scheduled_time": _time_str(scheduled_time),
        "platforms": list(platforms),
        "platform_accounts": platform_accounts or {},
        "status": "scheduled",
    }

    row = _insert(data)
    logger.info(f"📋 Scheduled: {', '.join(platforms)} on {data['scheduled_date']} "
                f"{data['scheduled_time'] or '(default time)'}")
    return row


def save_draft(caption, platforms=None, scheduled_date=None, scheduled_time=None,
               image_url=None, video_url=None, user_id=None):
    """
    Insert a draft post. Date, time and platforms are all optional.

    Returns:
        dict: The inserted row data.
    """
    data = {
        "user_id": user_id,
        "caption": caption,
        "image_url": image_url,
        "video_url": video_url,
        "media_type": "video" if video_url else ("image" if image_url else None),
        "scheduled_date": _date_str(scheduled_date),
        "scheduled_time": _time_str(scheduled_time),
        "platforms": list(platforms or []),
        "status": "draft",
    }

    row = _insert(data)
    logger.info(f"📝 Draft saved: #{row.get('id', '?')}")
    return row


def update_post(post_id, **fields):
    """
    Update fields of a post and stamp updated_at.

    Date and time fields are normalized to "YYYY-MM-DD" / "HH:MM".
    """
    if "scheduled_date" in fields:
        fields["scheduled_date"] = _date_str(fields["scheduled_date"])
    if "scheduled_time" in fields:
        fields["scheduled_time"] = _time_str(fields["scheduled_time"])
    fields["updated_at"] = _now_iso()

    client = _get_client()
    try:
        result = client.table(TABLE_NAME).update(fields).eq("id", post_id).execute()
    except Exception as e:
        logger.error(f"❌ Update of #{post_id} failed: {e}")
        raise
    logger.info(f"✏️  Updated #{post_id}: {', '.join(sorted(fields))}")
    return result.data[0] if result.data else {}


def save_post_edits(post_id, caption, platforms, scheduled_date, scheduled_time=None,
                    image_url=None, status="scheduled"):
    """
    Save an edited post, either back into the schedule or as a draft.

    Scheduling needs the same fields schedule_post does (platforms and a
    date); drafts may leave them empty.

    Returns:
        dict: The updated row data.
    """
    if status == "scheduled":
        if not platforms:
            raise ValueError("At least one platform is required to schedule a post")
        if not scheduled_date:
            raise ValueError("scheduled_date is required to schedule a post")

    fields = {
        "caption": caption,
        "platforms": list(platforms or []),
        "scheduled_date": scheduled_date,
        "scheduled_time": scheduled_time,
        "status": status,
    }
    # Media is only touched when a new image is given
    if image_url:
        fields["image_url"] = image_url
        fields["media_type"] = "image"

    return update_post(post_id, **fields)


def mark_published(post_id):
    """Mark a scheduled post as published."""
    return update_post(post_id, status="published")


def delete_post(post_id):
    """Delete a post row."""
    client = _get_client()
    try:
        client.table(TABLE_NAME).delete().eq("id", post_id).execute()
    except Exception as e:
        logger.error(f"❌ Delete of #{post_id} failed: {e}")
        raise
    logger.info(f"🗑️  Deleted post #{post_id}")
