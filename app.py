"""
PostSync — Streamlit Dashboard
Sidebar pages: Dashboard | Create Post | Calendar | Scheduled Posts | Drafts

Run:  streamlit run app.py
"""

import streamlit as st
import os
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path
from dotenv import load_dotenv

# ─── Bootstrap ────────────────────────────────────────────────────────────────
load_dotenv(Path(__file__).parent / ".env")

PROJECT_ROOT = str(Path(__file__).parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ─── Page Config ──────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="PostSync",
    page_icon="📅",
    layout="wide",
)

# ─── Bridge Streamlit Cloud Secrets → os.environ ─────────────────────────────
try:
    for key, value in st.secrets.items():
        if isinstance(value, str) and key not in os.environ:
            os.environ[key] = value
except Exception:
    pass

# Module settings read os.environ at import time
from postsync.scheduler import (
    CalendarState,
    PLATFORMS,
    UPCOMING_LIMIT,
    caption_preview,
    count_by_status,
    due_instant,
    elapsed_label,
    format_due_display,
    is_due,
    relative_label,
    select_upcoming,
)
from postsync.scheduler.schedule_window import TIMEZONE

USER_ID = os.environ.get("POSTSYNC_USER_ID") or None


# ─── Custom CSS ───────────────────────────────────────────────────────────────
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800&display=swap');

    * { font-family: 'Inter', sans-serif; }

    .hero-title {
        background: linear-gradient(135deg, #3b82f6 0%, #6366f1 50%, #a855f7 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        font-size: 2.6rem;
        font-weight: 800;
        margin-bottom: 0;
    }
    .hero-sub {
        color: #94a3b8;
        font-size: 1rem;
        margin-top: -8px;
        margin-bottom: 20px;
    }
    .section-header {
        display: flex;
        align-items: center;
        gap: 10px;
        padding: 12px 0 8px 0;
    }
    .section-header .icon { font-size: 1.5rem; }
    .section-header .label { font-size: 1.2rem; font-weight: 700; color: #e2e8f0; }
    .section-header .desc { font-size: 0.85rem; color: #64748b; }

    .stats-row { display: flex; gap: 1rem; margin: 0.5rem 0 1rem 0; }
    .stat {
        padding: 0.75rem 1.25rem; border-radius: 10px;
        background: rgba(255,255,255,0.03); border: 1px solid rgba(255,255,255,0.06);
        text-align: center; font-size: 0.8rem; color: #94a3b8;
    }
    .stat .num { font-size: 1.6rem; font-weight: 700; display: block; color: #e2e8f0; }
    .stat .num.scheduled { color: #3b82f6; }
    .stat .num.draft { color: #a855f7; }
    .stat .num.published { color: #10b981; }

    .post-card {
        background: rgba(30,30,46,0.5);
        border: 1px solid rgba(255,255,255,0.06);
        border-radius: 10px;
        padding: 12px 16px;
        margin: 4px 0;
    }
    .post-card .p-platforms { color: #94a3b8; font-size: 0.75rem; text-transform: uppercase; }
    .post-card .p-caption { color: #e2e8f0; font-size: 0.9rem; margin: 4px 0; white-space: pre-wrap; }
    .post-card .p-meta { color: #64748b; font-size: 0.78rem; }
    .post-card.overdue { border-left: 3px solid #f59e0b; }
    .countdown { color: #818cf8; font-weight: 700; }

    .day-cell {
        min-height: 90px;
        border: 1px solid rgba(255,255,255,0.08);
        border-radius: 8px;
        padding: 6px 8px;
        font-size: 0.75rem;
        color: #cbd5e1;
    }
    .day-cell.today { border: 2px solid #3b82f6; }
    .day-cell.blank { background: rgba(255,255,255,0.02); border-style: dashed; }
    .day-cell .num { font-weight: 700; color: #e2e8f0; }
    .day-cell .chip {
        display: block; margin-top: 3px; padding: 1px 6px; border-radius: 6px;
        background: rgba(59,130,246,0.15); color: #93c5fd;
        overflow: hidden; white-space: nowrap; text-overflow: ellipsis;
    }
    .day-cell .chip.published { background: rgba(16,185,129,0.15); color: #6ee7b7; }
    .weekday { text-align: center; color: #64748b; font-size: 0.75rem; font-weight: 600; }

    .divider {
        height: 1px;
        background: linear-gradient(90deg, transparent, rgba(100,116,139,0.3), transparent);
        margin: 24px 0;
    }
</style>
""", unsafe_allow_html=True)


# ─── Session State Defaults ──────────────────────────────────────────────────

defaults = {
    "calendar_state": None,
    "selected_day": None,
    "editing_post": None,     # post row being edited on the Create Post page
}
for key, val in defaults.items():
    if key not in st.session_state:
        st.session_state[key] = val

if st.session_state.calendar_state is None:
    st.session_state.calendar_state = CalendarState()


# ─── Helpers ──────────────────────────────────────────────────────────────────

PLATFORM_ICONS = {
    "X": "𝕏",
    "LinkedIn": "💼",
    "Facebook": "📘",
    "Instagram": "📸",
    "YouTube": "▶️",
    "TikTok": "🎵",
}


def platform_badges(post):
    """Icons + names for a post's platforms."""
    return " · ".join(
        f"{PLATFORM_ICONS.get(p, '📝')} {p}" for p in (post.get("platforms") or [])
    )


def due_display(post):
    due = due_instant(post)
    return format_due_display(due) if due else "Not scheduled"


def section_header(icon, label, desc):
    st.markdown(f"""
    <div class="section-header">
        <span class="icon">{icon}</span>
        <span class="label">{label}</span>
        <span class="desc">{desc}</span>
    </div>
    """, unsafe_allow_html=True)


# ─── Widget Callbacks ────────────────────────────────────────────────────────
# Callbacks run before the next script pass, so they may set widget keys.

def start_edit(post):
    """Open a post in the Create Post form."""
    st.session_state.editing_post = post
    st.session_state.page = "✍️ Create Post"


def cancel_edit():
    st.session_state.editing_post = None


def toggle_filter(name):
    st.session_state.calendar_state.toggle_platform(name)


def clear_filters():
    st.session_state.calendar_state.clear_platforms()
    for name in PLATFORMS:
        st.session_state[f"filter_{name}"] = False


# ─── Header ──────────────────────────────────────────────────────────────────

st.markdown('<p class="hero-title">PostSync</p>', unsafe_allow_html=True)
st.markdown('<p class="hero-sub">Plan once, publish everywhere.</p>', unsafe_allow_html=True)
st.markdown('<div class="divider"></div>', unsafe_allow_html=True)


# ─── Sidebar Navigation ─────────────────────────────────────────────────────

PAGES = [
    "🏠 Dashboard",
    "✍️ Create Post",
    "🗓️ Calendar",
    "⏰ Scheduled Posts",
    "📝 Drafts",
]

with st.sidebar:
    st.markdown("### 📅 Navigation")
    page = st.radio(
        "Go to",
        PAGES,
        key="page",
        label_visibility="collapsed",
    )
    st.caption(f"Timezone: {TIMEZONE.zone}")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAGE: DASHBOARD
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

if page == "🏠 Dashboard":
    section_header("🏠", "Dashboard", "What's happening with your social media today")

    try:
        from postsync.scheduler.posts_db import get_posts

        all_posts = get_posts(user_id=USER_ID)
        stats = count_by_status(all_posts)

        st.markdown(f"""
        <div class="stats-row">
            <div class="stat"><span class="num scheduled">{stats['scheduled']}</span>Scheduled</div>
            <div class="stat"><span class="num">{stats['total']}</span>Total Posts</div>
            <div class="stat"><span class="num draft">{stats['draft']}</span>Drafts</div>
            <div class="stat"><span class="num published">{stats['published']}</span>Published</div>
        </div>
        """, unsafe_allow_html=True)

        st.markdown("#### ⏳ Upcoming Schedule")
        upcoming = select_upcoming(all_posts, limit=UPCOMING_LIMIT)
        if not upcoming:
            st.info("📭 Nothing scheduled yet. Create your first post from the sidebar!")
        for post in upcoming:
            st.markdown(f"""
            <div class="post-card">
                <div class="p-platforms">{platform_badges(post)}</div>
                <div class="p-caption">{caption_preview(post, 120)}</div>
                <div class="p-meta">📅 {due_display(post)} &nbsp;•&nbsp;
                    <span class="countdown">⏳ {relative_label(post)}</span></div>
            </div>
            """, unsafe_allow_html=True)

    except Exception as e:
        st.warning(f"⚠️ Dashboard unavailable: {e}")
        st.caption("Make sure SUPABASE_URL / SUPABASE_KEY are set and the `posts` table exists.")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAGE: CREATE POST
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

elif page == "✍️ Create Post":
    section_header("✍️", "Create Post", "Write a caption → Pick platforms → Schedule or save as draft")

    now_local = datetime.now(TIMEZONE)
    editing = st.session_state.editing_post

    default_caption, default_platforms, default_image = "", [], ""
    default_date = st.session_state.selected_day or now_local.date()
    default_time = (now_local + timedelta(hours=1)).time().replace(minute=0, second=0, microsecond=0)

    if editing:
        due = due_instant(editing)
        default_caption = editing.get("caption") or ""
        default_platforms = [p for p in (editing.get("platforms") or []) if p in PLATFORMS]
        default_image = editing.get("image_url") or ""
        if due:
            default_date, default_time = due.date(), due.time()

        e1, e2 = st.columns([4, 1])
        with e1:
            st.info(f"✏️ Editing {editing.get('status', 'post')} post: {caption_preview(editing, 60)}")
        with e2:
            st.button("✖ Cancel edit", key="cancel_edit", on_click=cancel_edit, use_container_width=True)

    form_key = f"edit_post_{editing['id']}" if editing else "create_post"
    with st.form(form_key, clear_on_submit=True):
        caption = st.text_area("Caption", value=default_caption, height=160,
                               placeholder="What do you want to share?")
        platforms = st.multiselect("Platforms", PLATFORMS, default=default_platforms)
        image_url = st.text_input("Image URL (optional)", value=default_image)

        c1, c2 = st.columns(2)
        with c1:
            post_date = st.date_input("Date", value=default_date)
        with c2:
            post_time = st.time_input("Time", value=default_time, step=timedelta(minutes=15))

        b1, b2 = st.columns(2)
        with b1:
            schedule_btn = st.form_submit_button(
                "📅 Save & Schedule" if editing else "📅 Schedule",
                type="primary", use_container_width=True,
            )
        with b2:
            draft_btn = st.form_submit_button(
                "📝 Save as Draft" if editing else "📝 Save Draft",
                use_container_width=True,
            )

    if editing and (schedule_btn or draft_btn):
        try:
            from postsync.scheduler.posts_db import save_post_edits

            if schedule_btn and not caption.strip():
                st.error("Write a caption before scheduling.")
            else:
                row = save_post_edits(
                    editing["id"],
                    caption=caption,
                    platforms=platforms,
                    scheduled_date=post_date,
                    scheduled_time=post_time,
                    image_url=image_url or None,
                    status="scheduled" if schedule_btn else "draft",
                )
                st.session_state.editing_post = None
                if schedule_btn:
                    st.success(f"✅ Rescheduled {relative_label(row)} ({due_display(row)})")
                else:
                    st.success("✅ Draft updated")
        except ValueError as e:
            st.error(f"❌ {e}")
        except Exception as e:
            st.error(f"Save error: {e}")

    elif schedule_btn or draft_btn:
        try:
            from postsync.scheduler.posts_db import schedule_post, save_draft

            if schedule_btn:
                if not caption.strip():
                    st.error("Write a caption before scheduling.")
                else:
                    row = schedule_post(
                        caption=caption,
                        platforms=platforms,
                        scheduled_date=post_date,
                        scheduled_time=post_time,
                        image_url=image_url or None,
                        user_id=USER_ID,
                    )
                    st.success(f"✅ Scheduled {relative_label(row)} ({due_display(row)})")
            else:
                save_draft(
                    caption=caption,
                    platforms=platforms,
                    scheduled_date=post_date,
                    scheduled_time=post_time,
                    image_url=image_url or None,
                    user_id=USER_ID,
                )
                st.success("✅ Draft saved")
            st.session_state.selected_day = None
        except ValueError as e:
            st.error(f"❌ {e}")
        except Exception as e:
            st.error(f"Save error: {e}")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAGE: CALENDAR
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

elif page == "🗓️ Calendar":
    section_header("🗓️", "Calendar", "Month view of scheduled and published posts")

    cal = st.session_state.calendar_state

    # ── Month navigation ─────────────────────────────────────────────────
    n1, n2, n3, n4 = st.columns([1, 3, 1, 1])
    with n1:
        if st.button("◀ Prev", use_container_width=True):
            cal.previous_month(); st.rerun()
    with n2:
        st.markdown(f"### {cal.month_label()}")
    with n3:
        if st.button("Today", use_container_width=True):
            cal.go_to_today(); st.rerun()
    with n4:
        if st.button("Next ▶", use_container_width=True):
            cal.next_month(); st.rerun()

    # ── Platform filter ──────────────────────────────────────────────────
    with st.expander("🔎 Filter by Platform", expanded=bool(cal.selected_platforms)):
        f_cols = st.columns(len(PLATFORMS))
        for f_col, name in zip(f_cols, PLATFORMS):
            filter_key = f"filter_{name}"
            if filter_key not in st.session_state:
                st.session_state[filter_key] = name in cal.selected_platforms
            with f_col:
                st.checkbox(
                    f"{PLATFORM_ICONS.get(name, '')} {name}",
                    key=filter_key,
                    on_change=toggle_filter,
                    args=(name,),
                )
        if cal.selected_platforms:
            st.button("Clear filters", key="clear_filters", on_click=clear_filters)

    try:
        from postsync.scheduler.posts_db import get_posts_for_month

        first_day, last_day = cal.month_bounds()
        month_posts = get_posts_for_month(first_day, last_day, user_id=USER_ID)
        today = datetime.now(TIMEZONE).date()

        # ── Grid ─────────────────────────────────────────────────────────
        header_cols = st.columns(7)
        for h_col, name in zip(header_cols, ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]):
            h_col.markdown(f'<div class="weekday">{name}</div>', unsafe_allow_html=True)

        for week in cal.weeks(month_posts):
            cols = st.columns(7)
            for col, bucket in zip(cols, week):
                with col:
                    if bucket.day is None:
                        st.markdown('<div class="day-cell blank"></div>', unsafe_allow_html=True)
                        continue

                    chips = "".join(
                        f'<span class="chip {p.get("status", "")}">'
                        f'{(p.get("scheduled_time") or "")[:5]} {caption_preview(p, 24)}</span>'
                        for p in bucket.posts[:3]
                    )
                    more = f'<span class="chip">+{len(bucket.posts) - 3} more</span>' if len(bucket.posts) > 3 else ""
                    css = "day-cell today" if bucket.day == today else "day-cell"
                    st.markdown(
                        f'<div class="{css}"><span class="num">{bucket.day.day}</span>{chips}{more}</div>',
                        unsafe_allow_html=True,
                    )
                    if st.button("View", key=f"day_{bucket.day.isoformat()}", use_container_width=True):
                        st.session_state.selected_day = bucket.day
                        st.rerun()

        # ── Selected day detail ──────────────────────────────────────────
        selected = st.session_state.selected_day
        if selected and (selected.year, selected.month) == (cal.month.year, cal.month.month):
            st.markdown("---")
            st.markdown(f"#### 📌 {selected.strftime('%A, %B %d, %Y')}")
            day_bucket = next(b for b in cal.buckets(month_posts) if b.day == selected)
            if not day_bucket.posts:
                st.info("No posts on this day. Pick ✍️ Create Post to add one — the date is pre-filled.")
            for post in day_bucket.posts:
                st.markdown(f"""
                <div class="post-card">
                    <div class="p-platforms">{platform_badges(post)} &nbsp;•&nbsp; {post.get("status", "")}</div>
                    <div class="p-caption">{caption_preview(post)}</div>
                    <div class="p-meta">📅 {due_display(post)}</div>
                </div>
                """, unsafe_allow_html=True)

    except Exception as e:
        st.warning(f"⚠️ Calendar unavailable: {e}")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAGE: SCHEDULED POSTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

elif page == "⏰ Scheduled Posts":
    section_header("⏰", "Scheduled Posts", "Manage your upcoming social media posts")

    try:
        from postsync.scheduler.posts_db import (
            get_scheduled_posts, delete_post, mark_published,
        )

        scheduled = get_scheduled_posts(user_id=USER_ID)
        now = datetime.now(TIMEZONE)
        upcoming = select_upcoming(scheduled, now=now, limit=None)
        overdue = [p for p in scheduled if is_due(p, now)]

        if st.button("🔄 Refresh"):
            st.rerun()

        if not upcoming:
            st.info("📭 No upcoming posts. Schedule one from ✍️ Create Post.")

        for post in upcoming:
            st.markdown(f"""
            <div class="post-card">
                <div class="p-platforms">{platform_badges(post)}</div>
                <div class="p-caption">{caption_preview(post)}</div>
                <div class="p-meta">📅 {due_display(post)} &nbsp;•&nbsp;
                    <span class="countdown">⏳ {relative_label(post, now)}</span></div>
            </div>
            """, unsafe_allow_html=True)

            c1, c2, _ = st.columns([1, 1, 4])
            with c1:
                st.button("✏️ Edit", key=f"edit_{post['id']}", on_click=start_edit, args=(post,))
            with c2:
                if st.button("🗑️ Delete", key=f"del_{post['id']}"):
                    try:
                        delete_post(post["id"])
                        st.success("Deleted"); time.sleep(0.5); st.rerun()
                    except Exception as e:
                        st.error(f"Failed: {e}")

        if overdue:
            with st.expander(f"⚠️ Overdue ({len(overdue)}) — past their time but not published", expanded=False):
                for post in overdue:
                    st.markdown(f"""
                    <div class="post-card overdue">
                        <div class="p-platforms">{platform_badges(post)}</div>
                        <div class="p-caption">{caption_preview(post, 100)}</div>
                        <div class="p-meta">📅 {due_display(post)}</div>
                    </div>
                    """, unsafe_allow_html=True)

                    o1, o2, o3, _ = st.columns([1, 1, 1, 3])
                    with o1:
                        if st.button("✅ Published", key=f"pub_{post['id']}", type="primary"):
                            try:
                                mark_published(post["id"])
                                st.success("Marked as published"); time.sleep(0.5); st.rerun()
                            except Exception as e:
                                st.error(f"Failed: {e}")
                    with o2:
                        st.button("✏️ Reschedule", key=f"oedit_{post['id']}", on_click=start_edit, args=(post,))
                    with o3:
                        if st.button("🗑️", key=f"odel_{post['id']}"):
                            try:
                                delete_post(post["id"])
                                st.success("Deleted"); time.sleep(0.5); st.rerun()
                            except Exception as e:
                                st.error(f"Failed: {e}")

    except Exception as e:
        st.warning(f"⚠️ Scheduled posts unavailable: {e}")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAGE: DRAFTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

elif page == "📝 Drafts":
    section_header("📝", "Drafts", "Unfinished posts — pick up where you left off")

    try:
        from postsync.scheduler.posts_db import get_drafts, delete_post, update_post

        drafts = get_drafts(user_id=USER_ID)
        if not drafts:
            st.info("📭 No drafts yet.")

        for draft in drafts:
            edited = elapsed_label(draft.get("updated_at") or draft.get("created_at"))
            planned = due_display(draft) if draft.get("scheduled_date") else "No date yet"
            st.markdown(f"""
            <div class="post-card">
                <div class="p-platforms">{platform_badges(draft) or "No platforms yet"}</div>
                <div class="p-caption">{caption_preview(draft)}</div>
                <div class="p-meta">📅 {planned} &nbsp;•&nbsp; ✏️ Last updated {edited}</div>
            </div>
            """, unsafe_allow_html=True)

            d0, d1, d2, _ = st.columns([1, 1, 1, 3])
            with d0:
                st.button("✏️ Edit", key=f"dedit_{draft['id']}", on_click=start_edit, args=(draft,))
            with d1:
                can_schedule = bool(draft.get("scheduled_date") and draft.get("platforms"))
                if st.button("📅 Schedule", key=f"dsched_{draft['id']}", disabled=not can_schedule,
                             help=None if can_schedule else "Needs a date and at least one platform"):
                    try:
                        update_post(draft["id"], status="scheduled")
                        st.success("✅ Scheduled"); time.sleep(0.5); st.rerun()
                    except Exception as e:
                        st.error(f"Failed: {e}")
            with d2:
                if st.button("🗑️", key=f"ddel_{draft['id']}"):
                    try:
                        delete_post(draft["id"])
                        st.success("Deleted"); time.sleep(0.5); st.rerun()
                    except Exception as e:
                        st.error(f"Failed: {e}")

    except Exception as e:
        st.warning(f"⚠️ Drafts unavailable: {e}")


# ─── Footer ──────────────────────────────────────────────────────────────────
st.markdown('<div class="divider"></div>', unsafe_allow_html=True)
st.markdown(
    '<p style="text-align: center; color: #475569; font-size: 0.8rem;">'
    'PostSync — Create × Schedule × Publish'
    '</p>',
    unsafe_allow_html=True,
)
