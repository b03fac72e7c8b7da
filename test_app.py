"""
Dashboard tests — page flows driven through Streamlit's AppTest harness.
Run:  pytest test_app.py
"""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from postsync.scheduler import posts_db

APP_PATH = str(Path(__file__).parent / "app.py")

DRAFT = {
    "id": 7,
    "status": "draft",
    "caption": "Launch day",
    "platforms": ["X", "LinkedIn"],
    "scheduled_date": "2030-01-02",
    "scheduled_time": "10:00",
    "updated_at": "2029-12-30T08:00:00+00:00",
}


@pytest.fixture
def store(monkeypatch):
    """Replace the Supabase-backed calls the pages make; records saves."""
    saved = []

    def save_post_edits(post_id, **kwargs):
        saved.append((post_id, kwargs))
        return {"id": post_id, **kwargs}

    monkeypatch.setattr(posts_db, "get_posts", lambda user_id=None, status=None: [])
    monkeypatch.setattr(posts_db, "get_posts_for_month", lambda first, last, user_id=None: [])
    monkeypatch.setattr(posts_db, "get_drafts", lambda user_id=None: [dict(DRAFT)])
    monkeypatch.setattr(posts_db, "save_post_edits", save_post_edits)
    return saved


def _open(page):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    at.radio(key="page").set_value(page).run()
    return at


def _button(at, label):
    return next(b for b in at.button if b.label == label)


# ─── Calendar filter ─────────────────────────────────────────────────────────

def test_calendar_filter_checkbox_updates_state(store):
    at = _open("🗓️ Calendar")
    at.checkbox(key="filter_X").check().run()

    assert at.session_state["calendar_state"].selected_platforms == ["X"]
    assert at.checkbox(key="filter_X").value is True


def test_calendar_clear_filters_unchecks_boxes(store):
    at = _open("🗓️ Calendar")
    at.checkbox(key="filter_X").check().run()
    at.checkbox(key="filter_Instagram").check().run()
    assert at.session_state["calendar_state"].selected_platforms == ["X", "Instagram"]

    at.button(key="clear_filters").click().run()

    assert at.session_state["calendar_state"].selected_platforms == []
    assert at.checkbox(key="filter_X").value is False
    assert at.checkbox(key="filter_Instagram").value is False
    assert not at.exception


# ─── Editing ─────────────────────────────────────────────────────────────────

def test_edit_draft_prefills_create_form(store):
    at = _open("📝 Drafts")
    at.button(key="dedit_7").click().run()

    assert at.radio(key="page").value == "✍️ Create Post"
    assert at.session_state["editing_post"]["id"] == 7
    assert at.text_area[0].value == "Launch day"
    assert at.multiselect[0].value == ["X", "LinkedIn"]
    assert str(at.date_input[0].value) == "2030-01-02"


def test_edit_draft_saves_through_update(store):
    at = _open("📝 Drafts")
    at.button(key="dedit_7").click().run()

    at.text_area[0].input("Launch day, take two")
    _button(at, "📝 Save as Draft").click().run()

    assert len(store) == 1
    post_id, fields = store[0]
    assert post_id == 7
    assert fields["caption"] == "Launch day, take two"
    assert fields["platforms"] == ["X", "LinkedIn"]
    assert fields["status"] == "draft"
    assert at.session_state["editing_post"] is None
    assert not at.exception


def test_cancel_edit_returns_to_blank_form(store):
    at = _open("📝 Drafts")
    at.button(key="dedit_7").click().run()
    at.button(key="cancel_edit").click().run()

    assert at.session_state["editing_post"] is None
    assert at.text_area[0].value == ""
    assert store == []
