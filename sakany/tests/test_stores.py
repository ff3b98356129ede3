from unittest.mock import patch

from sakany.favorites.store import (
    add_favorite,
    clear_favorites,
    is_favorite,
    list_favorites,
    remove_favorite,
    remove_property_favorites,
)
from sakany.listings.store import (
    clear_properties,
    create_property,
    delete_user_properties,
    get_property,
    list_user_properties,
)
from sakany.messaging.store import (
    clear_messages,
    create_message,
    get_conversations,
    get_messages,
    mark_messages_as_read,
)
from sakany.reports.store import (
    add_feedback,
    clear_reports,
    create_report,
    get_property_feedback,
    list_reports,
    mark_notification_sent,
    review_report,
    unread_feedback,
)

PROP = {"id": "p1", "title": "Flat", "user_id": "owner", "user_email": "owner@example.com"}
REPORTER = {"id": "u1", "email": "u1@example.com"}


# ── Favorites ────────────────────────────────────────────────────────────


def test_add_favorite_is_idempotent():
    clear_favorites()
    first = add_favorite("u1", "p1")
    again = add_favorite("u1", "p1")
    assert first == again
    assert len(list_favorites("u1")) == 1
    assert is_favorite("u1", "p1")


def test_favorites_newest_first_and_removal():
    clear_favorites()
    add_favorite("u1", "p1")
    add_favorite("u1", "p2")
    add_favorite("u2", "p1")
    assert [f["property_id"] for f in list_favorites("u1")] == ["p2", "p1"]

    assert remove_favorite("u1", "p2")
    assert not remove_favorite("u1", "p2")
    assert remove_property_favorites("p1") == 2
    assert list_favorites("u1") == [] and list_favorites("u2") == []


# ── Messaging ────────────────────────────────────────────────────────────


def test_one_conversation_per_pair_of_users():
    clear_messages()
    m1 = create_message("a", "b", "hi")
    m2 = create_message("b", "a", "hello")
    create_message("a", "c", "yo")
    assert m1["conversation_id"] == m2["conversation_id"]
    assert len(get_conversations("a")) == 2
    assert len(get_conversations("b")) == 1


def test_conversations_sorted_by_latest_activity_with_unread_counts():
    clear_messages()
    with patch("sakany.messaging.store.time.time", side_effect=[100.0, 200.0, 300.0]):
        create_message("a", "b", "one")
        create_message("c", "a", "two")
        create_message("b", "a", "three")

    convs = get_conversations("a")
    assert [c["other_user_id"] for c in convs] == ["b", "c"]
    assert convs[0]["unread_count"] == 1
    assert convs[1]["unread_count"] == 1
    assert get_conversations("b")[0]["unread_count"] == 1


def test_messages_oldest_first_and_mark_read():
    clear_messages()
    m1 = create_message("a", "b", "first")
    m2 = create_message("a", "b", "second")
    create_message("b", "a", "reply")
    assert [m["content"] for m in get_messages(m1["conversation_id"])] == ["first", "second", "reply"]

    assert mark_messages_as_read("a", "b") == 2
    assert mark_messages_as_read("a", "b") == 0
    msgs = {m["id"]: m for m in get_messages(m1["conversation_id"])}
    assert msgs[m1["id"]]["is_read"] and msgs[m2["id"]]["is_read"]
    assert get_conversations("b")[0]["unread_count"] == 0
    assert get_conversations("a")[0]["unread_count"] == 1


# ── Reports ──────────────────────────────────────────────────────────────


def test_report_lifecycle():
    clear_reports()
    report = create_report(PROP, REPORTER, "Wrong price", "Listed twice")
    assert report["status"] == "pending"
    assert report["owner_id"] == "owner"
    assert list_reports("pending") == [report]

    review_report(report["id"], "resolved", "Fixed", "admin")
    assert list_reports("pending") == []
    assert list_reports("resolved")[0]["admin_notes"] == "Fixed"
    assert review_report("missing", "resolved", "", "admin") is None

    sent = mark_notification_sent(report["id"])
    assert sent["notification_sent"] is True
    assert sent["notification_date"] is not None


def test_feedback_is_returned_as_it_was_before_marking_read():
    clear_reports()
    report = create_report(PROP, REPORTER, "Spam")
    add_feedback(report, "Please update the photos")
    assert len(unread_feedback(["p1"])) == 1

    first = get_property_feedback("p1", mark_as_read=True)
    assert first[0]["read"] is False
    assert unread_feedback(["p1"]) == []
    assert get_property_feedback("p1")[0]["read"] is True
    assert unread_feedback(["other"]) == []


# ── Listings ─────────────────────────────────────────────────────────────


def test_delete_user_properties_leaves_other_owners_alone():
    clear_properties()
    owner = {"id": "owner", "email": "owner@example.com"}
    other = {"id": "other", "email": "other@example.com"}
    data = {"title": "Flat", "property_type": "apartment", "price": 1, "area": 10, "location": "Giza"}
    first = create_property(owner, data)
    second = create_property(owner, data)
    kept = create_property(other, data)

    removed = delete_user_properties("owner")

    assert sorted(removed) == sorted([first["id"], second["id"]])
    assert list_user_properties("owner") == []
    assert get_property(kept["id"]) is kept
    assert delete_user_properties("owner") == []
    clear_properties()
