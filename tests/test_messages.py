"""Integration tests for message scoping, creation and partial updates."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from schoolconnect.config import get_settings
from schoolconnect.constants import DELETED_MESSAGE_PLACEHOLDER
from schoolconnect.database import SessionLocal
from schoolconnect.models import Message, User
from schoolconnect.services import ConversationContext, query_messages

ADMIN = "teacher.admin"


def _send(client, headers, **payload):
    response = client.post("/api/messages", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_non_admin_cannot_post_to_global_channel(client, signup):
    headers = signup("a")

    response = client.post("/api/messages", headers=headers, json={"text": "hi all"})

    assert response.status_code == 403
    assert "message" in response.json()
    with SessionLocal() as session:
        assert session.scalars(select(Message)).all() == []


def test_handle_containing_admin_marker_is_not_an_admin(client, signup):
    headers = signup("mallory.admin")

    response = client.post("/api/messages", headers=headers, json={"text": "announcement"})

    assert response.status_code == 403


def test_admin_posts_to_global_channel(client, signup):
    admin = signup(ADMIN)
    student = signup("b")

    created = _send(client, admin, text="Exam on Friday")
    assert created["status"] == "sent"
    assert created["recipient_username"] is None and created["group_id"] is None

    listing = client.get("/api/messages", headers=student, params={"context": "global"})
    assert listing.status_code == 200
    assert [item["text"] for item in listing.json()["messages"]] == ["Exam on Friday"]


def test_private_message_reaches_peer(client, signup):
    a = signup("a")
    b = signup("b")

    _send(client, a, text="hello", recipient="b")

    response = client.get("/api/messages", headers=b, params={"context": "private", "peer": "a"})
    assert response.status_code == 200
    messages = response.json()["messages"]
    assert len(messages) == 1
    assert messages[0]["sender_username"] == "a"
    assert messages[0]["recipient_username"] == "b"
    assert messages[0]["text"] == "hello"
    assert messages[0]["status"] == "sent"


def test_private_thread_excludes_third_parties(client, signup):
    a = signup("a")
    b = signup("b")
    c = signup("c")

    _send(client, a, text="to b", recipient="b")
    _send(client, c, text="to a", recipient="a")
    _send(client, b, text="back to a", recipient="a")

    response = client.get("/api/messages", headers=a, params={"peer": "b"})
    assert [item["text"] for item in response.json()["messages"]] == ["to b", "back to a"]

    outsider = client.get("/api/messages", headers=c, params={"peer": "b"})
    assert outsider.json()["messages"] == []


def test_private_message_to_unknown_handle_is_not_found(client, signup):
    a = signup("a")
    response = client.post("/api/messages", headers=a, json={"text": "anyone?", "recipient": "ghost"})
    assert response.status_code == 404


def test_global_and_addressed_contexts_never_mix(client, signup):
    admin = signup(ADMIN)
    b = signup("b")
    group = client.post("/api/groups", headers=admin, json={"name": "Math", "members": ["b"]}).json()

    _send(client, admin, text="global")
    _send(client, admin, text="private", recipient="b")
    _send(client, admin, text="group", group_id=group["id"])

    global_items = client.get("/api/messages", headers=b, params={"context": "global"}).json()["messages"]
    assert [item["text"] for item in global_items] == ["global"]
    assert all(item["recipient_username"] is None and item["group_id"] is None for item in global_items)

    private_items = client.get("/api/messages", headers=b, params={"context": "private", "peer": ADMIN}).json()["messages"]
    assert [item["text"] for item in private_items] == ["private"]

    group_items = client.get(
        "/api/messages", headers=b, params={"context": "group", "group_id": group["id"]}
    ).json()["messages"]
    assert [item["text"] for item in group_items] == ["group"]


def test_drafts_are_only_visible_to_their_author(client, signup):
    a = signup("a")
    b = signup("b")

    draft = _send(client, a, text="unfinished", recipient="b", status="draft")

    assert client.get("/api/messages", headers=b, params={"peer": "a"}).json()["messages"] == []
    own = client.get("/api/messages", headers=a, params={"peer": "b", "view": "drafts"}).json()["messages"]
    assert [item["id"] for item in own] == [draft["id"]]

    hidden = client.patch(f"/api/messages/{draft['id']}", headers=b, json={"starred": True})
    assert hidden.status_code == 404


def test_star_then_unstar_changes_only_starred(client, signup):
    a = signup("a")
    b = signup("b")
    original = _send(client, a, text="remember this", recipient="b")

    starred = client.patch(f"/api/messages/{original['id']}", headers=b, json={"starred": True})
    assert starred.status_code == 200
    assert starred.json()["starred"] is True

    unstarred = client.patch(f"/api/messages/{original['id']}", headers=b, json={"starred": False}).json()
    assert unstarred["starred"] is False
    for key in ("text", "status", "sender_username", "recipient_username", "group_id", "deleted_for", "created_at"):
        assert unstarred[key] == original[key]


def test_soft_delete_hides_only_for_that_viewer(client, signup):
    a = signup("a")
    b = signup("b")
    message = _send(client, a, text="see you", recipient="b")

    response = client.patch(f"/api/messages/{message['id']}", headers=a, json={"delete_for_me": True})
    assert response.status_code == 200
    assert response.json()["deleted_for"] == ["a"]

    a_all = client.get("/api/messages", headers=a, params={"peer": "b", "view": "all"}).json()["messages"]
    b_all = client.get("/api/messages", headers=b, params={"peer": "a", "view": "all"}).json()["messages"]
    a_trash = client.get("/api/messages", headers=a, params={"peer": "b", "view": "trash"}).json()["messages"]

    assert a_all == []
    assert [item["id"] for item in b_all] == [message["id"]]
    assert [item["id"] for item in a_trash] == [message["id"]]


def test_soft_delete_is_idempotent(client, signup):
    a = signup("a")
    signup("b")
    message = _send(client, a, text="twice", recipient="b")

    first = client.patch(f"/api/messages/{message['id']}", headers=a, json={"delete_for_me": True}).json()
    second = client.patch(f"/api/messages/{message['id']}", headers=a, json={"delete_for_me": True}).json()

    assert first["deleted_for"] == second["deleted_for"] == ["a"]


def test_soft_delete_and_star_in_one_request(client, signup):
    a = signup("a")
    signup("b")
    message = _send(client, a, text="both", recipient="b")

    response = client.patch(
        f"/api/messages/{message['id']}", headers=a, json={"delete_for_me": True, "starred": True}
    ).json()

    assert response["deleted_for"] == ["a"]
    assert response["starred"] is True


def test_deleted_for_everyone_is_redacted_for_all_viewers(client, signup):
    a = signup("a")
    b = signup("b")
    message = _send(client, a, text="oops wrong chat", recipient="b")

    patched = client.patch(f"/api/messages/{message['id']}", headers=a, json={"status": "deleted_everyone"}).json()
    assert patched["text"] == DELETED_MESSAGE_PLACEHOLDER
    assert patched["is_redacted"] is True

    for headers, peer in ((a, "b"), (b, "a")):
        items = client.get("/api/messages", headers=headers, params={"peer": peer}).json()["messages"]
        assert items[0]["text"] == DELETED_MESSAGE_PLACEHOLDER

    with SessionLocal() as session:
        assert session.get(Message, message["id"]).text == "oops wrong chat"


def test_status_changes_are_permissive_by_default(client, signup):
    a = signup("a")
    signup("b")
    message = _send(client, a, text="back again", recipient="b")

    client.patch(f"/api/messages/{message['id']}", headers=a, json={"status": "deleted_everyone"})
    restored = client.patch(f"/api/messages/{message['id']}", headers=a, json={"status": "sent"})

    assert restored.status_code == 200
    assert restored.json()["text"] == "back again"


def test_strict_transitions_reject_resurrection(client, signup, monkeypatch):
    a = signup("a")
    signup("b")
    message = _send(client, a, text="gone", recipient="b")
    monkeypatch.setattr(get_settings(), "strict_status_transitions", True)

    client.patch(f"/api/messages/{message['id']}", headers=a, json={"status": "deleted_everyone"})
    restored = client.patch(f"/api/messages/{message['id']}", headers=a, json={"status": "sent"})

    assert restored.status_code == 409
    assert "message" in restored.json()


def test_patch_missing_message_is_not_found(client, signup):
    a = signup("a")
    response = client.patch("/api/messages/9999", headers=a, json={"starred": True})
    assert response.status_code == 404
    assert response.json()["message"] == "Message not found"


def test_scoped_results_are_chronological():
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    with SessionLocal() as session:
        session.add_all(
            [
                User(username="x", email="x@schoolconnect.app", hashed_password="!"),
                User(username="y", email="y@schoolconnect.app", hashed_password="!"),
            ]
        )
        session.flush()
        session.add_all(
            [
                Message(sender_username="x", recipient_username="y", text="third", created_at=base + timedelta(minutes=2)),
                Message(sender_username="y", recipient_username="x", text="first", created_at=base),
                Message(sender_username="x", recipient_username="y", text="second-a", created_at=base + timedelta(minutes=1)),
                Message(sender_username="y", recipient_username="x", text="second-b", created_at=base + timedelta(minutes=1)),
            ]
        )
        session.commit()

        result = query_messages(session, viewer="x", context=ConversationContext.private("y"))

    assert [item.text for item in result] == ["first", "second-a", "second-b", "third"]
    stamps = [item.created_at for item in result]
    assert stamps == sorted(stamps)


@pytest.mark.parametrize(
    "params",
    [
        {"context": "private"},
        {"context": "group"},
        {"context": "broadcast"},
        {"peer": "b", "group_id": 1},
    ],
)
def test_invalid_context_parameters_are_rejected(client, signup, params):
    a = signup("a")
    response = client.get("/api/messages", headers=a, params=params)
    assert response.status_code == 400
    assert response.json()["message"]


def test_blank_recipient_means_no_recipient(client, signup):
    admin = signup(ADMIN)
    student = signup("b")

    rejected = client.post("/api/messages", headers=student, json={"text": "hi", "recipient": "   "})
    assert rejected.status_code == 403

    created = _send(client, admin, text="hi", recipient="   ")
    assert created["recipient_username"] is None
    assert created["group_id"] is None
