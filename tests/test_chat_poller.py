"""Tests for the polling client, driven against the in-process app."""
from __future__ import annotations

import threading

import httpx
import pytest

from schoolconnect.clients import ChatClientError, ChatPoller, ServerUnreachable
from schoolconnect.constants import SERVER_UNREACHABLE_NOTICE

PASSWORD = "classroom-pass"


@pytest.fixture
def poller(client):
    return ChatPoller(client, context="private", peer="b")


def test_login_poll_and_send(client, poller):
    poller.register("a", PASSWORD)
    poller.register("b", PASSWORD)
    session = poller.login("a", PASSWORD)
    assert session.username == "a"

    first = poller.poll()
    assert first is not None
    assert first.messages == []
    assert first.events == []
    assert poller.message_cursor == 0

    sent = poller.send("  hello b  ")
    assert sent["text"] == "hello b"
    assert sent["recipient_username"] == "b"
    assert poller.send("   ") is None

    second = poller.poll()
    assert [item["text"] for item in second.messages] == ["hello b"]
    assert second.events == []


def test_events_arrive_for_the_recipient(client):
    sender = ChatPoller(client, context="private", peer="b")
    receiver = ChatPoller(client, context="private", peer="a")
    sender.register("a", PASSWORD)
    sender.register("b", PASSWORD)
    sender.login("a", PASSWORD)
    receiver.login("b", PASSWORD)

    receiver.poll()
    sender.send("ping")
    result = receiver.poll()

    assert [event["category"] for event in result.events] == ["private"]
    assert [item["text"] for item in result.messages] == ["ping"]


def test_logout_clears_client_state(client, poller):
    poller.register("a", PASSWORD)
    poller.register("b", PASSWORD)
    poller.login("a", PASSWORD)
    poller.poll()

    poller.logout()

    assert poller.session is None
    assert poller.message_cursor is None
    with pytest.raises(ChatClientError) as excinfo:
        poller.poll()
    assert excinfo.value.status_code == 401


def test_server_errors_surface_their_message(client, poller):
    with pytest.raises(ChatClientError) as excinfo:
        poller.login("nobody", PASSWORD)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Wrong username or password"


def test_stale_poll_is_discarded(client, poller):
    poller.register("a", PASSWORD)
    poller.register("b", PASSWORD)
    poller.login("a", PASSWORD)

    original_request = client.request
    inner_results = []
    overlapped = threading.Event()

    def overlapping_request(method, url, **kwargs):
        if url == "/api/messages" and method == "GET" and not overlapped.is_set():
            overlapped.set()
            inner_results.append(poller.poll())
        return original_request(method, url, **kwargs)

    client.request = overlapping_request
    try:
        outer = poller.poll()
    finally:
        client.request = original_request

    assert inner_results[0] is not None
    assert inner_results[0].sequence == 2
    assert outer is None


def test_unreachable_server_raises_notice():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    offline = httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://schoolconnect.test")
    poller = ChatPoller(offline)

    with pytest.raises(ServerUnreachable) as excinfo:
        poller.login("a", PASSWORD)

    assert excinfo.value.message == SERVER_UNREACHABLE_NOTICE


def test_run_skips_ticks_while_composing_and_reports_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    poller = ChatPoller(httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://schoolconnect.test"))
    stop = threading.Event()
    errors = []
    composing = iter([True, False])

    def on_error(exc):
        errors.append(exc)
        stop.set()

    poller.run(stop, on_result=lambda result: None, is_composing=lambda: next(composing, False), on_error=on_error, interval=0)

    assert len(errors) == 1
    assert errors[0].status_code == 401
