"""Polling client for the SchoolConnect HTTP API.

The client keeps an explicit :class:`ClientSession` created by :meth:`login`
and destroyed by :meth:`logout`; nothing is read from global state. Each call
to :meth:`ChatPoller.poll` refreshes the active conversation and asks the
server for delivery events since the last cursor. Polls may overlap when they
are driven from several threads, so every poll takes a sequence number and
only responses newer than the last applied one are kept.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from ..config import get_settings
from ..constants import SERVER_UNREACHABLE_NOTICE

logger = logging.getLogger(__name__)


class ChatClientError(RuntimeError):
    """Raised when the server answers with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ServerUnreachable(ChatClientError):
    """Raised when the server cannot be contacted at all."""

    def __init__(self) -> None:
        super().__init__(0, SERVER_UNREACHABLE_NOTICE)


@dataclass(frozen=True, slots=True)
class ClientSession:
    username: str
    access_token: str
    role: str = "user"


@dataclass(slots=True)
class PollResult:
    sequence: int
    messages: list[dict[str, Any]] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)


class ChatPoller:
    """Stateful polling client bound to one viewer."""

    def __init__(
        self,
        client: httpx.Client,
        *,
        context: str = "global",
        peer: str | None = None,
        group_id: int | None = None,
        view: str = "all",
    ) -> None:
        self._client = client
        self.session: ClientSession | None = None
        self.context = context
        self.peer = peer
        self.group_id = group_id
        self.view = view
        self.messages: list[dict[str, Any]] = []
        self.message_cursor: int | None = None
        self.group_cursor: int | None = None
        self._lock = threading.Lock()
        self._next_sequence = 0
        self._applied_sequence = 0

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.session is not None:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise ServerUnreachable() from exc
        if response.is_error:
            try:
                message = response.json().get("message") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            raise ChatClientError(response.status_code, message)
        return response.json()

    def register(self, username: str, password: str) -> dict[str, Any]:
        return self._request("POST", "/api/register", json={"username": username, "password": password})

    def login(self, username: str, password: str) -> ClientSession:
        data = self._request("POST", "/api/login", json={"username": username, "password": password})
        user = data.get("user") or {}
        self.session = ClientSession(
            username=user.get("username", username),
            access_token=data["access_token"],
            role=user.get("role", "user"),
        )
        return self.session

    def logout(self) -> None:
        if self.session is None:
            return
        try:
            self._request("POST", "/api/logout")
        finally:
            self.session = None
            self.messages = []
            self.message_cursor = None
            self.group_cursor = None

    def open_context(self, context: str, *, peer: str | None = None, group_id: int | None = None) -> None:
        """Switch the active conversation; the next poll reloads it."""

        with self._lock:
            self.context = context
            self.peer = peer
            self.group_id = group_id
            self.messages = []

    def send(self, text: str, *, status: str = "sent") -> dict[str, Any] | None:
        body = text.strip()
        if not body:
            return None
        payload: dict[str, Any] = {"text": body, "status": status}
        if self.context == "private":
            payload["recipient"] = self.peer
        elif self.context == "group":
            payload["group_id"] = self.group_id
        return self._request("POST", "/api/messages", json=payload)

    def update_message(self, message_id: int, **changes: Any) -> dict[str, Any]:
        return self._request("PATCH", f"/api/messages/{message_id}", json=changes)

    def _context_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"context": self.context, "view": self.view}
        if self.peer:
            params["peer"] = self.peer
        if self.group_id is not None:
            params["group_id"] = self.group_id
        return params

    def _cursor_params(self) -> dict[str, Any]:
        if self.message_cursor is None and self.group_cursor is None:
            return {}
        return {"message_cursor": self.message_cursor or 0, "group_cursor": self.group_cursor or 0}

    def poll(self) -> PollResult | None:
        """Fetch the active conversation and new delivery events.

        Returns ``None`` when a newer poll has already been applied.
        """

        if self.session is None:
            raise ChatClientError(401, "Please log in first")

        with self._lock:
            self._next_sequence += 1
            sequence = self._next_sequence
            cursor_params = self._cursor_params()
            context_params = self._context_params()

        listing = self._request("GET", "/api/messages", params=context_params)
        updates = self._request("GET", "/api/messages/updates", params=cursor_params)

        with self._lock:
            if sequence <= self._applied_sequence:
                logger.debug("Dropping stale poll %d (applied %d)", sequence, self._applied_sequence)
                return None
            self._applied_sequence = sequence
            self.messages = listing.get("messages", [])
            self.message_cursor = max(self.message_cursor or 0, updates["message_cursor"])
            self.group_cursor = max(self.group_cursor or 0, updates["group_cursor"])
            return PollResult(sequence=sequence, messages=self.messages, events=updates.get("events", []))

    def run(
        self,
        stop: threading.Event,
        *,
        on_result: Callable[[PollResult], None],
        is_composing: Callable[[], bool] = lambda: False,
        on_error: Callable[[ChatClientError], None] | None = None,
        interval: float | None = None,
    ) -> None:
        """Poll until ``stop`` is set, skipping ticks while the viewer is typing."""

        delay = interval if interval is not None else get_settings().poll_interval_seconds
        while not stop.is_set():
            if not is_composing():
                try:
                    result = self.poll()
                except ChatClientError as exc:
                    if on_error is None:
                        raise
                    on_error(exc)
                else:
                    if result is not None:
                        on_result(result)
            stop.wait(delay)


__all__ = ["ChatClientError", "ServerUnreachable", "ClientSession", "PollResult", "ChatPoller"]
