"""HTTP clients for talking to the SchoolConnect API."""
from .chat_poller import ChatClientError, ChatPoller, ClientSession, PollResult, ServerUnreachable

__all__ = ["ChatClientError", "ChatPoller", "ClientSession", "PollResult", "ServerUnreachable"]
