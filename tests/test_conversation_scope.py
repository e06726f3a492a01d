from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from schoolconnect.services.conversation_scope import ContextKind, ConversationContext, context_of


def test_context_is_inferred_from_parameters():
    assert ConversationContext.from_params(None).kind is ContextKind.GLOBAL
    assert ConversationContext.from_params(None, peer=" b ") == ConversationContext.private("b")
    assert ConversationContext.from_params("", group_id=7) == ConversationContext.group(7)
    assert ConversationContext.from_params("GROUP", group_id=7) == ConversationContext.group(7)


def test_explicit_global_ignores_blank_peer():
    assert ConversationContext.from_params("global", peer="   ") == ConversationContext.global_channel()


@pytest.mark.parametrize(
    "context, peer, group_id",
    [
        ("private", None, None),
        ("private", "  ", None),
        ("group", None, None),
        ("everyone", None, None),
        (None, "b", 3),
    ],
)
def test_invalid_parameters_raise_bad_request(context, peer, group_id):
    with pytest.raises(HTTPException) as excinfo:
        ConversationContext.from_params(context, peer=peer, group_id=group_id)
    assert excinfo.value.status_code == 400


def test_stored_messages_are_classified_by_addressing():
    assert context_of(SimpleNamespace(group_id=None, recipient_username=None)).kind is ContextKind.GLOBAL
    assert context_of(SimpleNamespace(group_id=None, recipient_username="b")) == ConversationContext.private("b")
    assert context_of(SimpleNamespace(group_id=4, recipient_username=None)) == ConversationContext.group(4)
