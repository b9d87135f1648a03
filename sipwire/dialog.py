"""Dialog identifiers built from the Call-ID and the From and To tags."""

from __future__ import annotations

from typing import Tuple

from .ids import make_dialog_id
from .message import Message


def _dialog_parts(msg: Message) -> Tuple[str, str, str]:
    """Return ``(call_id, to_tag, from_tag)``, raising ValueError when one is missing."""
    call_id = msg.call_id()
    if call_id is None:
        raise ValueError("missing Call-ID header")

    to = msg.to()
    if to is None:
        raise ValueError("missing To header")
    if to.params is None or "tag" not in to.params:
        raise ValueError("missing tag param in To header")

    from_ = msg.from_()
    if from_ is None:
        raise ValueError("missing From header")
    if from_.params is None or "tag" not in from_.params:
        raise ValueError("missing tag param in From header")

    return call_id.value(), to.params["tag"], from_.params["tag"]


def uas_read_request_dialog_id(msg: Message) -> str:
    """Return the dialog ID of a request as seen by the UAS."""
    call_id, to_tag, from_tag = _dialog_parts(msg)
    return make_dialog_id(call_id, to_tag, from_tag)


def uac_read_request_dialog_id(msg: Message) -> str:
    """Return the dialog ID of a request as seen by the UAC."""
    call_id, to_tag, from_tag = _dialog_parts(msg)
    return make_dialog_id(call_id, from_tag, to_tag)


def make_dialog_id_from_request(msg: Message) -> str:
    """Return the dialog ID of a request (UAS view)."""
    return uas_read_request_dialog_id(msg)


def make_dialog_id_from_response(msg: Message) -> str:
    """Return the dialog ID of a response."""
    call_id, to_tag, from_tag = _dialog_parts(msg)
    return make_dialog_id(call_id, to_tag, from_tag)