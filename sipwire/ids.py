"""Branch, tag and dialog identifier helpers."""

from __future__ import annotations

import secrets

RFC3261_BRANCH_MAGIC_COOKIE = "z9hG4bK"
TX_SEPARATOR = "__"


def _random_string(n: int) -> str:
    """Return ``2 * n`` random lower-case hex characters (``n`` random bytes)."""
    if n < 0:
        raise ValueError("length must not be negative")
    return secrets.token_hex(n)


def generate_branch() -> str:
    """Return a random, unique branch ID."""
    return generate_branch_n(16)


def generate_branch_n(n: int) -> str:
    """Return a branch ID of the form ``<magic cookie>.<random>``."""
    return f"{RFC3261_BRANCH_MAGIC_COOKIE}.{_random_string(n)}"


def generate_tag_n(n: int) -> str:
    """Return a random tag built from ``n`` random bytes."""
    return _random_string(n)


def make_dialog_id(call_id: str, inner_id: str, external_id: str) -> str:
    """Join a Call-ID and two tags into a dialog ID."""
    return TX_SEPARATOR.join((call_id, inner_id, external_id))