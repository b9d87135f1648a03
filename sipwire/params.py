"""Parameter lists used by SIP headers and URIs."""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional


class HeaderParams(dict):
    """Ordered ``name=value`` parameters; an empty value means a bare name."""

    def add(self, key: str, value: str) -> "HeaderParams":
        """Set ``key`` to ``value`` and return the parameters for chaining."""
        self[key] = value
        return self

    def get(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None when it is absent."""
        return super().get(key)

    def length(self) -> int:
        """Return the number of parameters."""
        return len(self)

    def to_string(self, separator: str) -> str:
        """Render the parameters joined by ``separator``."""
        return separator.join(
            key if value == "" else f"{key}={value}" for key, value in self.items()
        )

    def clone(self) -> "HeaderParams":
        """Return an independent copy."""
        return HeaderParams(self)

    def __str__(self) -> str:
        return self.to_string(";")


class _State(Enum):
    KEY = auto()
    EQUAL = auto()
    VALUE = auto()
    QUOTE = auto()


def unmarshal_params(
    s: str, separator: str, ending: Optional[str], params: HeaderParams
) -> int:
    """Parse ``s`` into ``params`` and return where parsing stopped.

    Parsing stops at the ``ending`` character, if given; the returned index
    is relative to ``s`` with leading whitespace removed.
    """
    start, sep, quote = 0, 0, -1
    state = _State.KEY

    s = s.lstrip()
    n = len(s)
    for i, c in enumerate(s):
        if ending and c == ending:
            n = i
            break

        if state is _State.KEY:
            sep = 0
            start = i
            state = _State.EQUAL
        elif state is _State.EQUAL:
            if c == separator:
                params.add(s[start:i], "")
                state = _State.KEY
            elif c == "=":
                sep = i
                state = _State.VALUE
        elif state is _State.VALUE:
            if c == '"':
                state = _State.QUOTE
                quote = i
            elif c == separator:
                params.add(s[start:sep], s[sep + 1 : i])
                start = sep + 1
                state = _State.KEY
        elif state is _State.QUOTE:
            if c == '"':
                params.add(s[start:], s[quote + 1 : i])
                state = _State.KEY

    if sep > 0 and start < sep:
        params.add(s[start:sep], s[sep + 1 : n])
    if sep == 0 and start < n:
        params.add(s[start:n], "")

    return n