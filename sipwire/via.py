"""Parsing of the Via header."""

from __future__ import annotations

import re

from .headers import CommaDetected, ViaHeader
from .params import HeaderParams, unmarshal_params

_BLANK_RE = re.compile(r"[ \t]")
_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_via_header(text: str) -> ViaHeader:
    """Parse one Via hop.

    When the value holds several comma separated hops, the first is parsed
    and CommaDetected is raised with it and the comma's index in ``text``.
    A port that is not a number ends parsing silently, leaving the host
    unset, as the reference behaviour does.
    """
    header = ViaHeader(params=HeaderParams())

    slash = text.find("/")
    if slash < 0:
        raise ValueError("Malformed protocol name in Via header")
    header.protocol_name = text[:slash].strip()
    pos = slash + 1

    slash = text.find("/", pos)
    if slash < 0:
        raise ValueError("Malformed protocol version in Via header")
    header.protocol_version = text[pos:slash].strip()
    pos = slash + 1

    blank = _BLANK_RE.search(text, pos)
    if blank is None:
        raise ValueError("Malformed transport in Via header")
    header.transport = text[pos : blank.start()].strip()
    pos = blank.start() + 1

    rest = text[pos:]
    end = rest.find(";")
    if end < 0:
        end = len(rest)

    colon = rest.rfind(":", 0, end)
    if colon > 0:
        port_text = rest[colon + 1 : end]
        if not _INT_RE.fullmatch(port_text):
            return header
        header.port = int(port_text)
        header.host = rest[:colon].strip()
    else:
        header.host = rest[:end].strip()

    if end == len(rest):
        return header

    params_pos = pos + end + 1
    params_text = rest[end + 1 :]
    comma = params_text.find(",")
    if comma > 0:
        unmarshal_params(params_text[:comma], ";", ",", header.params)
        raise CommaDetected(params_pos + comma, header)

    unmarshal_params(params_text, ";", "\r", header.params)
    return header