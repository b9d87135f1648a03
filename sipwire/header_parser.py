"""Parsing of individual SIP header lines into typed headers."""

from __future__ import annotations

import re
from typing import Callable, Dict

from .address import (
    parse_contact_header,
    parse_from_header,
    parse_record_route_header,
    parse_route_header,
    parse_to_header,
)
from .headers import (
    CallIDHeader,
    CommaDetected,
    ContentLengthHeader,
    ContentTypeHeader,
    CSeqHeader,
    Header,
    MaxForwardsHeader,
    RequestMethod,
    new_header,
)
from .via import parse_via_header

HeaderParser = Callable[[str], Header]

# The maximum permissible CSeq number (2**31 - 1), RFC 3261 8.1.1.5.
_MAX_CSEQ = 2147483647
_UINT32_MAX = 0xFFFFFFFF
_UINT_RE = re.compile(r"[0-9]+")
_ABNF_RE = re.compile(r"[ \t]")


def _parse_uint32(text: str) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer {text!r}")
    value = int(text)
    if value > _UINT32_MAX:
        raise ValueError(f"value out of range {text!r}")
    return value


def parse_call_id_header(text: str) -> CallIDHeader:
    """Parse a Call-ID value."""
    text = text.strip()
    if not text:
        raise ValueError("empty Call-ID body")
    return CallIDHeader(call_id=text)


def parse_max_forwards_header(text: str) -> MaxForwardsHeader:
    """Parse a Max-Forwards value."""
    return MaxForwardsHeader(max_forwards=_parse_uint32(text))


def parse_cseq_header(text: str) -> CSeqHeader:
    """Parse a CSeq value such as ``1 INVITE``."""
    blank = _ABNF_RE.search(text)
    ind = blank.start() if blank else -1
    if ind < 1 or len(text) - ind < 2:
        raise ValueError(
            f"CSeq field should have precisely one whitespace section: '{text}'"
        )

    seq_no = _parse_uint32(text[:ind])
    if seq_no > _MAX_CSEQ:
        raise ValueError(
            f"invalid CSeq {seq_no}: exceeds maximum permitted value 2**31 - 1"
        )
    return CSeqHeader(seq_no=seq_no, method_name=RequestMethod(text[ind + 1 :]))


def parse_content_length_header(text: str) -> ContentLengthHeader:
    """Parse a Content-Length value."""
    return ContentLengthHeader(length=_parse_uint32(text.strip()))


def parse_content_type_header(text: str) -> ContentTypeHeader:
    """Parse a Content-Type value."""
    text = text.strip()
    if not text:
        raise ValueError("empty Content-Type body")
    return ContentTypeHeader(content_type=text)


# Compact forms: c Content-Type, f From, i Call-ID, l Content-Length,
# m Contact, t To, v Via.
_HEADERS_PARSERS: Dict[str, HeaderParser] = {
    "c": parse_content_type_header,
    "content-type": parse_content_type_header,
    "f": parse_from_header,
    "from": parse_from_header,
    "to": parse_to_header,
    "t": parse_to_header,
    "contact": parse_contact_header,
    "m": parse_contact_header,
    "i": parse_call_id_header,
    "call-id": parse_call_id_header,
    "cseq": parse_cseq_header,
    "via": parse_via_header,
    "v": parse_via_header,
    "max-forwards": parse_max_forwards_header,
    "content-length": parse_content_length_header,
    "l": parse_content_length_header,
    "route": parse_route_header,
    "record-route": parse_record_route_header,
}


def default_headers_parser() -> Dict[str, HeaderParser]:
    """Return a fresh copy of the default lower-case name to parser mapping."""
    return dict(_HEADERS_PARSERS)


def parse_msg_header(parsers: Dict[str, HeaderParser], msg, header_text: str) -> None:
    """Parse one header line and append the result(s) to ``msg``.

    Headers without a parser become generic headers.  A comma separated
    value handled by a parser becomes several headers.
    """
    colon = header_text.find(":")
    if colon < 0:
        raise ValueError(f"field name with no value in header: {header_text}")

    field_name = header_text[:colon].strip()
    field_text = header_text[colon + 1 :].strip()

    parser = parsers.get(field_name.lower())
    if parser is None:
        msg.append_header(new_header(field_name, field_text))
        return

    while True:
        try:
            header = parser(field_text)
        except CommaDetected as comma:
            msg.append_header(comma.header)
            field_text = field_text[comma.index + 1 :]
            continue
        msg.append_header(header)
        return