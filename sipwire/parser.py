"""Parsing of complete SIP messages from bytes."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, Optional, Union

from .header_parser import HeaderParser, default_headers_parser, parse_msg_header
from .message import Message
from .request import Request
from .response import Response
from .uri import parse_uri, uri_is_sip

if TYPE_CHECKING:
    from .parser_stream import ParserStream

_UINT_RE = re.compile(r"[0-9]+")
_UINT16_MAX = 0xFFFF


class ParseError(ValueError):
    """A SIP message could not be parsed."""


class LineNoCRLFError(ParseError):
    """A line ended with CR that was not followed by LF."""

    def __init__(self, message: str = "line has no CRLF") -> None:
        super().__init__(message)


class ParseEOFError(ParseError):
    """The data ended before the header section was complete."""

    def __init__(self, message: str = "EOF on reading line") -> None:
        super().__init__(message)


class SipPartialError(ParseError):
    """The stream holds only part of a message; feed more data.

    ``messages`` holds any messages completed in the same call before the
    partial one.
    """

    def __init__(self, message: str = "SIP partial data", messages=()) -> None:
        super().__init__(message)
        self.messages = list(messages)


class ReadBodyIncompleteError(ParseError):
    """The message body has not been fully received yet."""

    def __init__(self, message: str = "reading body incomplete") -> None:
        super().__init__(message)


class _Reader:
    """Reads CRLF terminated lines and raw bytes from a byte string."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self.mark = 0

    def next_line(self) -> str:
        """Return the next line without CRLF.

        Raises EOFError when no complete line is left and LineNoCRLFError
        when CR is followed by anything but LF.
        """
        start = self.pos
        cr = self.data.find(b"\r", start)
        if cr < 0:
            self.pos = len(self.data)
            raise EOFError("EOF on reading line")
        self.pos = cr + 1
        if self.pos >= len(self.data):
            raise EOFError("EOF on reading line")
        following = self.data[self.pos]
        self.pos += 1
        if following != 0x0A:
            raise LineNoCRLFError()
        return self.data[start:cr].decode("utf-8", errors="surrogateescape")

    def read(self, n: int) -> bytes:
        """Return up to ``n`` bytes."""
        chunk = self.data[self.pos : self.pos + n]
        self.pos += len(chunk)
        return chunk

    def commit(self) -> None:
        """Remember the current position as fully consumed."""
        self.mark = self.pos

    def uncommitted(self) -> bytes:
        """Return the data after the last committed position."""
        return self.data[self.mark :]


def _is_request(line: str) -> bool:
    # A request line holds exactly two spaces and ends with SIP/x.y.
    first = line.find(" ")
    if first <= 0:
        return False
    second = line.find(" ", first + 1)
    if second - first - 1 <= 0:
        return False
    version = line[second + 1 :]
    if " " in version or len(version) < 3:
        return False
    return uri_is_sip(version[:3])


def _is_response(line: str) -> bool:
    first = line.find(" ")
    if first <= 0:
        return False
    second = line.find(" ", first + 1)
    if second - first - 1 <= 0:
        return False
    return uri_is_sip(line[:3])


def _parse_request_line(line: str) -> Request:
    parts = line.split(" ")
    if len(parts) != 3:
        raise ParseError(f"request line should have 2 spaces: '{line}'")
    method, target, version = parts
    try:
        recipient = parse_uri(target)
    except ValueError as exc:
        raise ParseError(str(exc)) from exc
    if recipient.wildcard:
        raise ParseError(f"wildcard URI '*' not permitted in request line: '{line}'")
    request = Request(method.upper(), recipient)
    request.sip_version = version
    return request


def _parse_status_line(line: str) -> Response:
    parts = line.split(" ")
    if len(parts) < 3:
        raise ParseError(f"status line has too few spaces: '{line}'")
    code_text = parts[1]
    if not _UINT_RE.fullmatch(code_text) or int(code_text) > _UINT16_MAX:
        raise ParseError(f"invalid status code {code_text!r}")
    response = Response(int(code_text), " ".join(parts[2:]))
    response.sip_version = parts[0]
    return response


def _parse_start_line(line: str) -> Message:
    """Create an empty request or response from its start line."""
    if _is_request(line):
        return _parse_request_line(line)
    if _is_response(line):
        return _parse_status_line(line)
    raise ParseError(f"transmission beginning '{line}' is not a SIP message")


def _body_length(data: bytes) -> int:
    idx = data.find(b"\r\n\r\n")
    if idx < 0:
        return -1
    return len(data) - (idx + 4)


def _as_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8", errors="surrogateescape")
    return bytes(data)


class Parser:
    """Parses whole SIP messages with a configurable set of header parsers."""

    def __init__(self, headers_parsers: Optional[Dict[str, HeaderParser]] = None) -> None:
        self.headers_parsers = (
            default_headers_parser() if headers_parsers is None else headers_parsers
        )

    def parse_sip(self, data: Union[bytes, bytearray, str]) -> Message:
        """Parse one complete message.

        The body is everything after the first empty line.  Raises EOFError
        when the start line has no CR, LineNoCRLFError, ParseEOFError when
        the header section is not terminated, or ParseError otherwise.
        """
        raw = _as_bytes(data)
        reader = _Reader(raw)

        msg = _parse_start_line(reader.next_line())

        while True:
            try:
                line = reader.next_line()
            except EOFError as exc:
                raise ParseEOFError() from exc
            if not line:
                break
            try:
                parse_msg_header(self.headers_parsers, msg, line)
            except ValueError as exc:
                raise ParseError(f"parsing header failed line={line!r}: {exc}") from exc

        content_length = _body_length(raw)
        if content_length <= 0:
            return msg

        body = reader.read(content_length)
        if not body:
            raise ParseError("read message body failed: EOF")
        if len(body) != content_length:
            raise ParseError(
                f"incomplete message body: read {len(body)} bytes, "
                f"expected {content_length} bytes"
            )
        msg.set_body(body)
        return msg

    def new_sip_stream(self) -> "ParserStream":
        """Return a stream parser sharing this parser's header parsers."""
        from .parser_stream import ParserStream

        return ParserStream(self.headers_parsers)


def parse_message(data: Union[bytes, bytearray, str]) -> Message:
    """Parse one complete message with the default header parsers."""
    return Parser().parse_sip(data)