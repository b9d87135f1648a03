"""Incremental parsing of SIP messages arriving over a byte stream."""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, List, Optional, Union

from .header_parser import HeaderParser, default_headers_parser, parse_msg_header
from .headers import ContentLengthHeader
from .message import Message
from .parser import (
    LineNoCRLFError,
    ParseEOFError,
    ParseError,
    ReadBodyIncompleteError,
    SipPartialError,
    _as_bytes,
    _parse_start_line,
    _Reader,
)


class _State(Enum):
    START_LINE = auto()
    HEADER = auto()
    CONTENT = auto()


class ParserStream:
    """Parses messages from data that arrives in chunks.

    Use one instance per stream; it keeps the unfinished message between
    calls.
    """

    def __init__(self, headers_parsers: Optional[Dict[str, HeaderParser]] = None) -> None:
        self.headers_parsers = (
            default_headers_parser() if headers_parsers is None else headers_parsers
        )
        self._reset()

    def _reset(self) -> None:
        self._buffer = bytearray()
        self._state = _State.START_LINE
        self._msg: Optional[Message] = None
        self._body = bytearray()
        self._content_length = 0

    @property
    def buffered(self) -> bytes:
        """Bytes received but not yet consumed by a message."""
        return bytes(self._buffer)

    def parse_sip_stream(self, data: Union[bytes, bytearray, str]) -> List[Message]:
        """Feed ``data`` and return every message it completes.

        Raises SipPartialError when more data is needed, ParseEOFError when a
        header line is malformed, or ParseError for other failures.
        """
        self._buffer += _as_bytes(data)
        messages: List[Message] = []

        while True:
            reader = _Reader(bytes(self._buffer))
            try:
                msg = self._parse_single(reader)
            except (EOFError, LineNoCRLFError, ReadBodyIncompleteError):
                self._buffer = bytearray(reader.uncommitted())
                raise SipPartialError(messages=messages) from None
            except ParseError:
                self._reset()
                raise

            messages.append(msg)
            rest = reader.uncommitted()
            self._reset()
            if not rest:
                break
            self._buffer = bytearray(rest)

        return messages

    def _parse_single(self, reader: _Reader) -> Message:
        if self._state is _State.START_LINE:
            self._msg = _parse_start_line(reader.next_line())
            reader.commit()
            self._state = _State.HEADER

        msg = self._msg
        assert msg is not None

        if self._state is _State.HEADER:
            while True:
                line = reader.next_line()
                if not line:
                    reader.commit()
                    break
                try:
                    parse_msg_header(self.headers_parsers, msg, line)
                except ValueError as exc:
                    raise ParseEOFError(f"{exc}: EOF on reading line") from exc
                reader.commit()

            lengths = msg.get_headers("Content-Length")
            if not lengths:
                return msg
            first = lengths[0]
            if isinstance(first, ContentLengthHeader):
                content_length = first.length
            else:
                try:
                    content_length = int(first.value())
                except ValueError as exc:
                    raise ParseError(f"fail to parse content length: {exc}") from exc
            if content_length <= 0:
                return msg

            self._content_length = content_length
            self._body = bytearray()
            self._state = _State.CONTENT

        self._body += reader.read(self._content_length - len(self._body))
        reader.commit()
        if len(self._body) < self._content_length:
            raise ReadBodyIncompleteError()
        msg.set_body(bytes(self._body))
        return msg