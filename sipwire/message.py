"""Ordered header lists with fast access, and the common message base."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple, Type

from .address import (
    parse_contact_header,
    parse_from_header,
    parse_record_route_header,
    parse_route_header,
    parse_to_header,
)
from .header_parser import (
    parse_call_id_header,
    parse_content_length_header,
    parse_content_type_header,
    parse_cseq_header,
    parse_max_forwards_header,
)
from .headers import (
    CallIDHeader,
    CommaDetected,
    ContactHeader,
    ContentLengthHeader,
    ContentTypeHeader,
    CSeqHeader,
    FromHeader,
    Header,
    MaxForwardsHeader,
    RecordRouteHeader,
    RouteHeader,
    ToHeader,
    ViaHeader,
)
from .via import parse_via_header

_log = logging.getLogger(__name__)

_LAZY: Dict[Type[Header], Tuple[Callable[[str], Header], Tuple[str, ...]]] = {
    CallIDHeader: (parse_call_id_header, ("call-id", "i")),
    ViaHeader: (parse_via_header, ("via", "v")),
    FromHeader: (parse_from_header, ("from", "f")),
    ToHeader: (parse_to_header, ("to", "t")),
    CSeqHeader: (parse_cseq_header, ("cseq",)),
    MaxForwardsHeader: (parse_max_forwards_header, ("max-forwards",)),
    ContentLengthHeader: (parse_content_length_header, ("content-length", "l")),
    ContentTypeHeader: (parse_content_type_header, ("content-type", "c")),
    ContactHeader: (parse_contact_header, ("contact", "m")),
    RouteHeader: (parse_route_header, ("route",)),
    RecordRouteHeader: (parse_record_route_header, ("record-route",)),
}

# Only the topmost of these is referenced when appending.
_MULTI = (ViaHeader, RouteHeader, RecordRouteHeader)


class HeaderList:
    """Headers in wire order, with quick access to the common ones."""

    def __init__(self) -> None:
        self._order: List[Header] = []
        self._refs: Dict[Type[Header], Header] = {}

    def _set_ref(self, header: Header) -> None:
        cls = type(header)
        if cls in _LAZY:
            self._refs[cls] = header

    def _unref(self, header: Header) -> None:
        self._refs.pop(type(header), None)

    def append_header(self, header: Header) -> None:
        """Add a header at the end."""
        self._order.append(header)
        if isinstance(header, _MULTI):
            self._refs.setdefault(type(header), header)
        else:
            self._set_ref(header)

    def append_header_after(self, header: Header, name: str) -> None:
        """Insert a header after the last header named ``name``, or append."""
        index = -1
        for i, h in enumerate(self._order):
            if h.name == name:
                index = i
        if index == -1 or index + 1 == len(self._order):
            self.append_header(header)
            return
        self._order.insert(index + 1, header)
        self._set_ref(header)

    def prepend_header(self, *args: Header) -> None:
        """Add headers to the front, keeping their given order."""
        for header in args:
            self._set_ref(header)
        self._order[0:0] = args

    def replace_header(self, header: Header) -> None:
        """Replace the first header with the same name."""
        for i, h in enumerate(self._order):
            if h.name == header.name:
                self._order[i] = header
                self._set_ref(header)
                break

    def headers(self) -> List[Header]:
        """Return all headers in order."""
        return list(self._order)

    def get_headers(self, name: str) -> List[Header]:
        """Return every header with this name, case-insensitively."""
        lower = name.lower()
        return [h for h in self._order if h.name.lower() == lower]

    def get_header(self, name: str) -> Optional[Header]:
        """Return the first header with this name, or None."""
        return self._find(name.lower())

    def _find(self, lower: str) -> Optional[Header]:
        return next((h for h in self._order if h.name.lower() == lower), None)

    def remove_header(self, name: str) -> bool:
        """Remove the first header named exactly ``name``; True if one was removed."""
        for idx, entry in enumerate(self._order):
            if entry.name == name:
                del self._order[idx]
                self._unref(entry)
                following = next(
                    (h for h in self._order[idx:] if h.name == name), None
                )
                if following is not None:
                    self._set_ref(following)
                return True
        return False

    def clone_headers(self) -> List[Header]:
        """Return copies of all headers."""
        return [h.clone() for h in self._order]

    def _lazy(self, cls: Type[Header]) -> Optional[Header]:
        ref = self._refs.get(cls)
        if ref is not None:
            return ref
        parser, names = _LAZY[cls]
        for lower in names:
            hdr = self._find(lower)
            if hdr is None:
                continue
            try:
                parsed = parser(hdr.value())
            except (ValueError, CommaDetected) as exc:
                _log.debug("Lazy header parsing of %s failed: %s", hdr.name, exc)
                return None
            self._refs[cls] = parsed
            return parsed
        return None

    def call_id(self) -> Optional[CallIDHeader]:
        """Return the parsed Call-ID header, or None."""
        return self._lazy(CallIDHeader)

    def via(self) -> Optional[ViaHeader]:
        """Return the topmost parsed Via header, or None."""
        return self._lazy(ViaHeader)

    def from_(self) -> Optional[FromHeader]:
        """Return the parsed From header, or None."""
        return self._lazy(FromHeader)

    def to(self) -> Optional[ToHeader]:
        """Return the parsed To header, or None."""
        return self._lazy(ToHeader)

    def cseq(self) -> Optional[CSeqHeader]:
        """Return the parsed CSeq header, or None."""
        return self._lazy(CSeqHeader)

    def max_forwards(self) -> Optional[MaxForwardsHeader]:
        """Return the parsed Max-Forwards header, or None."""
        return self._lazy(MaxForwardsHeader)

    def content_length(self) -> Optional[ContentLengthHeader]:
        """Return the parsed Content-Length header, or None."""
        return self._lazy(ContentLengthHeader)

    def content_type(self) -> Optional[ContentTypeHeader]:
        """Return the parsed Content-Type header, or None."""
        return self._lazy(ContentTypeHeader)

    def contact(self) -> Optional[ContactHeader]:
        """Return the parsed Contact header, or None."""
        return self._lazy(ContactHeader)

    def route(self) -> Optional[RouteHeader]:
        """Return the topmost parsed Route header, or None."""
        return self._lazy(RouteHeader)

    def record_route(self) -> Optional[RecordRouteHeader]:
        """Return the topmost parsed Record-Route header, or None."""
        return self._lazy(RecordRouteHeader)

    def __str__(self) -> str:
        return "\r\n".join(str(h) for h in self._order) + "\r\n"


class Message(HeaderList):
    """Headers, body and routing data shared by requests and responses."""

    def __init__(self) -> None:
        super().__init__()
        self.sip_version = "SIP/2.0"
        self._body: Optional[bytes] = None
        self._transport = ""
        self._source = ""
        self._destination = ""

    @property
    def body(self) -> Optional[bytes]:
        """The message body, or None."""
        return self._body

    def set_body(self, body: Optional[bytes]) -> None:
        """Set the body and keep the Content-Length header in step."""
        self._body = body
        length = ContentLengthHeader(length=0 if body is None else len(body))
        current = self.content_length()
        if current is not None:
            if current.length == length.length:
                return
            self.replace_header(length)
            return
        self.append_header(length)

    @property
    def transport(self) -> str:
        """Transport name used to send or receive the message."""
        return self._transport

    @transport.setter
    def transport(self, value: str) -> None:
        self._transport = value

    @property
    def source(self) -> str:
        """Source ``host:port`` address."""
        return self._source

    @source.setter
    def source(self, value: str) -> None:
        self._source = value

    @property
    def destination(self) -> str:
        """Destination ``host:port`` address."""
        return self._destination

    @destination.setter
    def destination(self, value: str) -> None:
        self._destination = value


def copy_headers(name: str, source: HeaderList, target: HeaderList) -> None:
    """Append copies of all ``name`` headers of ``source`` to ``target``."""
    for header in source.get_headers(name):
        target.append_header(header.clone())