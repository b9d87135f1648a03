"""SIP header types, request methods and status codes."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Optional

from .params import HeaderParams
from .uri import Uri


class RequestMethod(str):
    """A SIP request method name such as INVITE."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"RequestMethod({str.__repr__(self)})"


INVITE = RequestMethod("INVITE")
ACK = RequestMethod("ACK")
CANCEL = RequestMethod("CANCEL")
BYE = RequestMethod("BYE")
REGISTER = RequestMethod("REGISTER")
OPTIONS = RequestMethod("OPTIONS")
SUBSCRIBE = RequestMethod("SUBSCRIBE")
NOTIFY = RequestMethod("NOTIFY")
REFER = RequestMethod("REFER")
INFO = RequestMethod("INFO")
MESSAGE = RequestMethod("MESSAGE")
PRACK = RequestMethod("PRACK")
UPDATE = RequestMethod("UPDATE")
PUBLISH = RequestMethod("PUBLISH")


class StatusCode(IntEnum):
    """Well-known SIP response status codes."""

    TRYING = 100
    RINGING = 180
    CALL_IS_FORWARDED = 181
    QUEUED = 182
    SESSION_IN_PROGRESS = 183

    OK = 200
    ACCEPTED = 202

    MOVED_PERMANENTLY = 301
    MOVED_TEMPORARILY = 302
    USE_PROXY = 305

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTH_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    REQUEST_ENTITY_TOO_LARGE = 413
    REQUEST_URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    REQUESTED_RANGE_NOT_SATISFIABLE = 416
    BAD_EXTENSION = 420
    EXTENSION_REQUIRED = 421
    INTERVAL_TOO_BRIEF = 423
    TEMPORARILY_UNAVAILABLE = 480
    CALL_TRANSACTION_DOES_NOT_EXIST = 481
    LOOP_DETECTED = 482
    TOO_MANY_HOPS = 483
    ADDRESS_INCOMPLETE = 484
    AMBIGUOUS = 485
    BUSY_HERE = 486
    REQUEST_TERMINATED = 487
    NOT_ACCEPTABLE_HERE = 488

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    VERSION_NOT_SUPPORTED = 505
    MESSAGE_TOO_LARGE = 513

    GLOBAL_BUSY_EVERYWHERE = 600
    GLOBAL_DECLINE = 603
    GLOBAL_DOES_NOT_EXIST_ANYWHERE = 604
    GLOBAL_NOT_ACCEPTABLE = 606


class CommaDetected(Exception):
    """Raised by a header parser that stopped at a comma between values.

    ``index`` is the comma's position in the parsed text and ``header`` the
    value parsed before it.
    """

    def __init__(self, index: int, header: Optional["Header"] = None) -> None:
        super().__init__("comma detected")
        self.index = index
        self.header = header


class Header(ABC):
    """A single SIP header."""

    name: str

    @abstractmethod
    def value(self) -> str:
        """Return the header value as written on the wire."""

    def clone(self) -> "Header":
        """Return an independent copy."""
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return f"{self.name}: {self.value()}"


def _name_addr(display_name: str, address: Uri, params: Optional[HeaderParams]) -> str:
    out = f'"{display_name}" ' if display_name else ""
    out += f"<{address}>"
    if params:
        out += ";" + params.to_string(";")
    return out


@dataclass
class GenericHeader(Header):
    """A header without a dedicated type."""

    name: str
    contents: str

    def value(self) -> str:
        return self.contents


def new_header(name: str, value: str) -> GenericHeader:
    """Create a generic header."""
    return GenericHeader(name, value)


@dataclass
class ToHeader(Header):
    """The To header."""

    name: ClassVar[str] = "To"
    display_name: str = ""
    address: Uri = field(default_factory=Uri)
    params: HeaderParams = field(default_factory=HeaderParams)

    def value(self) -> str:
        return _name_addr(self.display_name, self.address, self.params)

    def as_from(self) -> "FromHeader":
        """Return a From header with the same contents."""
        return FromHeader(
            display_name=self.display_name,
            address=self.address.clone(),
            params=self.params.clone() if self.params is not None else HeaderParams(),
        )


@dataclass
class FromHeader(Header):
    """The From header."""

    name: ClassVar[str] = "From"
    display_name: str = ""
    address: Uri = field(default_factory=Uri)
    params: HeaderParams = field(default_factory=HeaderParams)

    def value(self) -> str:
        return _name_addr(self.display_name, self.address, self.params)

    def as_to(self) -> ToHeader:
        """Return a To header with the same contents."""
        return ToHeader(
            display_name=self.display_name,
            address=self.address.clone(),
            params=self.params.clone() if self.params is not None else HeaderParams(),
        )


@dataclass
class ContactHeader(Header):
    """The Contact header."""

    name: ClassVar[str] = "Contact"
    display_name: str = ""
    address: Uri = field(default_factory=Uri)
    params: HeaderParams = field(default_factory=HeaderParams)

    def value(self) -> str:
        # The wildcard URI must not be enclosed in angle brackets.
        if self.address.wildcard:
            return "*"
        return _name_addr(self.display_name, self.address, self.params)


@dataclass
class CallIDHeader(Header):
    """The Call-ID header."""

    name: ClassVar[str] = "Call-ID"
    call_id: str = ""

    def value(self) -> str:
        return self.call_id


@dataclass
class CSeqHeader(Header):
    """The CSeq header."""

    name: ClassVar[str] = "CSeq"
    seq_no: int = 0
    method_name: RequestMethod = RequestMethod("")

    def value(self) -> str:
        return f"{self.seq_no} {self.method_name}"


@dataclass
class MaxForwardsHeader(Header):
    """The Max-Forwards header."""

    name: ClassVar[str] = "Max-Forwards"
    max_forwards: int = 0

    def value(self) -> str:
        return str(self.max_forwards)

    def dec(self) -> None:
        """Decrement the hop count, wrapping like an unsigned 32-bit value."""
        self.max_forwards = (self.max_forwards - 1) & 0xFFFFFFFF


@dataclass
class ExpiresHeader(Header):
    """The Expires header."""

    name: ClassVar[str] = "Expires"
    seconds: int = 0

    def value(self) -> str:
        return str(self.seconds)


@dataclass
class ContentLengthHeader(Header):
    """The Content-Length header."""

    name: ClassVar[str] = "Content-Length"
    length: int = 0

    def value(self) -> str:
        return str(self.length)


@dataclass
class ViaHeader(Header):
    """One Via hop."""

    name: ClassVar[str] = "Via"
    protocol_name: str = "SIP"
    protocol_version: str = "2.0"
    transport: str = "UDP"
    host: str = ""
    port: int = 0
    params: HeaderParams = field(default_factory=HeaderParams)

    def sent_by(self) -> str:
        """Return ``host`` or ``host:port`` when a port is set."""
        if self.port > 0:
            return f"{self.host}:{self.port}"
        return self.host

    def value(self) -> str:
        out = f"{self.protocol_name}/{self.protocol_version}/{self.transport} {self.sent_by()}"
        if self.params:
            out += ";" + self.params.to_string(";")
        return out


@dataclass
class ContentTypeHeader(Header):
    """The Content-Type header."""

    name: ClassVar[str] = "Content-Type"
    content_type: str = ""

    def value(self) -> str:
        return self.content_type


@dataclass
class RouteHeader(Header):
    """The Route header."""

    name: ClassVar[str] = "Route"
    address: Uri = field(default_factory=Uri)

    def value(self) -> str:
        return f"<{self.address}>"


@dataclass
class RecordRouteHeader(Header):
    """The Record-Route header."""

    name: ClassVar[str] = "Record-Route"
    address: Uri = field(default_factory=Uri)

    def value(self) -> str:
        return f"<{self.address}>"