"""SIP requests (RFC 3261 7.1) and builders for ACK and CANCEL."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .headers import (
    ACK,
    CANCEL,
    INVITE,
    MaxForwardsHeader,
    RequestMethod,
    new_header,
)
from .ids import generate_branch
from .message import Message, copy_headers
from .uri import DEFAULT_PROTOCOL, Uri, default_port

if TYPE_CHECKING:
    from .response import Response


class Request(Message):
    """A SIP request: method, Request-URI, headers and body."""

    def __init__(self, method: str, recipient: Optional[Uri] = None) -> None:
        super().__init__()
        self.method = RequestMethod(method)
        self.recipient = recipient.clone() if recipient is not None else Uri()

    def short(self) -> str:
        """Return a one-line summary of the request."""
        return (
            f"request method={self.method} Recipient={self.recipient} "
            f"transport={self.transport} source={self.source}"
        )

    def start_line(self) -> str:
        """Return the Request-Line."""
        return f"{self.method} {self.recipient} {self.sip_version}"

    def __str__(self) -> str:
        out = self.start_line() + "\r\n" + super().__str__() + "\r\n"
        if self.body is not None:
            out += self.body.decode("utf-8", errors="surrogateescape")
        return out

    def clone(self) -> "Request":
        """Return a copy with cloned headers; the body is not copied."""
        new = Request(self.method, self.recipient.clone())
        new.sip_version = self.sip_version
        for header in self.clone_headers():
            new.append_header(header)
        new.transport = self.transport
        new.source = self.source
        new.destination = self.destination
        return new

    def is_invite(self) -> bool:
        """Return True for an INVITE."""
        return self.method == INVITE

    def is_ack(self) -> bool:
        """Return True for an ACK."""
        return self.method == ACK

    def is_cancel(self) -> bool:
        """Return True for a CANCEL."""
        return self.method == CANCEL

    def _target_uri(self) -> Uri:
        route = self.route()
        return route.address if route is not None else self.recipient

    @property
    def transport(self) -> str:
        """The set transport, or one derived from Via, Route and Request-URI."""
        if self._transport:
            return self._transport

        via = self.via()
        tp = via.transport if via is not None and via.transport else DEFAULT_PROTOCOL

        uri = self._target_uri()
        if uri.uri_params:
            value = uri.uri_params.get("transport")
            if value:
                tp = value.upper()

        if uri.is_encrypted():
            if tp == "TCP":
                tp = "TLS"
            elif tp == "WS":
                tp = "WSS"
        return tp

    @transport.setter
    def transport(self, value: str) -> None:
        self._transport = value

    @property
    def source(self) -> str:
        """The set source, or ``host:port`` taken from the top Via (RFC 3581)."""
        if self._source:
            return self._source

        via = self.via()
        if via is None:
            return ""

        host = via.host
        port = via.port if via.port > 0 else default_port(self.transport)
        if via.params:
            received = via.params.get("received")
            if received:
                host = received
            rport = via.params.get("rport")
            if rport:
                try:
                    port = int(rport)
                except ValueError:
                    pass
        return f"{host}:{port}"

    @source.setter
    def source(self, value: str) -> None:
        self._source = value

    @property
    def destination(self) -> str:
        """The set destination, or ``host:port`` of the Route or Request-URI."""
        if self._destination:
            return self._destination

        uri = self._target_uri()
        if uri.port > 0:
            return f"{uri.host}:{uri.port}"
        return f"{uri.host}:{default_port(self.transport)}"

    @destination.setter
    def destination(self, value: str) -> None:
        self._destination = value


def new_ack_request(
    invite_request: Request, invite_response: "Response", body: Optional[bytes]
) -> Request:
    """Build an ACK for a 2xx INVITE response (RFC 3261 13.2.2.4).

    Via headers are not copied; that is left to the caller or transport.
    """
    recipient = invite_request.recipient
    contact = invite_response.contact()
    if contact is not None:
        recipient = contact.address

    ack = Request(ACK, recipient.clone())
    ack.sip_version = invite_request.sip_version

    if invite_request.get_headers("Route"):
        copy_headers("Route", invite_request, ack)
    else:
        for record_route in reversed(invite_response.get_headers("Record-Route")):
            ack.append_header(new_header("Route", record_route.value()))

    ack.append_header(MaxForwardsHeader(max_forwards=70))
    for header in (
        invite_request.from_(),
        invite_response.to(),
        invite_request.call_id(),
        invite_request.cseq(),
    ):
        if header is not None:
            ack.append_header(header.clone())

    cseq = ack.cseq()
    if cseq is None:
        raise ValueError("INVITE request has no CSeq header")
    cseq.method_name = ACK

    contact_header = invite_request.contact()
    if contact_header is not None:
        ack.append_header(contact_header.clone())

    ack.set_body(body)
    ack.transport = invite_request.transport
    ack.source = invite_request.source
    ack.destination = invite_request.destination
    return ack


def new_ack_request_non2xx(
    invite_request: Request, invite_response: "Response", body: Optional[bytes]
) -> Request:
    """Build an ACK within the INVITE transaction, copying its Via headers."""
    ack = new_ack_request(invite_request, invite_response, body)
    copy_headers("Via", invite_request, ack)
    if invite_response.is_success():
        # A 2xx ACK is a separate transaction and needs its own branch.
        via = ack.via()
        if via is not None:
            via.params.add("branch", generate_branch())
    return ack


def new_cancel_request(request: Request) -> Request:
    """Build a CANCEL for ``request``."""
    via = request.via()
    if via is None:
        raise ValueError("request to cancel has no Via header")

    cancel = Request(CANCEL, request.recipient)
    cancel.sip_version = request.sip_version
    cancel.append_header(via.clone())
    copy_headers("Route", request, cancel)
    cancel.append_header(MaxForwardsHeader(max_forwards=70))

    for header in (request.from_(), request.to(), request.call_id(), request.cseq()):
        if header is not None:
            cancel.append_header(header.clone())

    cseq = cancel.cseq()
    if cseq is None:
        raise ValueError("request to cancel has no CSeq header")
    cseq.method_name = CANCEL

    cancel.transport = request.transport
    cancel.source = request.source
    cancel.destination = request.destination
    return cancel