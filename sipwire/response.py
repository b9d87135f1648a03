"""SIP responses (RFC 3261 7.2) and building them from requests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from .headers import ACK, CANCEL, StatusCode, new_header
from .message import Message, copy_headers
from .uri import DEFAULT_PROTOCOL, default_port

if TYPE_CHECKING:
    from .request import Request


class Response(Message):
    """A SIP response: status code, reason, headers and body."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__()
        self.status_code = status_code
        self.reason = reason

    def short(self) -> str:
        """Return a one-line summary of the response."""
        return (
            f"response status={int(self.status_code)} reason={self.reason} "
            f"transport={self.transport} source={self.source}"
        )

    def start_line(self) -> str:
        """Return the Status-Line."""
        return f"{self.sip_version} {int(self.status_code)} {self.reason}"

    def __str__(self) -> str:
        out = self.start_line() + "\r\n" + super().__str__() + "\r\n"
        if self.body is not None:
            out += self.body.decode("utf-8", errors="surrogateescape")
        return out

    def clone(self) -> "Response":
        """Return a copy with cloned headers and the same body."""
        new = Response(self.status_code, self.reason)
        new.sip_version = self.sip_version
        for header in self.clone_headers():
            new.append_header(header)
        new.set_body(self.body)
        new.transport = self.transport
        new.source = self.source
        new.destination = self.destination
        return new

    def is_provisional(self) -> bool:
        """Return True for a 1xx response."""
        return self.status_code < 200

    def is_success(self) -> bool:
        """Return True for a 2xx response."""
        return 200 <= self.status_code < 300

    def is_redirection(self) -> bool:
        """Return True for a 3xx response."""
        return 300 <= self.status_code < 400

    def is_client_error(self) -> bool:
        """Return True for a 4xx response."""
        return 400 <= self.status_code < 500

    def is_server_error(self) -> bool:
        """Return True for a 5xx response."""
        return 500 <= self.status_code < 600

    def is_global_error(self) -> bool:
        """Return True for a 6xx response."""
        return self.status_code >= 600

    def is_ack(self) -> bool:
        """Return True when the CSeq method is ACK."""
        cseq = self.cseq()
        return cseq is not None and cseq.method_name == ACK

    def is_cancel(self) -> bool:
        """Return True when the CSeq method is CANCEL."""
        cseq = self.cseq()
        return cseq is not None and cseq.method_name == CANCEL

    @property
    def transport(self) -> str:
        """The set transport, or the top Via transport."""
        if self._transport:
            return self._transport
        via = self.via()
        if via is not None and via.transport:
            return via.transport
        return DEFAULT_PROTOCOL

    @transport.setter
    def transport(self, value: str) -> None:
        self._transport = value

    @property
    def destination(self) -> str:
        """The set destination, or ``host:port`` from the top Via (RFC 3581)."""
        if self._destination:
            return self._destination

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

    @destination.setter
    def destination(self, value: str) -> None:
        self._destination = value


def new_response_from_request(
    request: "Request", status_code: int, reason: str, body: Optional[bytes]
) -> Response:
    """Build a response to ``request`` (RFC 3261 8.2.6)."""
    res = Response(status_code, reason)
    res.sip_version = request.sip_version
    copy_headers("Record-Route", request, res)
    copy_headers("Via", request, res)
    for header in (request.from_(), request.to(), request.call_id(), request.cseq()):
        if header is not None:
            res.append_header(header.clone())

    if status_code == StatusCode.TRYING:
        copy_headers("Timestamp", request, res)
    else:
        to = res.to()
        if to is None:
            raise ValueError("request has no To header")
        if "tag" not in to.params:
            to.params["tag"] = str(uuid.uuid4())

    res.set_body(body)
    res.transport = request.transport
    res.source = request.destination
    res.destination = request.source
    return res


def new_sdp_response_from_request(request: "Request", body: Optional[bytes]) -> Response:
    """Build a 200 OK response carrying an SDP body."""
    res = new_response_from_request(request, StatusCode.OK, "OK", body)
    res.append_header(new_header("Content-Type", "application/sdp"))
    res.set_body(body)
    return res