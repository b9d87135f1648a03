"""SIP URIs: sip:user:password@host:port;uri-parameters?headers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from .params import HeaderParams, unmarshal_params

DEFAULT_PROTOCOL = "UDP"

_DEFAULT_PORTS = {"udp": 5060, "tcp": 5060, "tls": 5061, "ws": 80, "wss": 443}
_SCHEME_RE = re.compile(r"[A-Za-z0-9+.\-]*")
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class Uri:
    """A parsed SIP URI."""

    scheme: str = "sip"
    user: str = ""
    password: str = ""
    host: str = ""
    port: int = 0
    uri_params: HeaderParams = field(default_factory=HeaderParams)
    headers: HeaderParams = field(default_factory=HeaderParams)
    wildcard: bool = False
    hierarchical_slashes: bool = False

    def is_encrypted(self) -> bool:
        """Return True for a sips: URI."""
        return self.scheme == "sips"

    def host_port(self) -> str:
        """Return ``host`` or ``host:port`` when a port is set."""
        if self.port > 0:
            return f"{self.host}:{self.port}"
        return self.host

    def endpoint(self) -> str:
        """Return ``user@host:port`` (without user when absent)."""
        if self.user:
            return f"{self.user}@{self.host_port()}"
        return self.host_port()

    def clone(self) -> "Uri":
        """Return an independent copy."""
        return replace(
            self,
            uri_params=self.uri_params.clone(),
            headers=self.headers.clone(),
        )

    def __str__(self) -> str:
        if self.wildcard:
            return "*"
        parts = [self.scheme or "sip", ":"]
        if self.hierarchical_slashes:
            parts.append("//")
        if self.user:
            parts.append(self.user)
            if self.password:
                parts.append(":" + self.password)
            parts.append("@")
        parts.append(self.host_port())
        if self.uri_params:
            parts.append(";" + self.uri_params.to_string(";"))
        if self.headers:
            parts.append("?" + self.headers.to_string("&"))
        return "".join(parts)


def uri_is_sip(s: str) -> bool:
    """Return True when ``s`` names the sip or sips scheme, in any case."""
    return s.lower() in ("sip", "sips")


def default_port(transport: str) -> int:
    """Return the default port for a transport name."""
    if not transport:
        return _DEFAULT_PORTS["udp"]
    return _DEFAULT_PORTS.get(transport.lower(), _DEFAULT_PORTS["tcp"])


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid port {text!r}")
    return int(text)


def parse_uri(text: str) -> Uri:
    """Parse a URI string, raising ValueError when it is malformed."""
    if not text:
        raise ValueError("empty URI")

    uri = Uri()
    if len(text) < 3:
        if text == "*":
            uri.host = "*"
            uri.wildcard = True
            return uri
        raise ValueError("not valid sip uri")

    colon = text.find(":")
    head = text if colon < 0 else text[:colon]
    if not _SCHEME_RE.fullmatch(head):
        raise ValueError("invalid uri scheme")
    if colon < 0:
        raise ValueError("missing protocol scheme")

    uri.scheme = head.lower()
    rest = text[colon + 1 :]
    if rest.startswith("//"):
        rest = rest[2:]
        uri.hierarchical_slashes = True

    rest = _parse_user(uri, rest)
    _parse_host(uri, rest)
    return uri


def _parse_user(uri: Uri, s: str) -> str:
    at = s.find("@")
    if at < 0:
        return s
    userinfo = s[:at]
    colon = userinfo.rfind(":")
    if colon > 0:
        uri.user = userinfo[:colon]
        uri.password = userinfo[colon + 1 :]
    else:
        uri.user = userinfo
    return s[at + 1 :]


def _parse_host(uri: Uri, s: str) -> None:
    match = re.search(r"[:;?]", s)
    if match is None:
        uri.host = s
        uri.wildcard = s == "*"
        _parse_uri_params(uri, "")
        return

    i = match.start()
    uri.host = s[:i]
    tail = s[i + 1 :]
    if s[i] == ":":
        _parse_port(uri, tail)
    elif s[i] == ";":
        _parse_uri_params(uri, tail)
    else:
        _parse_headers(uri, tail)


def _parse_port(uri: Uri, s: str) -> None:
    match = re.search(r"[;?]", s)
    if match is None:
        uri.port = _atoi(s)
        return

    i = match.start()
    uri.port = _atoi(s[:i])
    if s[i] == ";":
        _parse_uri_params(uri, s[i + 1 :])
    else:
        _parse_headers(uri, s[i + 1 :])


def _parse_uri_params(uri: Uri, s: str) -> None:
    uri.uri_params = HeaderParams()
    if not s:
        uri.headers = HeaderParams()
        return

    n = unmarshal_params(s, ";", "?", uri.uri_params)
    if n == len(s):
        n -= 1
    if s[n] == "?":
        _parse_headers(uri, s[n + 1 :])


def _parse_headers(uri: Uri, s: str) -> None:
    uri.headers = HeaderParams()
    unmarshal_params(s, "&", None, uri.headers)