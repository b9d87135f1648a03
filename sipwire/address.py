"""Parsing of name-addr values used by From, To, Contact and Route headers."""

from __future__ import annotations

from typing import Tuple

from .headers import (
    CommaDetected,
    ContactHeader,
    FromHeader,
    RecordRouteHeader,
    RouteHeader,
    ToHeader,
)
from .params import HeaderParams
from .uri import Uri, parse_uri


def parse_address_value(text: str) -> Tuple[str, Uri, HeaderParams]:
    """Parse an address such as the value of a From, To or Contact header.

    Returns ``(display_name, uri, header_params)``.  Without angle brackets
    everything after the first ``;`` is a header parameter.  Raises
    ValueError when the address is malformed.
    """
    if not text:
        raise ValueError("Empty Address")

    display_name, rest, bracketed = _split_display_name(text)
    if not rest:
        raise ValueError("No URI present")

    if bracketed:
        end = rest.find(">")
        if end < 0:
            raise ValueError("invalid uri, missing end bracket")
        uri = parse_uri(rest[:end])
        param_text = rest[end + 1 :]
    else:
        semi = rest.find(";")
        if semi < 0:
            return display_name, parse_uri(rest), HeaderParams()
        uri = parse_uri(rest[:semi])
        param_text = rest[semi + 1 :]

    params = HeaderParams()
    _parse_header_params(param_text, params)
    return display_name, uri, params


def _split_display_name(s: str) -> Tuple[str, str, bool]:
    """Return the display name, the text after it and whether a ``<`` follows."""
    start_quote = end_quote = -1
    for i, c in enumerate(s):
        if c == '"':
            if start_quote < 0:
                start_quote = i
            else:
                end_quote = i
            continue

        if c == "<":
            if end_quote > 0:
                name = s[start_quote + 1 : end_quote]
            else:
                name = s[:i].strip()
            return name, s[i + 1 :], True

        if c == ";" and start_quote <= 0:
            # An address without <> carries only header parameters after ';'.
            return "", s, False

    return "", s, False


def _parse_header_params(s: str, params: HeaderParams) -> None:
    for segment in s.split(";"):
        equal = segment.rfind("=")
        if equal > 0:
            params.add(segment[:equal], segment[equal + 1 :])
        elif segment:
            params.add(segment, "")


def parse_to_header(text: str) -> ToHeader:
    """Parse the value of a To header."""
    display_name, address, params = parse_address_value(text)
    if address.wildcard:
        raise ValueError(f"wildcard uri not permitted in to: header: {text}")
    return ToHeader(display_name=display_name, address=address, params=params)


def parse_from_header(text: str) -> FromHeader:
    """Parse the value of a From header."""
    display_name, address, params = parse_address_value(text)
    if address.wildcard:
        raise ValueError(f"wildcard uri not permitted in to: header: {text}")
    return FromHeader(display_name=display_name, address=address, params=params)


def parse_contact_header(text: str) -> ContactHeader:
    """Parse the value of a Contact header.

    When a comma separates several contacts, the first one is parsed and
    CommaDetected is raised carrying it and the comma's index.
    """
    in_brackets = in_quotes = False
    comma = -1
    for i, c in enumerate(text):
        if c == "<" and not in_quotes:
            in_brackets = True
        elif c == ">" and not in_quotes:
            in_brackets = False
        elif c == '"':
            in_quotes = not in_quotes
        elif not in_quotes and not in_brackets and c == ",":
            comma = i
            break

    end = len(text) if comma < 0 else comma
    display_name, address, params = parse_address_value(text[:end])
    header = ContactHeader(display_name=display_name, address=address, params=params)
    if comma >= 0:
        raise CommaDetected(comma, header)
    return header


def _parse_route_address(text: str) -> Tuple[Uri, int]:
    """Return the first route URI and the index of a following comma, or -1."""
    in_brackets = in_quotes = False
    last = len(text) - 1
    for i, c in enumerate(text):
        if c == "<" and not in_quotes:
            in_brackets = True
            continue
        if c == ">" and not in_quotes:
            in_brackets = False
        elif c == '"':
            in_quotes = not in_quotes

        if in_quotes or in_brackets:
            continue
        if c == ",":
            return parse_address_value(text[:i])[1], i
        if i == last:
            return parse_address_value(text)[1], -1

    return Uri(), -1


def parse_route_header(text: str) -> RouteHeader:
    """Parse the value of a Route header, raising CommaDetected on a list."""
    address, comma = _parse_route_address(text)
    header = RouteHeader(address=address)
    if comma >= 0:
        raise CommaDetected(comma, header)
    return header


def parse_record_route_header(text: str) -> RecordRouteHeader:
    """Parse the value of a Record-Route header, raising CommaDetected on a list."""
    address, comma = _parse_route_address(text)
    header = RecordRouteHeader(address=address)
    if comma >= 0:
        raise CommaDetected(comma, header)
    return header