import pytest

from sipwire.address import (
    parse_address_value,
    parse_contact_header,
    parse_from_header,
    parse_record_route_header,
    parse_route_header,
    parse_to_header,
)
from sipwire.headers import CommaDetected, ContactHeader


def test_parse_address_value_all():
    address = '"Bob" <sips:bob:password@127.0.0.1:5060;user=phone>;tag=1234'
    display_name, uri, params = parse_address_value(address)

    assert str(uri) == "sips:bob:password@127.0.0.1:5060;user=phone"
    assert str(params) == "tag=1234"
    assert display_name == "Bob"
    assert uri.user == "bob"
    assert uri.password == "password"
    assert uri.host == "127.0.0.1"
    assert uri.port == 5060
    assert uri.is_encrypted() is True
    assert uri.wildcard is False
    assert uri.uri_params.get("user") == "phone"
    assert uri.uri_params.length() == 1


def test_parse_address_value_no_display_name():
    address = "sip:1215174826@222.222.222.222;tag=9300025590389559597"
    display_name, uri, params = parse_address_value(address)

    assert display_name == ""
    assert uri.user == "1215174826"
    assert uri.host == "222.222.222.222"
    assert uri.is_encrypted() is False
    assert params.get("tag") == "9300025590389559597"


def test_parse_address_value_wildcard():
    display_name, uri, _ = parse_address_value("*")
    assert display_name == ""
    assert uri.host == "*"
    assert uri.wildcard is True


def test_parse_address_double_ports():
    with pytest.raises(ValueError):
        parse_address_value("<sip:127.0.0.1:5060:5060;lr;transport=udp>")


@pytest.mark.parametrize("text", ["", "<sip:alice@example.com", '"Alice" <'])
def test_parse_address_bad(text):
    with pytest.raises(ValueError):
        parse_address_value(text)


def test_parse_to_header_round_trip():
    text = '"Bob" <sip:bob@127.0.0.1:5060>;xxx=xxx;yyyy=yyyy'
    header = parse_to_header(text)
    assert header.display_name == "Bob"
    assert header.params == {"xxx": "xxx", "yyyy": "yyyy"}
    assert str(header) == "To: " + text


def test_parse_to_header_wildcard_rejected():
    with pytest.raises(ValueError):
        parse_to_header("*")


def test_parse_from_header_without_brackets():
    header = parse_from_header("sip:alice@localhost;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM")
    assert str(header) == "From: <sip:alice@localhost>;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM"


def test_parse_from_header_wildcard_rejected():
    with pytest.raises(ValueError):
        parse_from_header("*")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("sip:sipp@127.0.0.3:5060", "Contact: <sip:sipp@127.0.0.3:5060>"),
        ("SIPP <sip:sipp@127.0.0.3:5060>", 'Contact: "SIPP" <sip:sipp@127.0.0.3:5060>'),
        ("<sip:127.0.0.2:5060;transport=UDP>", "Contact: <sip:127.0.0.2:5060;transport=UDP>"),
        (
            "<sip:127.0.0.2:5060;transport=UDP>;zone=us",
            "Contact: <sip:127.0.0.2:5060;transport=UDP>;zone=us",
        ),
    ],
)
def test_parse_contact_header(text, expected):
    header = parse_contact_header(text)
    assert isinstance(header, ContactHeader)
    assert str(header) == expected


def test_parse_contact_header_params():
    text = (
        '<sip:alice@example.com>;+sip.ice;reg-id=1;'
        '+sip.instance="<urn:uuid:a369bd8d-f310-4a95-8328-98c7ed3d5439>";expires=300'
    )
    header = parse_contact_header(text)
    assert header.display_name == ""
    assert str(header.address) == "sip:alice@example.com"
    assert header.params == {
        "+sip.ice": "",
        "reg-id": "1",
        "+sip.instance": '"<urn:uuid:a369bd8d-f310-4a95-8328-98c7ed3d5439>"',
        "expires": "300",
    }


def test_parse_contact_header_wildcard():
    header = parse_contact_header("*")
    assert header.value() == "*"


def test_parse_contact_header_comma():
    text = "<sip:a@example.com>;q=1, <sip:b@example.com>"
    with pytest.raises(CommaDetected) as exc:
        parse_contact_header(text)
    assert text[exc.value.index] == ","
    assert str(exc.value.header) == "Contact: <sip:a@example.com>;q=1"
    rest = parse_contact_header(text[exc.value.index + 1 :])
    assert rest.address.user == "b"


def test_parse_route_header_round_trip():
    text = "<sip:rr$n=net_me_tls@62.109.228.74:5061;transport=tls;lr>"
    header = parse_route_header(text)
    assert str(header) == "Route: " + text
    assert header.address.port == 5061


def test_parse_record_route_header_round_trip():
    text = "<sip:rr$n=net_me_tls@62.109.228.74:5061;transport=tls;lr>"
    header = parse_record_route_header(text)
    assert str(header) == "Record-Route: " + text


def test_parse_route_header_comma():
    text = "<sip:p1:5060;lr;transport=udp>, <sip:p2:5060;lr>"
    with pytest.raises(CommaDetected) as exc:
        parse_route_header(text)
    assert text[exc.value.index] == ","
    assert str(exc.value.header) == "Route: <sip:p1:5060;lr;transport=udp>"