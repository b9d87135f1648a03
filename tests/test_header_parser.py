import pytest

from sipwire.header_parser import (
    default_headers_parser,
    parse_call_id_header,
    parse_content_length_header,
    parse_content_type_header,
    parse_cseq_header,
    parse_max_forwards_header,
    parse_msg_header,
)
from sipwire.headers import (
    ContactHeader,
    GenericHeader,
    MaxForwardsHeader,
    ViaHeader,
)


class _Collector:
    def __init__(self):
        self.headers = []

    def append_header(self, header):
        self.headers.append(header)

    def get_headers(self, name):
        return [h for h in self.headers if h.name.lower() == name.lower()]


def _parse(line):
    msg = _Collector()
    parse_msg_header(default_headers_parser(), msg, line)
    return msg


def test_via_header():
    header = "Via: SIP/2.0/UDP 127.0.0.2:5060;rport;branch=z9hG4bK.abcdefgh"
    msg = _parse(header)
    assert str(msg.headers[0]) == header


def test_via_torture():
    msg = _parse("Via: SIP  /   2.0\n /UDP\n\t192.0.2.2  ;  branch=390skdjuw")
    via = msg.headers[0]
    assert str(via) == "Via: SIP/2.0/UDP 192.0.2.2;branch=390skdjuw"
    assert isinstance(via, ViaHeader)
    assert via.transport == "UDP"


def test_to_header():
    header = 'To: "Bob" <sip:bob@127.0.0.1:5060>;xxx=xxx;yyyy=yyyy'
    assert str(_parse(header).headers[0]) == header

    msg = _parse("t: sip:alice@localhost;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM")
    (to,) = msg.get_headers("To")
    assert str(to) == "To: <sip:alice@localhost>;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM"


def test_from_header():
    header = 'From: "Bob" <sip:bob@127.0.0.1:5060>'
    assert str(_parse(header).headers[0]) == header

    msg = _parse("f: sip:alice@localhost;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM")
    (frm,) = msg.get_headers("From")
    assert str(frm) == "From: <sip:alice@localhost>;tag=4kRDkjpU3xxLzmIHPn2646xwZVNeLPUM"


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Contact: sip:sipp@127.0.0.3:5060", "Contact: <sip:sipp@127.0.0.3:5060>"),
        ("Contact: SIPP <sip:sipp@127.0.0.3:5060>", 'Contact: "SIPP" <sip:sipp@127.0.0.3:5060>'),
        (
            "Contact: <sip:127.0.0.2:5060;transport=UDP>",
            "Contact: <sip:127.0.0.2:5060;transport=UDP>",
        ),
        (
            "Contact: <sip:127.0.0.2:5060;transport=UDP>;zone=us",
            "Contact: <sip:127.0.0.2:5060;transport=UDP>;zone=us",
        ),
    ],
)
def test_contact_header(header, expected):
    contact = _parse(header).headers[0]
    assert isinstance(contact, ContactHeader)
    assert str(contact) == expected


def test_contact_header_params():
    line = (
        'Contact: <sip:alice@example.com>;+sip.ice;reg-id=1;'
        '+sip.instance="<urn:uuid:a369bd8d-f310-4a95-8328-98c7ed3d5439>";expires=300'
    )
    contact = _parse(line).headers[0]
    assert contact.display_name == ""
    assert str(contact.address) == "sip:alice@example.com"
    assert contact.params == {
        "+sip.ice": "",
        "reg-id": "1",
        "+sip.instance": '"<urn:uuid:a369bd8d-f310-4a95-8328-98c7ed3d5439>"',
        "expires": "300",
    }


def test_contact_compact_form():
    msg = _parse("m: <sip:test@10.5.0.1:51477;ob>")
    assert msg.headers[0].address.user == "test"


def test_multiple_contacts_split():
    msg = _parse("Contact: <sip:a@example.com>, <sip:b@example.com>")
    assert [h.address.user for h in msg.headers] == ["a", "b"]


@pytest.mark.parametrize("name", ["Route", "Record-Route"])
def test_route_headers(name):
    header = f"{name}: <sip:rr$n=net_me_tls@62.109.228.74:5061;transport=tls;lr>"
    assert str(_parse(header).headers[0]) == header


def test_max_forwards():
    header = "Max-Forwards: 70"
    h = _parse(header).headers[0]
    assert isinstance(h, MaxForwardsHeader)
    assert h.value() == "70"
    assert str(h) == header


def test_via_with_comma_splits():
    line = (
        "Via: SIP/2.0/UDP 127.0.0.20:5060;branch=z9hG4bK.VYWrxJJyeEJfngAjKXELr8aPYuX8tR22;alias, "
        "SIP/2.0/UDP 127.0.0.10:5060;branch=z9hG4bK-543537-1-0"
    )
    vias = _parse(line).get_headers("via")
    assert len(vias) == 2
    assert vias[0].params["branch"] == "z9hG4bK.VYWrxJJyeEJfngAjKXELr8aPYuX8tR22"
    assert vias[1].params["branch"] == "z9hG4bK-543537-1-0"
    assert "," not in str(vias[1])


def test_compact_via_call_id_and_length():
    via = _parse(
        "v: SIP/2.0/UDP 10.5.0.1:51477;rport;branch=z9hG4bKPj55659194-de09-497e-8cd0-978755d148bc"
    ).headers[0]
    assert via.port == 51477
    call_id = _parse("i: 6d3e7e31-f58e-4d7e-8bc3-1c7efa230424").headers[0]
    assert call_id.value() == "6d3e7e31-f58e-4d7e-8bc3-1c7efa230424"
    length = _parse("l:  0").headers[0]
    assert str(length) == "Content-Length: 0"


def test_generic_header_kept_verbatim():
    msg = _parse("Allow:  INVITE, ACK, CANCEL ")
    header = msg.headers[0]
    assert isinstance(header, GenericHeader)
    assert str(header) == "Allow: INVITE, ACK, CANCEL"


def test_field_name_whitespace_trimmed():
    assert str(_parse("Content-Length   : 150").headers[0]) == "Content-Length: 150"


def test_no_colon_raises():
    with pytest.raises(ValueError):
        _parse("NoColonHere")


def test_cseq():
    cseq = parse_cseq_header("1234 INVITE")
    assert cseq.seq_no == 1234
    assert cseq.method_name == "INVITE"
    assert str(cseq) == "CSeq: 1234 INVITE"


@pytest.mark.parametrize("text", ["1234", " INVITE", "x INVITE", "2147483648 INVITE", "1 "])
def test_cseq_bad(text):
    with pytest.raises(ValueError):
        parse_cseq_header(text)


@pytest.mark.parametrize("text", ["-1", "abc", "4294967296", ""])
def test_max_forwards_bad(text):
    with pytest.raises(ValueError):
        parse_max_forwards_header(text)


def test_content_length_and_type():
    assert parse_content_length_header(" 562 ").length == 562
    assert parse_content_type_header(" application/sdp ").value() == "application/sdp"
    with pytest.raises(ValueError):
        parse_content_type_header("   ")
    with pytest.raises(ValueError):
        parse_call_id_header("")


def test_default_headers_parser_is_a_copy():
    parsers = default_headers_parser()
    assert parsers["v"] is parsers["via"]
    parsers.pop("via")
    assert "via" in default_headers_parser()