# sipwire

A pure-Python library for SIP (RFC 3261) messages. It parses messages from
bytes, either whole or as a stream of chunks. It builds requests and
responses and derives transaction keys and dialog IDs. It has no
dependencies outside the standard library.

## What is in it

- `sipwire.parser`: `Parser.parse_sip` and `parse_message` parse one
  complete message. The errors it raises are `ParseError` and its subclasses
  `LineNoCRLFError`, `ParseEOFError`, `SipPartialError` and
  `ReadBodyIncompleteError`. When the start line has no CR, it raises
  `EOFError`.
- `sipwire.parser_stream`: `ParserStream.parse_sip_stream` takes data as it
  arrives and returns every message the data completes. When more data is
  needed it raises `SipPartialError`. The error's `messages` attribute holds
  any messages completed earlier in the same call.
- `sipwire.headers`: typed headers (`ViaHeader`, `FromHeader`, `ToHeader`,
  `ContactHeader`, `CallIDHeader`, `CSeqHeader`, `MaxForwardsHeader`,
  `ExpiresHeader`, `ContentLengthHeader`, `ContentTypeHeader`, `RouteHeader`,
  `RecordRouteHeader`), `GenericHeader` and `new_header` for all others, plus
  `StatusCode` and the request method constants (`INVITE`, `ACK`, `CANCEL`,
  ...).
- `sipwire.header_parser`: `default_headers_parser()` returns the mapping
  from lower-case header name to parser. It includes the compact forms `v`,
  `f`, `t`, `m`, `i`, `l` and `c`. `parse_msg_header` turns a header line
  into headers. A comma-separated value becomes several headers.
- `sipwire.uri` and `sipwire.address`: `parse_uri`, `Uri`,
  `parse_address_value` and the parsers for the From, To, Contact, Route and
  Record-Route values.
- `sipwire.params`: `HeaderParams` and `unmarshal_params`.
- `sipwire.message`: `HeaderList`, which keeps headers in wire order. Its
  accessors `via()`, `from_()`, `to()`, `cseq()`, `contact()` and so on parse
  lazily. `Message` adds the body (`set_body` keeps Content-Length in step)
  and the transport, source and destination.
- `sipwire.request` and `sipwire.response`: `Request`, `Response`,
  `new_ack_request`, `new_ack_request_non2xx`, `new_cancel_request`,
  `new_response_from_request` and `new_sdp_response_from_request`.
- `sipwire.ids` and `sipwire.dialog`: `generate_branch`, `generate_tag_n`,
  `make_dialog_id`, `make_dialog_id_from_request` and
  `make_dialog_id_from_response`.
- `sipwire.transaction`: `make_server_tx_key`, `make_client_tx_key`,
  `is_rfc3261`, the `Timers` values and `set_timers`, `TransactionStore`, and
  the `TransactionError` family.

## Installation

```
pip install sipwire
```

## Parsing a message

```python
from sipwire.parser import Parser

data = (
    b"SIP/2.0 180 Ringing\r\n"
    b"Via: SIP/2.0/UDP 127.0.0.20:5060;branch=z9hG4bK-1\r\n"
    b"From: <sip:alice@example.com>;tag=abc\r\n"
    b"To: <sip:bob@example.com>;tag=def\r\n"
    b"Call-ID: 1-543537@127.0.0.10\r\n"
    b"CSeq: 1 INVITE\r\n"
    b"Content-Length: 0\r\n"
    b"\r\n"
)

msg = Parser().parse_sip(data)
print(msg.start_line())       # SIP/2.0 180 Ringing
print(msg.via().host)         # 127.0.0.20
print(msg.from_().address)    # sip:alice@example.com
```

## Parsing a stream

```python
from sipwire.parser import Parser, SipPartialError

stream = Parser().new_sip_stream()
for chunk in chunks:
    try:
        messages = stream.parse_sip_stream(chunk)
    except SipPartialError as partial:
        messages = partial.messages  # the rest waits for more data
    for message in messages:
        handle(message)
```

## Building a response

```python
from sipwire.response import new_response_from_request

response = new_response_from_request(request, 200, "OK", None)
print(str(response))
```

Every response other than 100 Trying gets a `tag` on its To header if the
request had none.

## What it does not do

sipwire does no networking. It opens no sockets and has no UDP, TCP, TLS or
WebSocket transports. It also has no client or server transaction state
machines and no retransmission timers that run. `sipwire.transaction` only
computes transaction keys, holds the timer values and stores transactions
that you create yourself. Sending, receiving and retransmitting messages is
left to the application.

## Running the tests

```
pip install -e ".[test]"
pytest
```