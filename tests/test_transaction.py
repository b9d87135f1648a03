import pytest

from sipwire.ids import RFC3261_BRANCH_MAGIC_COOKIE, TX_SEPARATOR
from sipwire.parser import parse_message
from sipwire.transaction import (
    TIMERS,
    TransactionStore,
    is_rfc3261,
    make_client_tx_key,
    make_server_tx_key,
    set_timers,
)


@pytest.fixture
def restore_timers():
    saved = (TIMERS.t1, TIMERS.t2, TIMERS.t4)
    yield
    set_timers(*saved)


def _message(via="SIP/2.0/UDP 127.0.0.2:5060;branch=z9hG4bK.abc", cseq="1 INVITE"):
    lines = ["INVITE sip:bob@example.com SIP/2.0"]
    if via:
        lines.append("Via: " + via)
    lines += [
        "From: <sip:alice@example.com>;tag=fromtag",
        "To: <sip:bob@example.com>",
        "Call-ID: call-1",
    ]
    if cseq:
        lines.append("CSeq: " + cseq)
    lines += ["", ""]
    return parse_message("\r\n".join(lines))


def test_standard_timer_values(restore_timers):
    timers = set_timers(0.5, 4.0, 5.0)
    assert timers.timer_d == 32.0
    assert timers.timer_b == 32.0
    assert timers.timer_a == 0.5
    assert timers.timer_i == 5.0


def test_set_timers_derives_others(restore_timers):
    timers = set_timers(0.001, 0.002, 0.003)
    assert timers.timer_a == 0.001
    assert timers.timer_f == 64 * 0.001
    assert timers.timer_i == 0.003
    assert timers.timer_k == timers.t4
    assert timers.timer_m == timers.timer_b


def test_is_rfc3261():
    assert is_rfc3261("z9hG4bK.abc")
    assert not is_rfc3261(RFC3261_BRANCH_MAGIC_COOKIE)
    assert not is_rfc3261("")
    assert not is_rfc3261("1234")


def test_client_key():
    assert make_client_tx_key(_message()) == "z9hG4bK.abc" + TX_SEPARATOR + "INVITE"


def test_client_key_ack_maps_to_invite():
    assert make_client_tx_key(_message(cseq="1 ACK")) == make_client_tx_key(_message())


def test_client_key_as_method():
    assert make_client_tx_key(_message(), "CANCEL").endswith(TX_SEPARATOR + "CANCEL")


def test_client_key_requires_rfc3261_branch():
    msg = _message(via="SIP/2.0/UDP 127.0.0.2:5060;branch=1234")
    with pytest.raises(ValueError, match="'branch' not found"):
        make_client_tx_key(msg)


def test_client_key_requires_cseq():
    with pytest.raises(ValueError, match="'CSeq' header not found"):
        make_client_tx_key(_message(cseq=None))


def test_server_key_rfc3261():
    key = make_server_tx_key(_message())
    assert key == TX_SEPARATOR.join(("z9hG4bK.abc", "127.0.0.2", "5060", "INVITE"))


def test_server_key_default_port():
    msg = _message(via="SIP/2.0/UDP 127.0.0.2;branch=z9hG4bK.abc")
    assert make_server_tx_key(msg) == make_server_tx_key(_message())


def test_server_key_ack_matches_invite():
    assert make_server_tx_key(_message(cseq="1 ACK")) == make_server_tx_key(_message())


def test_server_key_rfc2543():
    msg = _message(via="SIP/2.0/UDP 127.0.0.2:5060;branch=1234")
    key = make_server_tx_key(msg)
    expected = TX_SEPARATOR.join(
        ("fromtag", str(msg.call_id()), "INVITE", "1", str(msg.via()))
    ) + TX_SEPARATOR
    assert key == expected


def test_server_key_requires_via():
    with pytest.raises(ValueError, match="'Via' header not found"):
        make_server_tx_key(_message(via=None))


class _FakeTx:
    def __init__(self, store, key):
        self.store = store
        self.key = key
        self.terminated = False

    def terminate(self):
        self.terminated = True
        self.store.drop(self.key)


def test_store_put_get_drop():
    store = TransactionStore()
    tx = object()
    store.put("k", tx)
    assert store.get("k") is tx
    assert store.drop("k") is True
    assert store.drop("k") is False
    assert store.get("k") is None


def test_store_terminate_all():
    store = TransactionStore()
    txs = [_FakeTx(store, key) for key in ("a", "b", "c")]
    for tx in txs:
        store.put(tx.key, tx)
    store.terminate_all()
    assert all(tx.terminated for tx in txs)
    assert len(store) == 0