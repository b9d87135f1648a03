"""Transaction timers, errors, keys and the transaction store."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from .headers import ACK, INVITE
from .ids import RFC3261_BRANCH_MAGIC_COOKIE, TX_SEPARATOR
from .message import Message
from .uri import default_port


class TransactionError(Exception):
    """Base class of transaction layer errors."""


class TransactionTimeoutError(TransactionError):
    """The transaction timed out."""


class TransactionTransportError(TransactionError):
    """The transport failed while the transaction was running."""


class TransactionCanceledError(TransactionError):
    """The transaction was canceled."""


@dataclass
class Timers:
    """SIP timers in seconds, derived from T1, T2 and T4 (RFC 3261 17)."""

    t1: float = 0.5
    t2: float = 4.0
    t4: float = 5.0
    timer_1xx: float = 0.2

    @property
    def timer_a(self) -> float:
        return self.t1

    @property
    def timer_b(self) -> float:
        return 64 * self.t1

    @property
    def timer_d(self) -> float:
        return 32.0

    @property
    def timer_e(self) -> float:
        return self.t1

    @property
    def timer_f(self) -> float:
        return 64 * self.t1

    @property
    def timer_g(self) -> float:
        return self.t1

    @property
    def timer_h(self) -> float:
        return 64 * self.t1

    @property
    def timer_i(self) -> float:
        return self.t4

    @property
    def timer_j(self) -> float:
        return 64 * self.t1

    @property
    def timer_k(self) -> float:
        return self.t4

    @property
    def timer_l(self) -> float:
        return 64 * self.t1

    @property
    def timer_m(self) -> float:
        return 64 * self.t1


TIMERS = Timers()


def set_timers(t1: float, t2: float, t4: float) -> Timers:
    """Set the base timers (seconds) used by transactions and return them."""
    TIMERS.t1 = t1
    TIMERS.t2 = t2
    TIMERS.t4 = t4
    return TIMERS


def is_rfc3261(branch: Optional[str]) -> bool:
    """Return True for a branch that starts with the RFC 3261 magic cookie."""
    return (
        bool(branch)
        and branch.startswith(RFC3261_BRANCH_MAGIC_COOKIE)
        and branch[len(RFC3261_BRANCH_MAGIC_COOKIE) :] != ""
    )


def _short(msg: Message) -> str:
    return msg.short()


def make_server_tx_key(msg: Message, as_method: Optional[str] = None) -> str:
    """Build the key matching retransmitted requests (RFC 3261 17.2.3)."""
    via = msg.via()
    if via is None:
        raise ValueError(f"'Via' header not found or empty in message '{_short(msg)}'")

    cseq = msg.cseq()
    if cseq is None:
        raise ValueError(f"'CSeq' header not found in message '{_short(msg)}'")

    method = cseq.method_name
    if method == ACK:
        method = INVITE
    if as_method:
        method = as_method

    branch = via.params.get("branch") if via.params is not None else None
    if is_rfc3261(branch):
        port = via.port if via.port > 0 else default_port(via.transport)
        return TX_SEPARATOR.join((branch, via.host, str(port), str(method)))

    # RFC 2543 compliant key
    from_ = msg.from_()
    if from_ is None:
        raise ValueError(f"'From' header not found in message '{_short(msg)}'")
    if from_.params is None or "tag" not in from_.params:
        raise ValueError(
            f"'tag' param not found in 'From' header of message '{_short(msg)}'"
        )
    call_id = msg.call_id()
    if call_id is None:
        raise ValueError(f"'Call-ID' header not found in message '{_short(msg)}'")

    parts = (
        from_.params["tag"],
        str(call_id),
        str(method),
        str(cseq.seq_no),
        str(via),
    )
    return TX_SEPARATOR.join(parts) + TX_SEPARATOR


def make_client_tx_key(msg: Message, as_method: Optional[str] = None) -> str:
    """Build the key matching responses to a client transaction (RFC 3261 17.1.3)."""
    cseq = msg.cseq()
    if cseq is None:
        raise ValueError(f"'CSeq' header not found in message '{_short(msg)}'")

    method = cseq.method_name
    if method == ACK:
        method = INVITE
    if as_method:
        method = as_method

    via = msg.via()
    if via is None:
        raise ValueError(f"'Via' header not found or empty in message '{_short(msg)}'")

    branch = via.params.get("branch") if via.params is not None else None
    if not is_rfc3261(branch):
        raise ValueError(
            f"'branch' not found or empty in 'Via' header of message '{_short(msg)}'"
        )
    return f"{branch}{TX_SEPARATOR}{method}"


class TransactionStore:
    """Thread-safe mapping of transaction keys to transactions."""

    def __init__(self) -> None:
        self._transactions: Dict[str, object] = {}
        self._lock = threading.RLock()

    def put(self, key: str, tx: object) -> None:
        """Store ``tx`` under ``key``."""
        with self._lock:
            self._transactions[key] = tx

    def get(self, key: str) -> Optional[object]:
        """Return the transaction stored under ``key``, or None."""
        with self._lock:
            return self._transactions.get(key)

    def drop(self, key: str) -> bool:
        """Remove ``key``; return True when it was present."""
        with self._lock:
            return self._transactions.pop(key, None) is not None

    def terminate_all(self) -> None:
        """Terminate every stored transaction.

        Termination may remove the transaction from the store, so the lock
        is not held while calling it.
        """
        with self._lock:
            snapshot = list(self._transactions.values())
        for tx in snapshot:
            tx.terminate()

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)