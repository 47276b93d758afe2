"""
Chain client capability set consumed by the block waiter.

The waiter never talks to a node directly. It only needs header streams, a way
to cancel them, and a point lookup of the block hash at a height. Anything
implementing `ChainClient` will do; `chainbench.substrate` ships the adapter
for Substrate nodes.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

HeaderCallback = Callable[["Header"], None]
CloseCallback = Callable[[BaseException | None], None]


@dataclass(frozen=True)
class Header:
    number: int
    parent_hash: str | None = field(default=None)

    @classmethod
    def from_rpc(cls, obj: dict[str, Any]) -> "Header":
        """
        Build a header from a subscription notification.

        Accepts either a bare header or one wrapped as ``{"header": {...}}``,
        and block numbers given as ints or hex strings.
        """
        raw = obj.get("header", obj)
        number = raw["number"]
        if isinstance(number, str):
            number = int(number, 16)
        return cls(number=number, parent_hash=raw.get("parentHash"))


class Subscription:
    """
    Cancellable handle for one header stream.

    Callbacks are dispatched under the handle's lock and dropped once the
    handle is cancelled, so after `cancel()` returns no callback can run.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._lock = threading.RLock()
        self._cancelled = False
        self._on_cancel: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def add_cancel_hook(self, hook: Callable[[], None]):
        self._on_cancel.append(hook)

    def dispatch(self, fn: Callable[..., None], *args) -> bool:
        """Run ``fn(*args)`` unless cancelled. Returns whether it ran."""
        with self._lock:
            if self._cancelled:
                return False
            fn(*args)
            return True

    def cancel(self) -> bool:
        """
        Cancel the stream. Idempotent.

        Returns True only for the call that actually cancelled it.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
        for hook in self._on_cancel:
            hook()
        return True

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<Subscription {self.kind} {state}>"


class ChainClient(Protocol):
    """Protocol for the chain client operations the waiter relies on."""

    def subscribe_new_headers(
        self, on_header: HeaderCallback, on_close: CloseCallback
    ) -> Subscription: ...

    def subscribe_finalized_headers(
        self, on_header: HeaderCallback, on_close: CloseCallback
    ) -> Subscription: ...

    def cancel(self, subscription: Subscription) -> None: ...

    def get_block_hash(self, height: int) -> str: ...
