import threading
import time

from chainbench.chain import Header, Subscription
from chainbench.errors import BlockLookupError

# Marker for a stream that stays open after its scripted headers.
OPEN = object()


def block_hash(height: int) -> str:
    return f"0x{height:064x}"


class FakeChainClient:
    """
    In-memory chain client replaying scripted header streams.

    Every interaction is appended to ``events`` so tests can check ordering:
    ("subscribe", kind), ("header", n), ("close", err), ("cancel", kind),
    ("lookup", height).
    """

    def __init__(self, new=(), finalized=(), end=OPEN, threaded=False, delay=0.01, known=None):
        self.streams = {"new": list(new), "finalized": list(finalized)}
        self.end = end
        self.threaded = threaded
        self.delay = delay
        self.known = known
        self.events: list[tuple] = []
        self.threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def _record(self, *event):
        with self._lock:
            self.events.append(event)

    def count(self, name: str) -> int:
        return sum(1 for e in self.events if e[0] == name)

    def subscribe_new_headers(self, on_header, on_close):
        return self._subscribe("new", on_header, on_close)

    def subscribe_finalized_headers(self, on_header, on_close):
        return self._subscribe("finalized", on_header, on_close)

    def _subscribe(self, kind, on_header, on_close):
        self._record("subscribe", kind)
        sub = Subscription(kind)

        def deliver_header(n):
            self._record("header", n)
            on_header(Header(number=n))

        def deliver_close(err):
            self._record("close", err)
            on_close(err)

        def feed():
            for n in self.streams[kind]:
                if self.threaded:
                    time.sleep(self.delay)
                if not sub.dispatch(deliver_header, n):
                    return
            if self.end is not OPEN:
                sub.dispatch(deliver_close, self.end)

        if self.threaded:
            thread = threading.Thread(target=feed, daemon=True)
            self.threads.append(thread)
            thread.start()
        else:
            feed()
        return sub

    def cancel(self, subscription):
        if subscription.cancel():
            self._record("cancel", subscription.kind)

    def get_block_hash(self, height):
        self._record("lookup", height)
        if self.known is not None and height not in self.known:
            raise BlockLookupError(height, "no block at that height yet")
        return block_hash(height)
