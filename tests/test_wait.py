import threading

import pytest

from chainbench.errors import (
    BlockLookupError,
    StreamClosed,
    SubscriptionError,
    WaitTimeout,
)
from chainbench.wait import BlockWaiter, wait_until, wait_until_with_value
from conftest import FakeChainClient, block_hash


def test_inclusion_resolves_on_target_header():
    client = FakeChainClient(new=[5, 7, 9])
    waiter = BlockWaiter(client)

    assert waiter.wait_for_inclusion(7) == block_hash(7)
    assert client.count("lookup") == 1
    assert ("lookup", 7) in client.events
    assert client.events[0] == ("subscribe", "new")


def test_finalization_uses_finalized_stream():
    client = FakeChainClient(new=[], finalized=[1, 2, 3])
    waiter = BlockWaiter(client)

    assert waiter.wait_for_finalization(2) == block_hash(2)
    assert client.events[0] == ("subscribe", "finalized")
    assert ("cancel", "finalized") in client.events


def test_lookup_is_for_target_not_header_height():
    # Stream skips straight past the target.
    client = FakeChainClient(new=[3, 10])
    waiter = BlockWaiter(client)

    assert waiter.wait_for_inclusion(6) == block_hash(6)
    lookups = [e for e in client.events if e[0] == "lookup"]
    assert lookups == [("lookup", 6)]


def test_single_cancel_before_lookup():
    client = FakeChainClient(new=[1, 2, 3], threaded=True)
    waiter = BlockWaiter(client, timeout=5)

    waiter.wait_for_inclusion(2)

    names = [e[0] for e in client.events]
    assert names.count("cancel") == 1
    assert names.count("subscribe") == 1
    assert names.index("cancel") < names.index("lookup")


def test_no_headers_after_cancel():
    client = FakeChainClient(new=range(100), threaded=True, delay=0.005)
    waiter = BlockWaiter(client, timeout=5)

    waiter.wait_for_inclusion(3)

    cancel_at = client.events.index(("cancel", "new"))
    assert all(e[0] != "header" for e in client.events[cancel_at:])
    for thread in client.threads:
        thread.join(timeout=1)
    assert client.count("header") < 100


def test_earlier_headers_do_not_resolve():
    client = FakeChainClient(new=[3, 4, 5])
    waiter = BlockWaiter(client)

    with pytest.raises(WaitTimeout):
        waiter.wait_for_inclusion(6, timeout=0.1)

    assert client.count("lookup") == 0
    assert client.count("cancel") == 1


def test_already_passed_height_resolves_on_first_header():
    client = FakeChainClient(new=[42])
    waiter = BlockWaiter(client)

    assert waiter.wait_for_inclusion(0) == block_hash(0)


def test_stream_closed_before_target():
    client = FakeChainClient(new=[1, 2], end=None)
    waiter = BlockWaiter(client, timeout=5)

    with pytest.raises(StreamClosed):
        waiter.wait_for_inclusion(10)

    assert client.count("cancel") == 1
    assert client.count("lookup") == 0


def test_stream_error_before_target():
    err = ConnectionError("socket reset")
    client = FakeChainClient(new=[1], end=err, threaded=True)
    waiter = BlockWaiter(client, timeout=5)

    with pytest.raises(SubscriptionError) as excinfo:
        waiter.wait_for_inclusion(10)

    assert excinfo.value.__cause__ is err
    assert not isinstance(excinfo.value, StreamClosed)
    assert client.count("cancel") == 1


def test_close_after_target_is_ignored():
    client = FakeChainClient(new=[1, 5], end=ConnectionError("late"))
    waiter = BlockWaiter(client)

    assert waiter.wait_for_inclusion(5) == block_hash(5)


def test_lookup_failure_propagates():
    client = FakeChainClient(new=[8], known={7})
    waiter = BlockWaiter(client)

    with pytest.raises(BlockLookupError) as excinfo:
        waiter.wait_for_inclusion(8)

    assert excinfo.value.height == 8
    assert client.count("cancel") == 1


@pytest.mark.parametrize("height", [-1, 1.5, "3", True, None])
def test_rejects_bad_heights(height):
    client = FakeChainClient(new=[1])
    waiter = BlockWaiter(client)

    with pytest.raises(ValueError):
        waiter.wait_for_inclusion(height)

    assert client.events == []


def test_call_timeout_overrides_default():
    client = FakeChainClient(new=[])
    waiter = BlockWaiter(client, timeout=60)

    with pytest.raises(WaitTimeout):
        waiter.wait_for_inclusion(1, timeout=0.05)


def test_concurrent_waits_are_independent():
    client = FakeChainClient(new=[1, 2, 3, 4, 5], threaded=True)
    waiter = BlockWaiter(client, timeout=5)
    results = {}

    def run(height):
        results[height] = waiter.wait_for_inclusion(height)

    threads = [threading.Thread(target=run, args=(h,)) for h in (2, 4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert results == {2: block_hash(2), 4: block_hash(4)}
    assert client.count("subscribe") == 2
    assert client.count("cancel") == 2


def test_wait_until_returns_once_true():
    calls = []

    def fn():
        calls.append(1)
        return len(calls) >= 3

    wait_until(fn, timeout=1, step=0.01)
    assert len(calls) == 3


def test_wait_until_times_out():
    with pytest.raises(WaitTimeout, match="never"):
        wait_until(lambda: False, error_with="never", timeout=0.05, step=0.01)


def test_wait_until_with_value_tolerates_errors():
    values = iter([RuntimeError("not yet"), 1, 5])

    def fn():
        v = next(values)
        if isinstance(v, Exception):
            raise v
        return v

    assert wait_until_with_value(fn, lambda v: v > 2, timeout=1, step=0.01) == 5
