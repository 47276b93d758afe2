"""
Waiting utilities for benchmark synchronization.

Usage:
    from chainbench import BlockWaiter, SubstrateChainClient

    client = SubstrateChainClient(config.node)
    waiter = BlockWaiter(client, timeout=60)

    block_hash = waiter.wait_for_inclusion(100)
    final_hash = waiter.wait_for_finalization(100)
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from chainbench.chain import ChainClient, CloseCallback, Header, HeaderCallback, Subscription
from chainbench.errors import StreamClosed, SubscriptionError, WaitTimeout

logger = logging.getLogger(__name__)


def wait_until(
    fn: Callable[[], Any],
    error_with: str = "Timed out",
    timeout: int = 30,
    step: float = 0.5,
):
    """
    Wait until a function call returns truth value, given time step, and timeout.
    This function waits until function call returns truth value at the interval of step seconds.
    """
    for _ in range(math.ceil(timeout / step)):
        try:
            if fn():
                return
        except Exception as e:
            ety = type(e)
            logger.warning(f"caught exception {ety}, will still wait for timeout: {e}")
        time.sleep(step)
    raise WaitTimeout(error_with)


T = TypeVar("T")


def wait_until_with_value(
    fn: Callable[..., T],
    predicate: Callable[[T], bool],
    error_with: str = "Timed out",
    timeout: int = 5,
    step: float = 0.5,
) -> T:
    """
    Similar to `wait_until` but this returns the value of the function.
    This also takes another predicate which acts on the function value and returns a bool
    """
    for _ in range(math.ceil(timeout / step)):
        try:
            r = fn()
            logger.debug(f"waiting.. current value: {r}")
            if predicate(r):
                return r
        except Exception as e:
            ety = type(e)
            logger.warning(f"caught exception {ety}, will still wait for timeout: {e}")
        time.sleep(step)
    raise WaitTimeout(error_with)


class _HeightWatch:
    """
    One-shot resolution state for a single wait call.

    The first header at or above the target, or the first stream failure,
    resolves it. Everything after that is ignored.
    """

    def __init__(self, height: int, logger: logging.Logger):
        self.height = height
        self.logger = logger
        self.header: Header | None = None
        self.error: BaseException | None = None
        self._lock = threading.Lock()
        self._done = threading.Event()

    def on_header(self, header: Header):
        self.logger.debug(f"saw header {header.number} (target {self.height})")
        with self._lock:
            if self._done.is_set():
                return
            if header.number >= self.height:
                self.header = header
                self._done.set()

    def on_close(self, error: BaseException | None):
        with self._lock:
            if self._done.is_set():
                return
            self.error = error
            self._done.set()

    def wait(self, timeout: float | None) -> bool:
        return self._done.wait(timeout)


def _check_height(height: int):
    if isinstance(height, bool) or not isinstance(height, int) or height < 0:
        raise ValueError(f"block height must be a non-negative int, got {height!r}")


class BlockWaiter:
    """
    Waits for a block height to show up on a header stream.

    Each wait subscribes, resolves on the first header with a number at or
    above the target, cancels its subscription exactly once and then fetches
    the block hash at the target height. Calls share no state, so several
    can run at once from different threads.

    Note that nothing checks the chain head before subscribing. Substrate
    nodes push the current head as the first notification, so a height that
    has already passed resolves on that first header. A client whose streams
    don't do that would block until `timeout`.
    """

    def __init__(
        self,
        client: ChainClient,
        logger: logging.Logger | None = None,
        timeout: float | None = None,
    ):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout

    def wait_for_inclusion(self, height: int, timeout: float | None = None) -> str:
        """
        Waits until a block at ``height`` or above is imported and returns the
        hash of the block at ``height``.
        """
        return self._wait_for_block(
            self.client.subscribe_new_headers, "inclusion", height, timeout
        )

    def wait_for_finalization(self, height: int, timeout: float | None = None) -> str:
        """
        Waits until a block at ``height`` or above is finalized and returns the
        hash of the block at ``height``.
        """
        return self._wait_for_block(
            self.client.subscribe_finalized_headers, "finalization", height, timeout
        )

    def _wait_for_block(
        self,
        subscribe: Callable[[HeaderCallback, CloseCallback], Subscription],
        stage: str,
        height: int,
        timeout: float | None,
    ) -> str:
        _check_height(height)
        timeout = timeout if timeout is not None else self.timeout

        self.logger.info(f"waiting for {stage} of block {height}")
        watch = _HeightWatch(height, self.logger)
        subscription = subscribe(watch.on_header, watch.on_close)
        try:
            resolved = watch.wait(timeout)
        finally:
            self.client.cancel(subscription)

        if not resolved:
            raise WaitTimeout(f"Timeout: waiting for {stage} of block {height}")

        if watch.header is None:
            if watch.error is None:
                raise StreamClosed(f"header stream closed before {stage} of block {height}")
            raise SubscriptionError(
                f"header stream failed before {stage} of block {height}: {watch.error}"
            ) from watch.error

        self.logger.info(f"block {height} reached {stage} (header {watch.header.number})")
        return str(self.client.get_block_hash(height))
