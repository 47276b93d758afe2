"""
Substrate node adapter for the chain client protocol.

Header streams use substrate-interface over a websocket. Every subscription
gets its own connection and reader thread, so cancelling one just closes its
socket. Block hash lookups go over the node's HTTP JSON-RPC endpoint and
never share a socket with a stream.
"""

import logging
import threading

import requests
from substrateinterface import SubstrateInterface

from chainbench.chain import CloseCallback, Header, HeaderCallback, Subscription
from chainbench.config import NodeConfig
from chainbench.errors import BlockLookupError, SubscriptionError
from chainbench.rpc import JsonRpcClient, RpcError
from chainbench.wait import wait_until

logger = logging.getLogger(__name__)


class SubstrateChainClient:
    """
    `ChainClient` backed by a Substrate node.

    Usage:
        client = SubstrateChainClient(NodeConfig(ws_url="ws://localhost:9944"))
        client.wait_for_ready()
        sub = client.subscribe_new_headers(on_header, on_close)
        ...
        client.cancel(sub)
    """

    def __init__(self, config: NodeConfig):
        self.config = config
        self.rpc = JsonRpcClient(config.http_url, name="substrate", timeout=config.rpc_timeout)

    def _connect(self) -> SubstrateInterface:
        return SubstrateInterface(url=self.config.ws_url, ss58_format=self.config.ss58_format)

    def subscribe_new_headers(
        self, on_header: HeaderCallback, on_close: CloseCallback
    ) -> Subscription:
        return self._subscribe("new", False, on_header, on_close)

    def subscribe_finalized_headers(
        self, on_header: HeaderCallback, on_close: CloseCallback
    ) -> Subscription:
        return self._subscribe("finalized", True, on_header, on_close)

    def _subscribe(
        self,
        kind: str,
        finalized_only: bool,
        on_header: HeaderCallback,
        on_close: CloseCallback,
    ) -> Subscription:
        try:
            substrate = self._connect()
        except Exception as e:
            raise SubscriptionError(f"can't open {kind} header stream: {e}") from e

        sub = Subscription(kind)
        sub.add_cancel_hook(substrate.close)

        def handler(obj, update_nr, subscription_id):
            # Any non-None return makes substrate-interface unsubscribe.
            if sub.cancelled:
                return True
            sub.dispatch(on_header, Header.from_rpc(obj))
            return True if sub.cancelled else None

        def run():
            try:
                substrate.subscribe_block_headers(handler, finalized_only=finalized_only)
            except Exception as e:
                if sub.cancelled:
                    logger.debug(f"{kind} header stream stopped after cancel: {e}")
                    return
                logger.warning(f"{kind} header stream failed: {e}")
                sub.dispatch(on_close, e)
                return
            sub.dispatch(on_close, None)

        thread = threading.Thread(target=run, name=f"headers-{kind}", daemon=True)
        thread.start()
        logger.debug(f"subscribed to {kind} headers on {self.config.ws_url}")
        return sub

    def cancel(self, subscription: Subscription) -> None:
        if subscription.cancel():
            logger.debug(f"cancelled {subscription.kind} header stream")

    def get_block_hash(self, height: int) -> str:
        try:
            block_hash = self.rpc.chain_getBlockHash(height)
        except (RpcError, requests.RequestException) as e:
            raise BlockLookupError(height, str(e)) from e
        if block_hash is None:
            raise BlockLookupError(height, "no block at that height yet")
        return str(block_hash)

    def check_health(self) -> bool:
        """Returns whether the node answers `system_health` over HTTP."""
        try:
            self.rpc.system_health()
            return True
        except (RpcError, requests.RequestException):
            return False

    def wait_for_ready(self, timeout: int = 30, interval: float = 0.5) -> None:
        """
        Wait until the node answers RPCs.

        Raises:
            WaitTimeout: If the node isn't ready within timeout
        """
        wait_until(
            self.check_health,
            error_with=f"node at {self.config.http_url} not ready",
            timeout=timeout,
            step=interval,
        )
