"""
Benchmark helpers for Substrate chains.
Provides block inclusion/finalization waiters and random payload generation.
"""

from .chain import ChainClient, Header, Subscription
from .config import BenchConfig, NodeConfig, WaitConfig, load_config
from .errors import (
    BenchError,
    BlockLookupError,
    RandomSourceUnavailable,
    StreamClosed,
    SubscriptionError,
    WaitTimeout,
)
from .log import setup_logging
from .payload import ALPHABET, PAYLOAD_SIZE, generate_payloads, random_payload
from .rpc import JsonRpcClient, RpcError
from .substrate import SubstrateChainClient
from .wait import BlockWaiter, wait_until, wait_until_with_value

__all__ = [
    "ALPHABET",
    "PAYLOAD_SIZE",
    "BenchConfig",
    "BenchError",
    "BlockLookupError",
    "BlockWaiter",
    "ChainClient",
    "Header",
    "JsonRpcClient",
    "NodeConfig",
    "RandomSourceUnavailable",
    "RpcError",
    "StreamClosed",
    "SubscriptionError",
    "SubstrateChainClient",
    "Subscription",
    "WaitConfig",
    "WaitTimeout",
    "generate_payloads",
    "load_config",
    "random_payload",
    "setup_logging",
    "wait_until",
    "wait_until_with_value",
]
