"""
Configuration dataclasses for benchmark runs.

Values come from an optional TOML file and can be overridden from the
environment:

    [node]
    ws_url = "ws://127.0.0.1:9944"
    http_url = "http://127.0.0.1:9944"
    rpc_timeout = 30

    [wait]
    timeout = 120
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

import toml

ENV_PREFIX = "CHAINBENCH_"


@dataclass
class NodeConfig:
    ws_url: str = field(default="ws://127.0.0.1:9944")
    http_url: str = field(default="http://127.0.0.1:9944")
    rpc_timeout: int = field(default=30)
    ss58_format: int = field(default=42)


@dataclass
class WaitConfig:
    # None waits forever
    timeout: float | None = field(default=None)


@dataclass
class BenchConfig:
    node: NodeConfig = field(default_factory=NodeConfig)
    wait: WaitConfig = field(default_factory=WaitConfig)


def _build(cls, table: Mapping[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(table) - known
    if unknown:
        raise ValueError(f"unknown keys in [{section}]: {', '.join(sorted(unknown))}")
    return cls(**table)


def load_config(path: str | None = None, env: Mapping[str, str] | None = None) -> BenchConfig:
    """
    Load the benchmark config.

    Args:
        path: Optional TOML file. Missing tables fall back to defaults.
        env: Environment to read overrides from, defaults to ``os.environ``.

    Raises:
        ValueError: On unknown tables/keys or malformed override values.
    """
    env = os.environ if env is None else env
    data: dict[str, Any] = toml.load(path) if path is not None else {}

    unknown = set(data) - {"node", "wait"}
    if unknown:
        raise ValueError(f"unknown config tables: {', '.join(sorted(unknown))}")

    cfg = BenchConfig(
        node=_build(NodeConfig, data.get("node", {}), "node"),
        wait=_build(WaitConfig, data.get("wait", {}), "wait"),
    )

    if (ws_url := env.get(f"{ENV_PREFIX}WS_URL")) is not None:
        cfg.node.ws_url = ws_url
    if (http_url := env.get(f"{ENV_PREFIX}HTTP_URL")) is not None:
        cfg.node.http_url = http_url
    if (rpc_timeout := env.get(f"{ENV_PREFIX}RPC_TIMEOUT")) is not None:
        cfg.node.rpc_timeout = int(rpc_timeout)
    if (wait_timeout := env.get(f"{ENV_PREFIX}WAIT_TIMEOUT")) is not None:
        cfg.wait.timeout = float(wait_timeout) if wait_timeout else None

    return cfg
