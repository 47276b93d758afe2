"""
Simple JSON-RPC client for point lookups against a node's HTTP endpoint.
"""

import json
import logging
from typing import Any

import requests


class RpcError(Exception):
    """Raised when an RPC call returns an error."""

    def __init__(self, error: dict):
        self.code = error.get("code")
        self.message = error.get("message")
        self.data = error.get("data")
        super().__init__(f"RPC Error {self.code}: {self.message}")


class JsonRpcClient:
    """
    JSON-RPC 2.0 client.

    Supports attribute-style method calls:
        rpc.chain_getBlockHash(42)
        rpc.system_health()

    Usage:
        rpc = JsonRpcClient("http://localhost:9944")
        block_hash = rpc.chain_getBlockHash(42)
    """

    def __init__(self, url: str, name: str | None = None, timeout: int = 30):
        self.url = url
        self.name = name or url
        self.timeout = timeout
        self.id_counter = 0
        self.logger = logging.getLogger(f"rpc.{self.name}")

    def __getattr__(self, method: str):
        """
        Allow method calls as attributes.
        rpc.chain_getBlockHash(1) -> calls "chain_getBlockHash" method
        """
        if method.startswith("_"):
            raise AttributeError(method)

        def rpc_call(*params):
            return self._call(method, params)

        return rpc_call

    def _call(self, method: str, params: tuple) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            Result from RPC call

        Raises:
            RpcError: If the RPC returns an error
            requests.RequestException: If the HTTP request fails
        """
        self.id_counter += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": self.id_counter,
        }

        self.logger.debug(f"RPC call: {method}({params})")

        try:
            resp = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            self.logger.warning(f"RPC request failed: {e}")
            raise

        try:
            result = resp.json()
        except json.JSONDecodeError as e:
            self.logger.warning(f"Invalid JSON response: {resp.text}")
            raise RpcError({"code": -1, "message": f"Invalid JSON: {e}"}) from e

        if "error" in result:
            error = result.get("error", {})
            self.logger.warning(f"RPC error: {error}")
            raise RpcError(error)

        return result.get("result")

    def call(self, method: str, *params) -> Any:
        """
        Explicit call method (alternative to attribute style).

        Usage:
            rpc.call("system_health")
            rpc.call("chain_getBlockHash", 42)
        """
        return self._call(method, params)
