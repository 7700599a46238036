"""Minimal EVM JSON-RPC client for the Hyperion chain."""

import itertools
import logging
from typing import Any, Optional

import httpx
from eth_utils import to_hex

from trustboard.exceptions import DecodeError, RpcError, UpstreamRejected, UpstreamUnavailable

logger = logging.getLogger(__name__)

# API constants
HYPERION_TESTNET_RPC_URL = "https://hyperion-testnet.metisdevops.link"
HYPERION_TESTNET_CHAIN_ID = 133717
REQUEST_TIMEOUT = 10.0


class EvmRpcClient:
    """
    JSON-RPC 2.0 client shared by the trust oracle and the relayer.

    Every call is a single POST; nothing is retried here.
    """

    def __init__(
        self,
        rpc_url: str = HYPERION_TESTNET_RPC_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def request(self, method: str, params: list) -> Any:
        """
        Make one JSON-RPC call.

        Args:
            method: RPC method name (e.g. ``eth_call``)
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            UpstreamUnavailable: network error or timeout
            UpstreamRejected: non-2xx status
            RpcError: the node returned an error object
            DecodeError: the body is not a JSON-RPC response
        """
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            response = await client.post(self.rpc_url, json=payload)
        except httpx.RequestError as e:
            raise UpstreamUnavailable(f"{method} failed: {e}") from e

        if response.is_error:
            raise UpstreamRejected(
                f"{method} returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"{method} returned a non-JSON body", raw=response.text) from e
        if not isinstance(data, dict):
            raise DecodeError(f"{method} returned an unexpected body", raw=response.text)

        error = data.get("error")
        if error is not None:
            logger.debug(f"{method} returned error object: {error}")
            raw_data = error.get("data")
            raise RpcError(
                code=int(error.get("code", 0)),
                message=str(error.get("message", "")),
                data=raw_data if raw_data is None else str(raw_data),
            )
        return data.get("result")

    async def eth_call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        """Run a read-only contract call and return the raw return data."""
        result = await self.request("eth_call", [{"to": to, "data": to_hex(data)}, block])
        if result is None:
            return b""
        return bytes.fromhex(result[2:] if result.startswith("0x") else result)

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        """Return the receipt, or None while the transaction is not mined."""
        return await self.request("eth_getTransactionReceipt", [tx_hash])

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return int(await self.request("eth_getTransactionCount", [address, block]), 16)

    async def gas_price(self) -> int:
        return int(await self.request("eth_gasPrice", []), 16)

    async def estimate_gas(self, tx: dict) -> int:
        return int(await self.request("eth_estimateGas", [tx]), 16)

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Broadcast a signed transaction and return its hash."""
        return await self.request("eth_sendRawTransaction", [to_hex(raw_tx)])

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
