"""Custodial relayer account that pays gas for user-facing writes."""

import asyncio
import logging
from typing import Optional

from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from .evm import EvmRpcClient

logger = logging.getLogger(__name__)

GAS_LIMIT_MARGIN = 1.2


class Relayer:
    """
    Signs and broadcasts transactions from one process-wide credential.

    Submissions are serialized with a lock and nonces are tracked locally,
    so concurrent requests never reuse a nonce. After a failed broadcast the
    local nonce is dropped and re-read from the chain on the next submission.
    """

    def __init__(self, rpc: EvmRpcClient, private_key: str, chain_id: int):
        """
        Initialize the relayer.

        Args:
            rpc: Shared JSON-RPC client for the Hyperion chain
            private_key: Hex private key of the relayer account
            chain_id: EIP-155 chain id used when signing
        """
        self.rpc = rpc
        self.chain_id = chain_id
        self._account = Account.from_key(private_key)
        self._lock = asyncio.Lock()
        self._next_nonce: Optional[int] = None

    @property
    def address(self) -> str:
        return self._account.address

    async def _reserve_nonce(self) -> int:
        chain_nonce = await self.rpc.get_transaction_count(self.address, "pending")
        if self._next_nonce is None or chain_nonce > self._next_nonce:
            return chain_nonce
        return self._next_nonce

    async def transact(self, to: str, data: bytes) -> str:
        """
        Submit a contract call from the relayer account.

        Args:
            to: Contract address
            data: ABI-encoded calldata

        Returns:
            The transaction hash (0x-prefixed)
        """
        to = to_checksum_address(to)
        async with self._lock:
            nonce = await self._reserve_nonce()
            gas_price = await self.rpc.gas_price()
            gas = await self.rpc.estimate_gas({
                "from": self.address,
                "to": to,
                "data": to_hex(data),
            })
            tx = {
                "nonce": nonce,
                "gasPrice": gas_price,
                "gas": int(gas * GAS_LIMIT_MARGIN),
                "to": to,
                "value": 0,
                "data": data,
                "chainId": self.chain_id,
            }
            signed = self._account.sign_transaction(tx)

            try:
                tx_hash = await self.rpc.send_raw_transaction(signed.raw_transaction)
            except Exception:
                self._next_nonce = None
                raise

            self._next_nonce = nonce + 1
            logger.info(f"Relayed tx {tx_hash} to {to} with nonce {nonce}")
            return tx_hash
