"""Identity linking: bind a Flow address to an EVM signer via the relayer."""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError

from trustboard.datasources import EvmRpcClient, Relayer
from trustboard.datasources.hyperion import encode_set_my_mapping
from trustboard.exceptions import RelayError, ValidationError
from trustboard.models import LinkAttempt, LinkRequest, LinkState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_ATTEMPTS = 30

FOREIGN_ADDRESS_RE = re.compile(r"^[0-9a-f]{16,64}$")
SIGNATURE_RE = re.compile(r"^0x[0-9a-fA-F]{130}$")
TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
RECEIPT_SUCCESS = "0x1"


def validate_foreign_address(foreign_address: str) -> str:
    """Flow addresses are accepted as 16-64 lowercase hex chars, no 0x."""
    if not foreign_address or not FOREIGN_ADDRESS_RE.match(foreign_address):
        raise ValidationError("Invalid Flow address format")
    return foreign_address


def validate_tx_hash(tx_hash: str) -> str:
    if not tx_hash or not TX_HASH_RE.match(tx_hash):
        raise ValidationError("Invalid transaction hash")
    return tx_hash


def _signature_bytes(signature: str) -> bytes:
    if not signature:
        raise ValidationError("Missing signature")
    if not SIGNATURE_RE.match(signature):
        raise ValidationError("Malformed signature")
    raw = bytes.fromhex(signature[2:])
    if raw[64] not in (0, 1, 27, 28):
        raise ValidationError("Invalid signature recovery id")
    # EIP-2: only the lower half of the curve order is accepted for s
    if int.from_bytes(raw[32:64], "big") > SECPK1_N // 2:
        raise ValidationError("Non-canonical signature")
    return raw


class IdentityLinker:
    """
    Verifies link signatures, relays the mapping write and polls receipts.

    The recovered signer is not checked against an allow-list: whoever can
    sign the exact link message for a Flow address may claim that mapping.
    Without a relayer the linker still polls receipts, but every link
    request fails at the relay step.
    """

    def __init__(
        self,
        relayer: Optional[Relayer],
        rpc: EvmRpcClient,
        mapper_address: str,
        app_id: str = "Memoree",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_attempts: int = DEFAULT_POLL_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.relayer = relayer
        self.rpc = rpc
        self.mapper_address = mapper_address
        self.app_id = app_id
        self.poll_interval = poll_interval
        self.poll_attempts = poll_attempts
        self._sleep = sleep

    def link_message(self, foreign_address: str) -> str:
        return f"{self.app_id} link:{foreign_address}"

    def recover_signer(self, foreign_address: str, signature: str) -> str:
        """
        Recover the EVM address that signed the link message (EIP-191).

        Raises:
            ValidationError: malformed or unrecoverable signature
        """
        raw = _signature_bytes(signature)
        message = encode_defunct(text=self.link_message(foreign_address))
        try:
            return Account.recover_message(message, signature=raw)
        except (BadSignature, KeyValidationError, ValueError) as e:
            raise ValidationError(f"Invalid signature: {e}") from e

    async def link(self, request: LinkRequest) -> LinkAttempt:
        """
        Drive one link request through verification and relay.

        Returns:
            The attempt in state REJECTED, RELAY_FAILED or RELAYED
        """
        attempt = LinkAttempt(foreign_address=request.flowAddress)

        try:
            validate_foreign_address(request.flowAddress)
            attempt.signer = self.recover_signer(request.flowAddress, request.signature)
        except ValidationError as e:
            attempt.state = LinkState.REJECTED
            attempt.error = str(e)
            logger.info(f"Rejected link for {request.flowAddress!r}: {e}")
            return attempt
        attempt.state = LinkState.SIGNATURE_VERIFIED

        try:
            attempt.tx_hash = await self.relay(request.flowAddress)
        except RelayError as e:
            attempt.state = LinkState.RELAY_FAILED
            attempt.error = str(e)
            attempt.details = e.details
            return attempt

        attempt.state = LinkState.RELAYED
        logger.info(
            f"Relayed link {request.flowAddress} for signer {attempt.signer}: {attempt.tx_hash}"
        )
        return attempt

    async def relay(self, foreign_address: str) -> str:
        """Submit ``setMyMapping(foreign_address)`` from the relayer account."""
        if self.relayer is None:
            raise RelayError("Relay failed", details="Relayer not configured")
        try:
            return await self.relayer.transact(
                self.mapper_address,
                encode_set_my_mapping(foreign_address),
            )
        except Exception as e:
            logger.error(f"Relay of mapping for {foreign_address} failed: {e}")
            raise RelayError("Relay failed", details=str(e)) from e

    async def wait_for_mined(self, tx_hash: str) -> bool:
        """
        Poll for a successful receipt.

        Lookup errors count as "not mined yet". Gives up after
        ``poll_attempts`` attempts spaced ``poll_interval`` seconds apart
        and returns False; that is not an error.
        """
        validate_tx_hash(tx_hash)
        for attempt in range(self.poll_attempts):
            try:
                receipt = await self.rpc.get_transaction_receipt(tx_hash)
            except Exception as e:
                logger.debug(f"Receipt lookup {attempt + 1} for {tx_hash} failed: {e}")
                receipt = None
            if receipt and receipt.get("status") == RECEIPT_SUCCESS:
                return True
            await self._sleep(self.poll_interval)
        return False

    async def confirm(self, tx_hash: str) -> LinkState:
        """Terminal state of a relayed link: CONFIRMED or TIMED_OUT."""
        mined = await self.wait_for_mined(tx_hash)
        state = LinkState.CONFIRMED if mined else LinkState.TIMED_OUT
        logger.info(f"Link transaction {tx_hash}: {state.value}")
        return state
