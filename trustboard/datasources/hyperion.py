"""Hyperion contract bindings: the AI oracle and the address mapper."""

import logging
import re
from typing import Optional

from eth_abi import decode as abi_decode, encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from trustboard.exceptions import DecodeError, RpcError, ValidationError
from trustboard.models import PlayerSummary
from .base import TrustOracle
from .evm import EvmRpcClient

logger = logging.getLogger(__name__)

GET_SUMMARY_SIGNATURE = "getSummary(bytes32,uint32)"
GET_SUMMARY_RETURNS = ["int32", "uint8", "bytes16"]
SET_MY_MAPPING_SIGNATURE = "setMyMapping(string)"

_HEX_RE = re.compile(r"^[0-9a-fA-F]{1,64}$")


def identity_key(participant: str) -> bytes:
    """
    Derive the oracle's bytes32 player id from a participant address.

    The address is stripped of ``0x`` and left-padded with zeros to 32 bytes.

    Raises:
        ValidationError: the participant is not a hex string of at most 32 bytes
    """
    digits = participant[2:] if participant.lower().startswith("0x") else participant
    if not _HEX_RE.match(digits):
        raise ValidationError(f"Cannot derive identity key from {participant!r}")
    return bytes.fromhex(digits.rjust(64, "0"))


def encode_get_summary(player_id: bytes, period_id: int) -> bytes:
    selector = function_signature_to_4byte_selector(GET_SUMMARY_SIGNATURE)
    return selector + abi_encode(["bytes32", "uint32"], [player_id, period_id])


def decode_summary(data: bytes) -> PlayerSummary:
    try:
        delta_rating, cheat_flag, coach_id = abi_decode(GET_SUMMARY_RETURNS, data)
    except DecodingError as e:
        raise DecodeError(f"Malformed getSummary return data: {e}", raw="0x" + data.hex()) from e
    return PlayerSummary(
        deltaRating=delta_rating,
        cheatFlag=cheat_flag,
        coachId="0x" + coach_id.hex(),
    )


def encode_set_my_mapping(flow_address: str) -> bytes:
    """Calldata for ``AddressMapper.setMyMapping(string flowAddrLowerNo0x)``."""
    selector = function_signature_to_4byte_selector(SET_MY_MAPPING_SIGNATURE)
    return selector + abi_encode(["string"], [flow_address])


class HyperionOracle(TrustOracle):
    """
    Trust oracle backed by the ``AIOracle`` contract.

    A reverted call or empty return data means the oracle holds nothing for
    the key and is reported as None.
    """

    def __init__(self, rpc: EvmRpcClient, oracle_address: str):
        """
        Initialize the oracle binding.

        Args:
            rpc: Shared JSON-RPC client for the Hyperion chain
            oracle_address: Deployed AIOracle contract address
        """
        self.rpc = rpc
        self.oracle_address = oracle_address

    async def get_summary(
        self,
        participant: str,
        period_id: int,
    ) -> Optional[PlayerSummary]:
        """Read ``getSummary(playerId, periodId)`` for a participant."""
        calldata = encode_get_summary(identity_key(participant), period_id)
        try:
            data = await self.rpc.eth_call(to_checksum_address(self.oracle_address), calldata)
        except RpcError as e:
            if e.is_revert:
                logger.debug(f"getSummary reverted for {participant} period {period_id}")
                return None
            raise

        if not data:
            return None
        return decode_summary(data)
