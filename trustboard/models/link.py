"""Identity linking models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class LinkState(str, Enum):
    """States of one link attempt."""
    UNVERIFIED = "unverified"
    SIGNATURE_VERIFIED = "signatureVerified"
    REJECTED = "rejected"
    RELAYED = "relayed"
    RELAY_FAILED = "relayFailed"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timedOut"


class LinkRequest(BaseModel):
    """
    Request body for binding a Flow address to the signer's EVM address.

    Both fields default to empty so that missing values are reported as
    validation errors by the linker rather than by the framework.
    """
    model_config = ConfigDict(populate_by_name=True)

    flowAddress: str = Field(default="", description="Flow address, lowercase hex without 0x")
    signature: str = Field(default="", description="EIP-191 signature over the link message")


class LinkResult(BaseModel):
    """Response body for a link request: a tx hash or an error."""
    model_config = ConfigDict(populate_by_name=True)

    txHash: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None


class TxStatusResponse(BaseModel):
    mined: bool
    error: Optional[str] = None


@dataclass
class LinkAttempt:
    """Mutable record of one pass through the linking state machine."""

    foreign_address: str
    state: LinkState = LinkState.UNVERIFIED
    signer: Optional[str] = None
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None

    def to_result(self) -> LinkResult:
        if self.tx_hash is not None and self.error is None:
            return LinkResult(txHash=self.tx_hash)
        return LinkResult(error=self.error, details=self.details)
