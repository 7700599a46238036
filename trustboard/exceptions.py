"""Error taxonomy shared by the ledger clients, services and HTTP layer."""

from typing import Optional


class TrustboardError(Exception):
    """Base class for all service errors."""


class GatewayError(TrustboardError):
    """A call to one of the ledgers failed. Surfaced as a 5xx response."""


class UpstreamUnavailable(GatewayError):
    """Network error or timeout while talking to a ledger."""


class UpstreamRejected(GatewayError):
    """The ledger answered with a non-2xx status or a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class RpcError(UpstreamRejected):
    """JSON-RPC error object returned by the secondary ledger."""

    def __init__(self, code: int, message: str, data: Optional[str] = None):
        super().__init__(f"JSON-RPC error {code}: {message}", detail=data)
        self.code = code
        self.rpc_message = message
        self.data = data

    @property
    def is_revert(self) -> bool:
        """True when the node reports the call as reverted by the contract."""
        return self.code == 3 or "revert" in self.rpc_message.lower()


class DecodeError(GatewayError):
    """A ledger payload did not have the expected shape."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ValidationError(TrustboardError):
    """Malformed client input (address, signature, hash). Surfaced as 400."""


class NotConfigured(TrustboardError):
    """A service the request needs was not built at startup. Surfaced as 500."""


class RelayError(TrustboardError):
    """The relayer failed to submit a transaction. Surfaced as 500."""

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.details = details
