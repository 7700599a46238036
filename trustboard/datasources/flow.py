"""Flow REST API script gateway."""

import logging
from typing import Optional

import httpx

from trustboard.exceptions import DecodeError, UpstreamRejected, UpstreamUnavailable
from trustboard.models import TaggedValue
from .base import ScriptGateway
from .cadence import decode_response, encode_argument, encode_script

logger = logging.getLogger(__name__)

# API constants
TESTNET_REST_URL = "https://rest-testnet.onflow.org"
SCRIPTS_ENDPOINT = "/v1/scripts"
REQUEST_TIMEOUT = 10.0


class FlowScriptGateway(ScriptGateway):
    """
    Script gateway using the Flow Access API REST endpoint.

    Scripts always run at ``block_height=final`` so results reflect the
    latest sealed state. Failures are not retried here.
    """

    def __init__(
        self,
        api_url: str = TESTNET_REST_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Flow gateway.

        Args:
            api_url: Base URL for the Flow REST API
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def run_script(
        self,
        source: str,
        args: list[TaggedValue],
    ) -> TaggedValue:
        """Execute a read-only script and decode its result."""
        client = await self._get_client()
        body = {
            "script": encode_script(source),
            "arguments": [encode_argument(a) for a in args],
        }

        try:
            response = await client.post(
                SCRIPTS_ENDPOINT,
                params={"block_height": "final"},
                json=body,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Script call to {self.api_url} timed out: {e}")
            raise UpstreamUnavailable(f"Flow script call timed out: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"Script call to {self.api_url} failed: {e}")
            raise UpstreamUnavailable(f"Flow script call failed: {e}") from e

        if response.is_error:
            logger.error(
                f"Flow API rejected script call with HTTP {response.status_code}: {response.text}"
            )
            raise UpstreamRejected(
                f"Flow API returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        try:
            return decode_response(response.text)
        except DecodeError as e:
            logger.error(f"Could not decode script response ({e}); raw payload: {e.raw!r}")
            raise

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
