"""Transport codec for the Flow script-execution API.

Scripts and arguments go out as base64; the response is a JSON string that
holds base64 of the JSON-Cadence result tree.
"""

import base64
import binascii
import json

from pydantic import ValidationError as PydanticValidationError

from trustboard.exceptions import DecodeError
from trustboard.models import TaggedValue, tagged_value_adapter


def encode_script(source: str) -> str:
    """Encode script source text for the request body."""
    return base64.b64encode(source.encode("utf-8")).decode("ascii")


def decode_script(encoded: str) -> str:
    """Inverse of :func:`encode_script`."""
    return base64.b64decode(encoded, validate=True).decode("utf-8")


def encode_argument(arg: TaggedValue) -> str:
    """Encode a single script argument as base64 of its compact JSON form."""
    payload = json.dumps(arg.model_dump(mode="json"), separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def parse_tagged_value(data: object, raw: str = "") -> TaggedValue:
    """Validate a decoded JSON object against the closed set of variants."""
    if not isinstance(data, dict) or "type" not in data or "value" not in data:
        raise DecodeError("Payload is not a tagged value", raw=raw)
    try:
        return tagged_value_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise DecodeError(f"Malformed tagged value: {e}", raw=raw) from e


def decode_response(body: str) -> TaggedValue:
    """
    Decode the body returned by ``POST /v1/scripts``.

    Args:
        body: Raw response text

    Returns:
        The decoded tagged value tree

    Raises:
        DecodeError: error envelope, bad base64/UTF-8/JSON, or unknown tags
    """
    text = body.strip()
    encoded = text
    try:
        envelope = json.loads(text)
    except ValueError:
        envelope = None
    if isinstance(envelope, str):
        encoded = envelope
    elif envelope is not None:
        # Flow answers errors with {"code": ..., "message": ...}
        raise DecodeError("Script API returned an error envelope", raw=body)

    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise DecodeError(f"Response is not base64 text: {e}", raw=body) from e

    try:
        data = json.loads(decoded)
    except ValueError as e:
        raise DecodeError(f"Decoded response is not JSON: {e}", raw=body) from e

    return parse_tagged_value(data, raw=body)
