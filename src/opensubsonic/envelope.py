"""Decoding of the ``subsonic-response`` envelope.

Decoding is split in three pure steps so each can be tested on its own:

    1. decode_envelope: bytes -> ResponseEnvelope (or DecodeError)
    2. raise_for_envelope: ResponseEnvelope -> payload dict (or the SubsonicError for the code)
    3. extract: payload dict -> typed model(s) (or DecodeError)
"""

import json
import logging
from typing import Any, Dict, List, Optional, Type, Union

from .data import SubsonicModel
from .exceptions import DecodeError
from .models import ApiError, ResponseEnvelope

logger = logging.getLogger(__name__)

ENVELOPE_KEY = "subsonic-response"
ENVELOPE_FIELDS = frozenset(
    {"status", "version", "type", "serverVersion", "openSubsonic", "error"}
)
UNKNOWN_ERROR_MESSAGE = "Unknown API error (status=failed without error object)"


def decode_envelope(body: Union[bytes, str]) -> ResponseEnvelope:
    """Parse a response body into a ResponseEnvelope.

    Args:
        body: Raw response body

    Returns:
        ResponseEnvelope with either payload or error set

    Raises:
        DecodeError: If the body is not JSON or does not have the envelope shape
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get(ENVELOPE_KEY), dict):
        raise DecodeError(f"Response is missing the '{ENVELOPE_KEY}' object")
    inner = data[ENVELOPE_KEY]

    status = inner.get("status")
    if status not in ("ok", "failed"):
        raise DecodeError(f"Unexpected envelope status: {status!r}")

    version = inner.get("version")
    if version is not None and not isinstance(version, str):
        raise DecodeError(f"Unexpected envelope version: {version!r}")

    common = dict(
        status=status,
        version=version,
        server_type=inner.get("type"),
        server_version=inner.get("serverVersion"),
        open_subsonic=inner.get("openSubsonic") is True,
    )

    if status == "failed":
        return ResponseEnvelope(error=_decode_error(inner.get("error")), **common)

    payload = {key: value for key, value in inner.items() if key not in ENVELOPE_FIELDS}
    return ResponseEnvelope(payload=payload, **common)


def _decode_error(error: Any) -> ApiError:
    if error is None:
        return ApiError(code=0, message=UNKNOWN_ERROR_MESSAGE)
    if not isinstance(error, dict):
        raise DecodeError(f"Unexpected error object: {error!r}")

    code = error.get("code", 0)
    if isinstance(code, bool) or not isinstance(code, int):
        raise DecodeError(f"Unexpected error code: {code!r}")
    message = error.get("message") or ""
    return ApiError(code=code, message=str(message))


def raise_for_envelope(envelope: ResponseEnvelope) -> Dict[str, Any]:
    """Return the payload of an ok envelope, or raise the server's error.

    Raises:
        SubsonicError: Subclass matching the error code of a failed envelope
    """
    if envelope.error is not None:
        logger.warning(
            f"Subsonic API error {envelope.error.code}: {envelope.error.message}"
        )
        raise envelope.error.to_exception()
    return envelope.payload


def extract(
    payload: Dict[str, Any],
    key: str,
    model: Optional[Type[SubsonicModel]] = None,
    *,
    item: Optional[str] = None,
    many: bool = False,
    required: bool = True,
) -> Any:
    """Pull one endpoint result out of a payload and convert it.

    Args:
        payload: Payload of an ok envelope
        key: Top-level payload key (e.g. "albumList2")
        model: Model class to build; None returns the raw JSON value
        item: Inner key for wrapped lists (e.g. "album" in albumList2.album)
        many: Convert to a list of models; a missing list yields []
        required: For single results, raise when the key is missing

    Raises:
        DecodeError: If the key is missing or the value has the wrong shape
    """
    value = payload.get(key)
    if value is not None and item is not None:
        if not isinstance(value, dict):
            raise DecodeError(f"'{key}' is not an object")
        value = value.get(item)

    if value is None:
        if many:
            return []
        if required:
            path = f"{key}.{item}" if item else key
            raise DecodeError(f"Missing '{path}' in response")
        return None

    if model is None:
        return value
    if many:
        return list_of(model, value, key)
    return model.from_dict(value, key)


def list_of(model: Type[SubsonicModel], value: Any, where: str) -> List[Any]:
    """Convert a JSON array (or a bare object standing in for one) to models."""
    items = value if isinstance(value, list) else [value]
    return [model.from_dict(entry, f"{where}[{i}]") for i, entry in enumerate(items)]
