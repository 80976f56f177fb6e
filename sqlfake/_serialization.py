"""JSON encoding and decoding backed by ``msgspec``."""

from typing import Any

import msgspec

from sqlfake.exceptions import SerializationError

__all__ = ("decode_json", "encode_json")


def _enc_hook(value: Any) -> Any:
    """Fallback for objects ``msgspec`` cannot encode natively.

    Plain objects are encoded through their instance attributes, the same
    shape a serialized blob column of that object would carry.
    """
    if hasattr(value, "__dict__"):
        return vars(value)
    msg = f"Objects of type {type(value).__name__} are not supported"
    raise NotImplementedError(msg)


_encoder = msgspec.json.Encoder(enc_hook=_enc_hook)
_decoder = msgspec.json.Decoder()


def encode_json(data: Any, *, as_bytes: bool = False) -> Any:
    """Encode ``data`` to JSON.

    Raises:
        SerializationError: The value cannot be represented as JSON.
    """
    try:
        encoded = _encoder.encode(data)
    except (TypeError, NotImplementedError, msgspec.EncodeError) as exc:
        msg = f"Unable to encode value of type {type(data).__name__}"
        raise SerializationError(msg) from exc
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def decode_json(data: "str | bytes", *, decode_bytes: bool = True) -> Any:
    """Decode a JSON document.

    Raises:
        SerializationError: The document is not valid JSON.
    """
    if isinstance(data, bytes) and not decode_bytes:
        return data
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as exc:
        msg = "Unable to decode JSON document"
        raise SerializationError(msg) from exc
