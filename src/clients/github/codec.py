from __future__ import annotations

import base64
import binascii

from core.errors import DecodeError


def encode_text(text: str) -> str:
    """UTF-8 encode then base64, as the Contents API expects for `content`."""
    return base64.b64encode((text or "").encode("utf-8")).decode("ascii")


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data or b"").decode("ascii")


def decode_text(payload: str) -> str:
    """Decode a Contents API `content` field into text.

    GitHub wraps the base64 payload at 60 columns, so whitespace is dropped
    before strict validation.
    """
    compact = "".join((payload or "").split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"File content is not valid base64: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("File content is not valid UTF-8 text") from e
