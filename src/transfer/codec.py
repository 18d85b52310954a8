"""Payload codecs shared by every backend.

Binary content crosses the host boundary as base64; text content uses
LF line endings on the host side and CRLF on the wire.
"""

import base64
import binascii

from src.transfer.exceptions import InputInvalidError


def encode_binary(data: bytes) -> str:
    """Base64-encode raw bytes for the caller."""
    return base64.b64encode(data).decode("ascii")


def decode_binary(payload: str) -> bytes:
    """
    Decode a base64 payload supplied by the caller.

    Args:
        payload: Standard base64 text

    Returns:
        Raw bytes

    Raises:
        InputInvalidError: If the payload is empty or not valid base64
    """
    if not payload:
        raise InputInvalidError("Payload is empty")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputInvalidError("Payload is not valid base64", e)
    if not data:
        raise InputInvalidError("Payload is empty")
    return data


def text_from_wire(data: bytes, encoding: str = "utf-8") -> str:
    """
    Turn downloaded text into its host form.

    CRLF becomes LF and surrounding whitespace is trimmed.
    """
    text = data.decode(encoding, errors="replace")
    return text.replace("\r\n", "\n").strip()


def text_to_wire(text: str, encoding: str = "utf-8") -> bytes:
    """
    Turn host text into its wire form.

    Every LF becomes CRLF. Existing CRLF pairs are kept as they are
    instead of gaining a second CR.

    Raises:
        InputInvalidError: If the text is empty or not encodable
    """
    if not text:
        raise InputInvalidError("Text payload is empty")
    normalized = text.replace("\r\n", "\n").replace("\n", "\r\n")
    try:
        return normalized.encode(encoding)
    except UnicodeEncodeError as e:
        raise InputInvalidError(f"Text cannot be encoded as {encoding}", e)
