"""Byte, text and base64 conversion helpers."""

import base64
from typing import TypeAlias

BytesLike: TypeAlias = bytes | bytearray | memoryview


def bytes_to_base64(data: BytesLike) -> str:
    """Encode bytes as a padded standard-alphabet base64 string.

    Args:
        data: Any bytes-like object

    Returns:
        ASCII base64 string
    """
    return base64.b64encode(bytes(data)).decode("ascii")


def base64_to_bytes(text: str) -> bytes:
    """Decode a standard-alphabet base64 string.

    Args:
        text: Base64 string (padding required)

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the string contains characters outside the alphabet or
            has incorrect padding (binascii.Error is a ValueError subclass)
    """
    return base64.b64decode(text, validate=True)


def text_to_bytes(text: str) -> bytes:
    """Encode text as UTF-8."""
    return text.encode("utf-8")


def bytes_to_text(data: BytesLike) -> str:
    """Decode UTF-8 bytes, raising UnicodeDecodeError on invalid input."""
    return bytes(data).decode("utf-8")


def concat_buffers(*buffers: BytesLike) -> bytes:
    """Concatenate bytes-like objects in order.

    Examples:
        >>> concat_buffers(b"ab", bytearray(b"c"), memoryview(b"de"))
        b'abcde'
    """
    return b"".join(bytes(b) for b in buffers)
