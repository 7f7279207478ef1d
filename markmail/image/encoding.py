"""Base64 encoding of image payloads."""

import base64
import binascii
from pathlib import Path


class Base64Encoder:
    """Encode a binary file as a single line of base64 text."""

    def encode(self, path: Path, dest: Path) -> Path:
        dest.write_bytes(base64.b64encode(path.read_bytes()))
        return dest


def is_valid_base64(payload: str) -> bool:
    """Check that ``payload`` decodes as standard base64."""
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def wrap_base64(payload: str, width: int) -> list[str]:
    """Split base64 text into lines of at most ``width`` characters."""
    payload = "".join(payload.split())
    return [payload[i : i + width] for i in range(0, len(payload), width)]
