"""Classify image references as inline data URIs or local files."""

import re
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import anyio

from markmail.config.constants import DATA_URI_DEFAULT_MIME
from markmail.core.models import ExternalSource, ImageReference, ImageSource, InlineSource
from markmail.exceptions import TransformError, UnsupportedEncodingError
from markmail.image.protocols import MediaTypeProber
from markmail.utils.logging import get_logger

log = get_logger(__name__)

# data:[<mediatype>][;param]*[;<encoding>],<data>
_DATA_URI = re.compile(r"^data:(?P<header>[^,]*),(?P<payload>.*)$", re.IGNORECASE | re.DOTALL)

_REMOTE_SCHEMES = {"http", "https", "ftp"}


def parse_data_uri(identifier: str, value: str) -> InlineSource | None:
    """Parse a ``data:`` URI into an InlineSource.

    Returns None if ``value`` is not a data URI.

    Raises:
        UnsupportedEncodingError: If the payload is not marked as base64
    """
    match = _DATA_URI.match(value.strip())
    if not match:
        return None

    params = [p.strip() for p in match.group("header").split(";")]
    mime, *rest = params
    encoding = rest.pop() if rest and "=" not in rest[-1] else ""

    if encoding.lower() != "base64":
        raise UnsupportedEncodingError(identifier, encoding or "none")

    mime_type = ";".join([mime, *rest]) if mime else DATA_URI_DEFAULT_MIME
    payload = "".join(match.group("payload").split())
    return InlineSource(mime_type=mime_type, payload=payload)


def locate(identifier: str, value: str, base_dir: Path) -> Path:
    """Turn an ``src`` locator into an absolute path under ``base_dir``."""
    parsed = urlparse(value)
    scheme = parsed.scheme.lower()

    if scheme in _REMOTE_SCHEMES:
        raise TransformError(identifier, f"remote images are not supported: {value}")

    if scheme == "file":
        path = Path(url2pathname(parsed.path))
    elif len(scheme) > 1:
        raise TransformError(identifier, f"unsupported image location: {value}")
    else:
        # No scheme, or a Windows drive letter
        path = Path(unquote(value.split("#", 1)[0].split("?", 1)[0]))

    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


class ImageResolver:
    """Work out where an image's bytes come from."""

    def __init__(self, base_dir: Path, media_types: MediaTypeProber) -> None:
        self.base_dir = base_dir
        self.media_types = media_types

    async def resolve(self, reference: ImageReference) -> ImageSource:
        """Classify ``reference`` as an InlineSource or ExternalSource.

        Raises:
            UnsupportedEncodingError: Inline payload not base64
            TransformError: File missing or its media type cannot be probed
        """
        value = reference.src

        inline = parse_data_uri(reference.identifier, value)
        if inline is not None:
            log.debug("Inline image", id=reference.identifier, mime=inline.mime_type)
            return inline

        path = locate(reference.identifier, value, self.base_dir)
        if not path.is_file():
            raise TransformError(reference.identifier, f"image file not found: {path}")

        try:
            mime_type = await anyio.to_thread.run_sync(self.media_types.probe, path)
        except Exception as e:
            raise TransformError(
                reference.identifier, f"cannot determine media type of {path}: {e}", cause=e
            ) from e

        log.debug("External image", id=reference.identifier, path=str(path), mime=mime_type)
        return ExternalSource(path=path, mime_type=mime_type)
