"""Turn a resolved image into a staged MIME part."""

from pathlib import Path

import anyio

from markmail.core.models import (
    ExternalSource,
    ImagePart,
    ImageReference,
    ImageSource,
    InlineSource,
)
from markmail.exceptions import TransformError
from markmail.image.encoding import is_valid_base64
from markmail.image.protocols import ImageToolset
from markmail.utils.logging import get_logger

log = get_logger(__name__)


class ImageTransformer:
    """Resize, probe and base64-encode images.

    Every file it writes lives in the staging directory under a name that
    starts with the reference identifier, so concurrent transforms never
    touch the same file.
    """

    def __init__(self, tools: ImageToolset) -> None:
        self.tools = tools

    async def transform(
        self,
        reference: ImageReference,
        source: ImageSource,
        staging_dir: Path,
    ) -> ImagePart:
        """Produce the ImagePart for ``reference``.

        Raises:
            TransformError: If probing, resizing or encoding fails
        """
        encoded_path = staging_dir / f"{reference.identifier}.b64"

        if isinstance(source, InlineSource):
            return await self._transform_inline(reference, source, encoded_path)
        if isinstance(source, ExternalSource):
            return await self._transform_external(reference, source, staging_dir, encoded_path)

        raise TypeError(f"Unknown image source: {source!r}")

    async def _transform_inline(
        self,
        reference: ImageReference,
        source: InlineSource,
        encoded_path: Path,
    ) -> ImagePart:
        if not is_valid_base64(source.payload):
            raise TransformError(reference.identifier, "inline payload is not valid base64")

        try:
            await anyio.to_thread.run_sync(encoded_path.write_text, source.payload, "ascii")
        except OSError as e:
            raise TransformError(reference.identifier, f"cannot stage payload: {e}", cause=e) from e

        return ImagePart(
            identifier=reference.identifier,
            filename=reference.identifier,
            mime_type=source.mime_type,
            content_path=encoded_path,
        )

    async def _transform_external(
        self,
        reference: ImageReference,
        source: ExternalSource,
        staging_dir: Path,
        encoded_path: Path,
    ) -> ImagePart:
        identifier = reference.identifier
        binary_path = source.path

        if reference.width is not None or reference.height is not None:
            resized_path = staging_dir / f"{identifier}.resized{source.path.suffix}"
            try:
                binary_path = await anyio.to_thread.run_sync(
                    self.tools.resizer.resize,
                    source.path,
                    resized_path,
                    reference.width,
                    reference.height,
                )
            except Exception as e:
                raise TransformError(identifier, f"resize failed: {e}", cause=e) from e
            log.debug(
                "Image resized",
                id=identifier,
                width=reference.width,
                height=reference.height,
            )
        else:
            try:
                width, height = await anyio.to_thread.run_sync(
                    self.tools.dimensions.dimensions, source.path
                )
            except Exception as e:
                raise TransformError(identifier, f"cannot read dimensions: {e}", cause=e) from e
            reference.node["width"] = str(width)
            reference.node["height"] = str(height)

        try:
            await anyio.to_thread.run_sync(self.tools.encoder.encode, binary_path, encoded_path)
        except Exception as e:
            raise TransformError(identifier, f"encoding failed: {e}", cause=e) from e

        return ImagePart(
            identifier=identifier,
            filename=source.path.name,
            mime_type=source.mime_type,
            content_path=encoded_path,
        )
