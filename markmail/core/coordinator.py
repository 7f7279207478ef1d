"""Concurrent per-image processing with ordered result collection."""

import asyncio
from pathlib import Path

from markmail.core.models import ImagePart, ImageReference
from markmail.image.resolver import ImageResolver
from markmail.image.transformer import ImageTransformer
from markmail.utils.logging import get_logger

log = get_logger(__name__)


class ImageCoordinator:
    """Run resolve + transform for every image concurrently.

    One asyncio task is created per reference. Results are collected in
    document order, so the first failure reported is the first failing image
    in the document, not the first to fail in time. Remaining tasks are then
    cancelled and awaited before the error propagates.
    """

    def __init__(
        self,
        resolver: ImageResolver,
        transformer: ImageTransformer,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            resolver: Classifies each image reference
            transformer: Produces the ImagePart for a resolved image
            max_workers: Maximum images processed at once (None = unbounded)
        """
        self.resolver = resolver
        self.transformer = transformer
        self.max_workers = max_workers

    async def _process_one(
        self,
        reference: ImageReference,
        staging_dir: Path,
        semaphore: asyncio.Semaphore | None,
    ) -> ImagePart:
        if semaphore is None:
            return await self._resolve_and_transform(reference, staging_dir)
        async with semaphore:
            return await self._resolve_and_transform(reference, staging_dir)

    async def _resolve_and_transform(
        self, reference: ImageReference, staging_dir: Path
    ) -> ImagePart:
        source = await self.resolver.resolve(reference)
        part = await self.transformer.transform(reference, source, staging_dir)
        # No await between creating the part and rewriting its node
        reference.rewrite_src()
        log.debug("Image part ready", id=part.identifier, mime=part.mime_type)
        return part

    async def process(
        self,
        references: list[ImageReference],
        staging_dir: Path,
    ) -> list[ImagePart]:
        """Process all references and return their parts in document order.

        Args:
            references: Image references in scan order
            staging_dir: Directory for intermediate files

        Returns:
            One ImagePart per reference, in the same order

        Raises:
            MarkmailError: The first failure in document order
        """
        semaphore = asyncio.Semaphore(self.max_workers) if self.max_workers else None

        tasks = [
            asyncio.create_task(
                self._process_one(reference, staging_dir, semaphore),
                name=reference.identifier,
            )
            for reference in references
        ]
        log.info("Dispatched image tasks", count=len(tasks), max_workers=self.max_workers)

        parts: list[ImagePart] = []
        try:
            for task in tasks:
                parts.append(await task)
        except BaseException:
            await self._cancel_outstanding(tasks)
            raise

        return parts

    @staticmethod
    async def _cancel_outstanding(tasks: list[asyncio.Task[ImagePart]]) -> None:
        """Cancel unfinished tasks and wait for all of them to settle."""
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        # Collects sibling exceptions so none is reported as "never retrieved"
        await asyncio.gather(*tasks, return_exceptions=True)
        if pending:
            log.warning("Cancelled outstanding image tasks", count=len(pending))
