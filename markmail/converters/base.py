"""Base converter interface."""

from abc import ABC, abstractmethod
from pathlib import Path


class BaseConverter(ABC):
    """Abstract base class for converters that produce HTML."""

    name: str = "base"
    supported_extensions: set[str] = set()

    @abstractmethod
    async def convert(self, file_path: Path, target_dir: Path) -> Path:
        """Convert a document file to HTML.

        Args:
            file_path: Path to the source document
            target_dir: Directory to write the HTML file into

        Returns:
            Path to the generated HTML file
        """
        pass

    def supports(self, extension: str) -> bool:
        """Check if this converter supports the given file extension.

        Args:
            extension: File extension including the dot (e.g., '.md')

        Returns:
            True if supported, False otherwise
        """
        return extension.lower() in self.supported_extensions

    async def validate(self, file_path: Path) -> bool:
        """Validate that the file can be converted."""
        if not file_path.exists():
            return False
        if not file_path.is_file():
            return False
        return self.supports(file_path.suffix)
