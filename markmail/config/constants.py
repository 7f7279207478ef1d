"""Constants for MarkMail."""

from pathlib import Path

from markmail import __version__

# Application constants
APP_NAME = "markmail"
APP_VERSION = __version__

# Default paths
DEFAULT_CONFIG_FILE = "markmail.yaml"

# Config file locations (in order of priority)
CONFIG_LOCATIONS = [
    Path(DEFAULT_CONFIG_FILE),
    Path.home() / ".config" / APP_NAME / "config.yaml",
]

# Mail
DEFAULT_BOUNDARY = "markmail-related-boundary-0f9e8d7c"
# RFC 2046 bchars, 1 to 70 characters, not ending in a space
BOUNDARY_PATTERN = r"^[0-9A-Za-z'()+_,./:=? -]{0,69}[0-9A-Za-z'()+_,./:=?-]$"
BASE64_LINE_LENGTH = 76
HTML_CONTENT_TYPE = "text/html; charset=utf-8"
HTML_TRANSFER_ENCODING = "8bit"
IMAGE_TRANSFER_ENCODING = "base64"

# Image references
PART_ID_PREFIX = "part-"
CID_SCHEME = "cid:"
DATA_URI_DEFAULT_MIME = "text/plain;charset=US-ASCII"

# Image processing
IMAGE_BACKENDS = ("pillow", "magick")
RESAMPLE_FILTERS = ("nearest", "bilinear", "bicubic", "lanczos")
DEFAULT_IMAGE_WORKERS = 8

# Source formats handled without conversion
HTML_EXTENSIONS = {".html", ".htm", ".xhtml"}

# Source formats pandoc can turn into HTML
PANDOC_EXTENSIONS = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".rst": "rst",
    ".docx": "docx",
    ".odt": "odt",
    ".epub": "epub",
    ".org": "org",
    ".textile": "textile",
    ".tex": "latex",
    ".latex": "latex",
    ".mediawiki": "mediawiki",
}

# Readers whose images live inside the source file and must be extracted
PANDOC_MEDIA_READERS = {"docx", "odt", "epub"}
