"""MIME detection and base64 conversion for message attachments.

The predicates here decide, for every adapter, whether an attachment is
inlined as decoded text, sent as an image block, or replaced by a note.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re

logger = logging.getLogger(__name__)

GENERIC_MIME = "application/octet-stream"
DECODE_ERROR_TEXT = "[Error decoding file content]"

# Browsers and file pickers often report an empty or generic type for these.
EXTENSION_TO_MIME: dict[str, str] = {
    # Markdown and plain text
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".text": "text/plain",
    ".log": "text/plain",
    ".cfg": "text/plain",
    ".conf": "text/plain",
    ".ini": "text/plain",
    ".env": "text/plain",
    ".gitignore": "text/plain",
    ".dockerignore": "text/plain",
    ".editorconfig": "text/plain",
    # Source code
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".cjs": "text/javascript",
    ".jsx": "text/jsx",
    ".ts": "text/typescript",
    ".tsx": "text/tsx",
    ".py": "text/x-python",
    ".rb": "text/x-ruby",
    ".go": "text/x-go",
    ".rs": "text/x-rust",
    ".java": "text/x-java",
    ".c": "text/x-c",
    ".cpp": "text/x-c++",
    ".h": "text/x-c",
    ".hpp": "text/x-c++",
    ".cs": "text/x-csharp",
    ".swift": "text/x-swift",
    ".kt": "text/x-kotlin",
    ".scala": "text/x-scala",
    ".php": "text/x-php",
    ".pl": "text/x-perl",
    ".sh": "text/x-shellscript",
    ".bash": "text/x-shellscript",
    ".zsh": "text/x-shellscript",
    ".fish": "text/x-shellscript",
    ".ps1": "text/x-powershell",
    ".lua": "text/x-lua",
    ".r": "text/x-r",
    ".sql": "text/x-sql",
    ".m": "text/x-matlab",
    ".jl": "text/x-julia",
    # Web and markup
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".scss": "text/x-scss",
    ".sass": "text/x-sass",
    ".less": "text/x-less",
    ".xml": "application/xml",
    ".svg": "image/svg+xml",
    ".vue": "text/x-vue",
    ".svelte": "text/x-svelte",
    # Data
    ".json": "application/json",
    ".jsonl": "application/jsonl",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
    ".toml": "text/x-toml",
    ".csv": "text/csv",
    ".tsv": "text/tab-separated-values",
    ".prettierrc": "application/json",
    ".eslintrc": "application/json",
    ".babelrc": "application/json",
    # Documentation
    ".rst": "text/x-rst",
    ".asciidoc": "text/asciidoc",
    ".adoc": "text/asciidoc",
    ".tex": "text/x-tex",
    ".latex": "text/x-latex",
    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    # Video
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    # Binary documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

_TEXT_APPLICATION_TYPES = frozenset({
    "application/json",
    "application/jsonl",
    "application/xml",
    "application/javascript",
    "application/typescript",
    "application/x-javascript",
    "application/x-typescript",
})

_TEXT_MIME_MARKERS = ("javascript", "typescript", "python", "csv", "yaml", "xml", "json")

# Short, purely alphabetic extensions we don't know are probably text.
_PLAUSIBLE_TEXT_EXTENSION = re.compile(r"^\.[a-z]{1,4}$")

_DATA_URI = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


def detect_type(filename: str, hint_type: str = "") -> str:
    """Resolve the MIME type of a file.

    The caller-supplied hint wins unless it is empty or the generic
    ``application/octet-stream``; then the extension table decides.

    Examples::

        detect_type("README.md")                        # "text/markdown"
        detect_type("data.json", "application/json")   # "application/json"
        detect_type("mystery.bin7", "")                # "application/octet-stream"
    """
    if hint_type and hint_type != GENERIC_MIME:
        return hint_type

    dot = filename.rfind(".")
    if dot == -1:
        logger.debug(f"No extension for {filename}, defaulting to text/plain")
        return "text/plain"

    extension = filename[dot:].lower()
    detected = EXTENSION_TO_MIME.get(extension)
    if detected:
        return detected

    if _PLAUSIBLE_TEXT_EXTENSION.match(extension):
        logger.debug(f"Unknown extension {extension} for {filename}, assuming text/plain")
        return "text/plain"

    logger.warning(f"Unknown file type for {filename}, using {GENERIC_MIME}")
    return GENERIC_MIME


def is_text_like(mime: str) -> bool:
    """True for MIME types whose payload can be decoded and inlined as text."""
    mime = (mime or "").lower()
    if mime.startswith("text/"):
        return True
    if mime in _TEXT_APPLICATION_TYPES:
        return True
    return any(marker in mime for marker in _TEXT_MIME_MARKERS)


def is_image_like(mime: str) -> bool:
    return (mime or "").lower().startswith("image/")


def is_video_like(mime: str) -> bool:
    return (mime or "").lower().startswith("video/")


def encode_bytes(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


def decode_bytes(data: str) -> bytes:
    """Decode base64 text to bytes, ignoring line breaks and other whitespace.

    Raises ``binascii.Error`` on bad input.
    """
    return base64.b64decode("".join(data.split()), validate=True)


def decode_text(data: str) -> str:
    """Decode base64 text content to a UTF-8 string.

    Fails soft: a corrupt attachment yields ``DECODE_ERROR_TEXT`` instead of
    raising, so one bad file never aborts a whole send.
    """
    try:
        return decode_bytes(data).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.error(f"Failed to decode base64 text: {e}")
        return DECODE_ERROR_TEXT


def wrap_text_file(name: str, content: str) -> str:
    """Delimit decoded file content for inclusion in a prompt."""
    return f"--- Attached File: {name} ---\n{content}\n--- End File ---"


def to_data_uri(mime: str, data: str) -> str:
    return f"data:{mime};base64,{data}"


def parse_data_uri(uri: str) -> tuple[str, str] | None:
    """Split a base64 ``data:`` URI into ``(mime, data)``; None if not one."""
    match = _DATA_URI.match(uri or "")
    if not match:
        return None
    return match.group("mime") or GENERIC_MIME, match.group("data")
