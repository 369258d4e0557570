"""Auto-detect the format of an input file."""

import json
from pathlib import Path

from .markdown import CURL_BLOCK

JSON_SUFFIXES = (".json",)
MARKDOWN_SUFFIXES = (".md", ".markdown")


def detect_format(file_path: Path) -> str:
    """Detect the format of a request or companion document.

    Returns: 'json', 'markdown', or 'curl'.
    """
    suffix = file_path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in MARKDOWN_SUFFIXES:
        return "markdown"

    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return "curl"

    try:
        data = json.loads(text)
        if isinstance(data, (dict, list)):
            return "json"
    except (ValueError, RecursionError):
        pass

    if CURL_BLOCK.search(text):
        return "markdown"

    return "curl"
