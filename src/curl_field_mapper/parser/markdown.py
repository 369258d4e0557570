"""Markdown API document parser.

Reads an API description written in Markdown: ``API Name:`` and
``API URL:`` lines plus a fenced code block holding the curl command.
"""

import re
from pathlib import Path

from .base import ApiDocument, FailureCode, ParseFailure
from .curl import parse_curl

CURL_BLOCK = re.compile(r"```(?:bash|sh)?\s*(curl\s+[^`]+)```", re.IGNORECASE)

API_URL_KEYS = ("api url:", "apiurl:")
API_NAME_KEYS = ("api name:", "apiname:")


def parse_markdown(text: str) -> ApiDocument:
    """Parse Markdown text into an ApiDocument."""
    api_name = ""
    api_url = ""
    for line in text.splitlines():
        lowered = line.lower()
        if any(key in lowered for key in API_URL_KEYS):
            api_url = _value_after_colon(line)
        if any(key in lowered for key in API_NAME_KEYS):
            api_name = _value_after_colon(line)

    match = CURL_BLOCK.search(text)
    if match:
        request = parse_curl(match.group(1))
    else:
        request = ParseFailure(
            code=FailureCode.NO_CURL_BLOCK,
            message="No fenced curl code block found in document",
        )

    return ApiDocument(api_name=api_name, api_url=api_url, request=request)


def parse_markdown_file(file_path: Path) -> ApiDocument:
    return parse_markdown(file_path.read_text(encoding="utf-8"))


def _value_after_colon(line: str) -> str:
    """Everything after the first colon, so URLs keep their scheme."""
    return line.split(":", 1)[1].strip()
