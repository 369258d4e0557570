"""Data models for parsed request commands.

Every parser (curl, Markdown) produces either a ParsedRequest or a
ParseFailure. Failures are returned, never raised.
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator

URL_PATTERN = re.compile(r"^https?://\S+")


class FailureCode(str, Enum):
    NO_URL_FOUND = "NoUrlFound"
    NO_CURL_BLOCK = "NoCurlBlock"


class ParsedRequest(BaseModel):
    """A single HTTP request extracted from a curl-style command."""

    method: str = "GET"
    url: str
    headers: dict[str, str] = {}  # first-seen order, last value wins
    body: Any = None  # decoded JSON value, raw string, or None

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        if not URL_PATTERN.match(value):
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value


class ParseFailure(BaseModel):
    """Why a command could not be turned into a ParsedRequest."""

    code: FailureCode
    message: str = ""


class ApiDocument(BaseModel):
    """A Markdown API description: name, URL and its embedded curl command."""

    api_name: str = ""
    api_url: str = ""
    request: ParsedRequest | ParseFailure
