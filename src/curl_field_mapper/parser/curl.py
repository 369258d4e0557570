"""curl command parser.

Turns a curl-style command line (pasted by a user or lifted out of a
document) into a ParsedRequest. This is not a shell: quoting is honoured,
backslash-newline continuations are joined, and everything else (pipes,
variables, several commands) is left alone.
"""

import json
import logging
import re
from typing import Any, NamedTuple

from .base import FailureCode, ParsedRequest, ParseFailure

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "GET"

METHOD_FLAGS = frozenset({"-X", "--request"})
HEADER_FLAGS = frozenset({"-H", "--header"})
DATA_FLAGS = frozenset({"-d", "--data", "--data-raw", "--data-binary", "--json"})
URL_FLAGS = frozenset({"--url"})

# Other curl options that consume the following token. Their values are
# skipped so that e.g. a proxy or referer URL is never taken for the target.
VALUE_FLAGS = frozenset({
    "-A", "--user-agent",
    "-b", "--cookie",
    "-c", "--cookie-jar",
    "-D", "--dump-header",
    "-E", "--cert",
    "-e", "--referer",
    "-F", "--form", "--form-string",
    "-K", "--config",
    "-m", "--max-time",
    "-o", "--output",
    "-r", "--range",
    "-T", "--upload-file",
    "-u", "--user",
    "-w", "--write-out",
    "-x", "--proxy",
    "--cacert", "--connect-timeout", "--data-ascii", "--data-urlencode",
    "--interface", "--key", "--limit-rate", "--max-redirs",
    "--oauth2-bearer", "--resolve", "--retry",
})

TAKES_VALUE = METHOD_FLAGS | HEADER_FLAGS | DATA_FLAGS | URL_FLAGS | VALUE_FLAGS

QUOTES = "'\""
LINE_CONTINUATION = re.compile(r"\\\r?\n")
CURL_PREFIX = re.compile(r"^\s*curl(?=\s|$)", re.IGNORECASE)
URL_CANDIDATE = re.compile(r"^https?://[^\s'\"]+")

_NO_BODY = object()


class Token(NamedTuple):
    text: str
    quoted: bool  # token opened with a quote character


def normalize(text: str) -> str:
    """Join line continuations and drop a leading ``curl`` word."""
    text = LINE_CONTINUATION.sub(" ", text)
    return CURL_PREFIX.sub("", text, count=1).strip()


def tokenize(text: str) -> list[Token]:
    """Split a command line on unquoted whitespace.

    A quoted segment runs to the next occurrence of the same quote
    character, newlines included; there is no escape handling inside it.
    An unterminated quote runs to the end of the text.
    """
    tokens: list[Token] = []
    buf: list[str] = []
    in_token = False
    quoted = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = text.find(ch, i + 1)
            if end == -1:
                end = n
            if not in_token:
                quoted = True
            buf.append(text[i + 1:end])
            in_token = True
            i = end + 1
        elif ch.isspace():
            if in_token:
                tokens.append(Token("".join(buf), quoted))
                buf, in_token, quoted = [], False, False
            i += 1
        else:
            buf.append(ch)
            in_token = True
            i += 1

    if in_token:
        tokens.append(Token("".join(buf), quoted))
    return tokens


def parse_curl(text: str) -> ParsedRequest | ParseFailure:
    """Parse a curl command into a ParsedRequest.

    Only a missing URL is a failure; a missing method, headers or body
    just leaves the defaults in place.
    """
    tokens = tokenize(normalize(text))

    url: str | None = None
    method: str | None = None
    headers: dict[str, str] = {}
    body: Any = _NO_BODY

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if not _is_flag(token):
            if url is None:
                url = _match_url(token.text)
            continue

        name, value = _split_flag(token.text)
        if name not in TAKES_VALUE:
            logger.debug("Ignoring flag %s", name)
            continue
        if value is None:
            if i >= len(tokens):
                logger.debug("Flag %s has no value", name)
                break
            value = tokens[i].text
            i += 1

        if name in URL_FLAGS:
            if url is None:
                url = _match_url(value)
        elif name in METHOD_FLAGS:
            if method is None and value.strip():
                method = value.strip().upper()
        elif name in HEADER_FLAGS:
            _add_header(headers, value)
        elif name in DATA_FLAGS:
            if body is _NO_BODY:
                body = decode_body(value)
            else:
                logger.debug("Ignoring extra %s payload", name)

    if url is None:
        return ParseFailure(
            code=FailureCode.NO_URL_FOUND,
            message="No http:// or https:// URL found in command",
        )

    return ParsedRequest(
        method=method or DEFAULT_METHOD,
        url=url,
        headers=headers,
        body=None if body is _NO_BODY else body,
    )


def decode_body(raw: str) -> Any:
    """Decode a payload as JSON, keeping the raw text when that fails."""
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("Body is not JSON, keeping it as text")
        return raw


def _is_flag(token: Token) -> bool:
    return not token.quoted and len(token.text) > 1 and token.text.startswith("-")


def _split_flag(text: str) -> tuple[str, str | None]:
    """Separate ``--name=value`` and ``-Xvalue`` forms into name and value."""
    if text.startswith("--"):
        name, sep, value = text.partition("=")
        return (name, value) if sep else (name, None)
    if len(text) > 2 and text[:2] in TAKES_VALUE:
        return text[:2], text[2:]
    return text, None


def _match_url(text: str) -> str | None:
    match = URL_CANDIDATE.match(text)
    return match.group(0) if match else None


def _add_header(headers: dict[str, str], raw: str) -> None:
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        logger.debug("Skipping malformed header %r", raw)
        return
    headers[name] = value.strip()
