"""Field extraction from a parsed request."""

from curl_field_mapper.parser.base import ParsedRequest

from .base import Field, FlattenedDocument, TypeTag
from .flatten import flatten

HEADER_PREFIX = "header"
BODY_PREFIX = "body"


def extract_fields(request: ParsedRequest) -> list[Field]:
    """Headers first (fixed, never editable), then the flattened body.

    A body that is not a JSON object contributes no fields.
    """
    fields = [
        Field(path=f"{HEADER_PREFIX}.{name}", value=value, type=TypeTag.STRING, editable=False)
        for name, value in request.headers.items()
    ]
    fields.extend(flatten(request.body, BODY_PREFIX))
    return fields


def request_document(source_id: str, request: ParsedRequest) -> FlattenedDocument:
    """Expose a request's own fields as a mapping source."""
    return FlattenedDocument(source_id=source_id, fields=extract_fields(request))
