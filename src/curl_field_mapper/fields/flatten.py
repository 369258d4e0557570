"""Structural flattener.

Walks nested JSON-like data and emits one Field per leaf, named by its
dotted path. Two simplifications keep paths stable for mapping:

- a non-empty list whose first element is an object is read as that
  first element's schema, without an index in the path;
- an empty list produces nothing.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from .base import Field, FlattenedDocument
from .infer import infer_type, to_text

logger = logging.getLogger(__name__)


def flatten(value: Any, prefix: str = "") -> list[Field]:
    """Flatten an object into leaf fields in traversal order.

    Anything that is not an object yields an empty list.
    """
    fields: list[Field] = []
    if isinstance(value, dict):
        _walk(value, prefix, fields)
    else:
        logger.debug("Not flattening top-level %s", type(value).__name__)
    return fields


def _walk(obj: dict, prefix: str, fields: list[Field]) -> None:
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else str(key)

        if isinstance(value, list):
            if not value:
                continue
            if isinstance(value[0], dict):
                _walk(value[0], path, fields)
                continue

        if isinstance(value, dict):
            _walk(value, path, fields)
        else:
            fields.append(Field(path=path, value=to_text(value), type=infer_type(value)))


def flatten_document(source_id: str, text: str) -> FlattenedDocument:
    """Decode a companion JSON document and flatten it.

    A document that does not decode contributes no fields; the failure is
    logged and recorded on the result instead of being raised.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        logger.warning("Could not decode companion document %s: %s", source_id, e)
        return FlattenedDocument(source_id=source_id, error=f"{type(e).__name__}: {e}")

    return FlattenedDocument(source_id=source_id, fields=flatten(data))


def load_documents(sources: Mapping[str, str]) -> dict[str, FlattenedDocument]:
    """Flatten several companion documents, keyed by source id."""
    return {source_id: flatten_document(source_id, text) for source_id, text in sources.items()}


def mapping_targets(documents: Mapping[str, FlattenedDocument]) -> dict[str, list[str]]:
    """List the field paths each document offers as a mapping target."""
    return {source_id: doc.paths() for source_id, doc in documents.items()}
