"""Field mapping model.

Editable fields can be bound to a leaf of a companion document, so the
value is filled in from that document instead of being sent as-is. All
edits are pure: they take a Field and return a new one.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .base import Field, FieldMapping, FlattenedDocument

DYNAMIC_MAPPING_TYPE = "dynamic"


class MappingError(ValueError):
    """An edit that would break the mapping rules."""


def update_field(field: Field, **changes: Any) -> Field:
    """Return a copy of ``field`` with ``changes`` applied and re-validated,
    so a field that ends up non-editable never keeps its mapping.
    """
    return Field.model_validate({**field.model_dump(), **changes})


def set_value(field: Field, value: str) -> Field:
    if not field.editable:
        raise MappingError(f"Field {field.path} is not editable")
    return update_field(field, value=value)


def set_editable(field: Field, editable: bool) -> Field:
    """Toggle editability. Turning it off also drops any mapping."""
    if editable:
        return update_field(field, editable=True)
    return update_field(field, editable=False, mapping=None)


def clear_mapping(field: Field) -> Field:
    return update_field(field, mapping=None)


def select_source(
    field: Field,
    source_id: str,
    documents: Mapping[str, FlattenedDocument] | None = None,
) -> Field:
    """Point a field at a companion document.

    Switching to a different document forgets the chosen target path,
    since that path belongs to the old document.
    """
    if not field.editable:
        raise MappingError(f"Field {field.path} is not editable")
    if documents is not None and source_id not in documents:
        raise MappingError(f"Unknown source document: {source_id}")

    target_path = ""
    if field.mapping is not None and field.mapping.source_id == source_id:
        target_path = field.mapping.target_path
    return update_field(field, mapping=FieldMapping(source_id=source_id, target_path=target_path))


def select_target(
    field: Field,
    target_path: str,
    documents: Mapping[str, FlattenedDocument] | None = None,
) -> Field:
    """Choose the target leaf within the already selected document.

    Types are not compared: any leaf may feed any field.
    """
    if not field.editable:
        raise MappingError(f"Field {field.path} is not editable")
    if field.mapping is None:
        raise MappingError(f"Field {field.path} has no source document selected")

    source_id = field.mapping.source_id
    if documents is not None:
        doc = documents.get(source_id)
        if doc is None:
            raise MappingError(f"Unknown source document: {source_id}")
        if doc.get(target_path) is None:
            raise MappingError(f"Document {source_id} has no field {target_path}")

    return update_field(field, mapping=FieldMapping(source_id=source_id, target_path=target_path))


def replace_field(fields: list[Field], index: int, field: Field) -> list[Field]:
    """Return a copy of the field list with one entry replaced."""
    updated = list(fields)
    updated[index] = field
    return updated


def resolve_target(field: Field, documents: Mapping[str, FlattenedDocument]) -> Field | None:
    """Look up the companion leaf a field is bound to, if any."""
    if field.mapping is None or not field.mapping.target_path:
        return None
    doc = documents.get(field.mapping.source_id)
    if doc is None:
        return None
    return doc.get(field.mapping.target_path)


def build_mapping_payload(fields: list[Field]) -> dict[str, dict[str, str]]:
    """Collect the fully bound fields into a mapping description.

    Fields without a chosen target path are left out.
    """
    payload = {}
    for field in fields:
        if not field.editable or field.mapping is None or not field.mapping.target_path:
            continue
        payload[field.path] = {
            "type": DYNAMIC_MAPPING_TYPE,
            "source": field.mapping.source_id,
            "field": field.mapping.target_path,
            "value": field.value,
        }
    return payload


def load_mapping_config(file_path: Path) -> dict[str, Any]:
    """Read a YAML mapping config: ``{field_path: {source, field, value}}``."""
    config = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise MappingError(f"Mapping config {file_path} must be a mapping of field paths")
    return config


def apply_mapping_config(
    fields: list[Field],
    config: Mapping[str, Any],
    documents: Mapping[str, FlattenedDocument] | None = None,
) -> list[Field]:
    """Apply a decoded mapping config to a field list.

    Every field named in the config becomes editable; ``value`` overrides
    the value, and ``source``/``field`` bind it to a companion leaf.
    """
    index_by_path = {f.path: i for i, f in enumerate(fields)}
    updated = list(fields)

    for path, entry in config.items():
        if path not in index_by_path:
            raise MappingError(f"No field named {path}")
        entry = entry or {}
        if not isinstance(entry, dict):
            raise MappingError(f"Mapping entry for {path} must be a mapping")

        i = index_by_path[path]
        field = set_editable(updated[i], entry.get("editable", True))
        if "value" in entry:
            field = set_value(field, str(entry["value"]))
        if "source" in entry:
            field = select_source(field, str(entry["source"]), documents)
        if "field" in entry:
            field = select_target(field, str(entry["field"]), documents)
        updated[i] = field

    return updated
