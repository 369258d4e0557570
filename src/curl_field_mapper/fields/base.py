"""Field models shared by the extractor, the flattener and the mapping model.

A Field is one named leaf value. Fields are immutable: edits go through
``fields.mapping.update_field``, which re-validates and yields a new record
(``model_copy`` skips validation and can leave a mapping on a non-editable
field).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class TypeTag(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    DATE = "date"
    EMAIL = "email"
    URL = "url"


class FieldMapping(BaseModel):
    """Binds a field to a leaf of a companion document."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    target_path: str = ""  # empty until a target field is chosen


class Field(BaseModel):
    """A single named, typed value extracted from some source."""

    model_config = ConfigDict(frozen=True)

    path: str  # body.user.address.city / header.Content-Type
    value: str
    type: TypeTag = TypeTag.STRING
    editable: bool = False
    mapping: FieldMapping | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_mapping_unless_editable(cls, data):
        if isinstance(data, dict) and data.get("mapping") is not None and not data.get("editable"):
            data = {**data, "mapping": None}
        return data


class FlattenedDocument(BaseModel):
    """The fields of one source document, keyed by its id."""

    source_id: str
    fields: list[Field] = []
    error: str | None = None  # set when the document could not be decoded

    def paths(self) -> list[str]:
        return [f.path for f in self.fields]

    def get(self, path: str) -> Field | None:
        for f in self.fields:
            if f.path == path:
                return f
        return None
