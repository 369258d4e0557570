import pytest
from pydantic import ValidationError

from curl_field_mapper.fields.base import Field, FieldMapping, FlattenedDocument, TypeTag
from curl_field_mapper.parser.base import ParsedRequest


class TestParsedRequest:
    def test_defaults(self):
        req = ParsedRequest(url="https://a.b")
        assert req.method == "GET"
        assert req.headers == {}
        assert req.body is None

    def test_rejects_non_http_url(self):
        with pytest.raises(ValidationError):
            ParsedRequest(url="ftp://a.b")

    def test_serialization_roundtrip(self):
        req = ParsedRequest(method="POST", url="https://a.b", headers={"A": "1"}, body={"x": [1]})
        assert ParsedRequest(**req.model_dump()) == req


class TestField:
    def test_defaults(self):
        f = Field(path="body.name", value="Jo")
        assert f.type == TypeTag.STRING
        assert f.editable is False
        assert f.mapping is None

    def test_mapping_dropped_when_not_editable(self):
        f = Field(path="body.name", value="Jo", mapping=FieldMapping(source_id="users"))
        assert f.mapping is None

    def test_mapping_kept_when_editable(self):
        f = Field(path="body.name", value="Jo", editable=True, mapping=FieldMapping(source_id="users"))
        assert f.mapping == FieldMapping(source_id="users", target_path="")

    def test_fields_are_frozen(self):
        f = Field(path="body.name", value="Jo")
        with pytest.raises(ValidationError):
            f.value = "Al"

    def test_type_serializes_as_tag(self):
        f = Field(path="a", value="1", type=TypeTag.NUMBER)
        assert f.model_dump(mode="json")["type"] == "number"


class TestFlattenedDocument:
    def test_lookup(self):
        doc = FlattenedDocument(
            source_id="users",
            fields=[Field(path="user.id", value="1"), Field(path="user.name", value="Jo")],
        )
        assert doc.paths() == ["user.id", "user.name"]
        assert doc.get("user.name").value == "Jo"
        assert doc.get("user.email") is None
        assert doc.error is None
