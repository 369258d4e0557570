import json
from pathlib import Path

from click.testing import CliRunner

from curl_field_mapper.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliParse:
    def test_parse_curl_file(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "create_user.sh")])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["method"] == "POST"
        assert data["url"] == "https://api.example.com/v1/users"
        assert data["body"]["age"] == 30

    def test_parse_markdown_file(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "user_api.md")])
        assert result.exit_code == 0
        assert json.loads(result.output)["body"] == {"name": "Jo", "accountId": "acc-1"}

    def test_parse_failure(self, tmp_path):
        f = tmp_path / "broken.sh"
        f.write_text("curl -X POST -d '{}'")
        result = CliRunner().invoke(main, ["parse", str(f)])
        assert result.exit_code == 1
        assert "NoUrlFound" in result.output


class TestCliFields:
    def test_fields_with_companion(self):
        result = CliRunner().invoke(main, [
            "fields", str(FIXTURES / "user_api.md"),
            "-c", str(FIXTURES / "accounts.json"),
        ])
        assert result.exit_code == 0
        assert "header.Content-Type" in result.output
        assert "body.accountId" in result.output
        assert "account.opened" in result.output

    def test_fields_skips_broken_companion(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{oops")
        result = CliRunner().invoke(main, [
            "fields", str(FIXTURES / "create_user.sh"),
            "-c", str(broken),
        ])
        assert result.exit_code == 0
        assert "body.orders.placed" in result.output


class TestCliFlatten:
    def test_flatten_json(self):
        result = CliRunner().invoke(main, ["flatten", str(FIXTURES / "accounts.json"), "--json"])
        assert result.exit_code == 0
        paths = [f["path"] for f in json.loads(result.output)]
        assert paths[0] == "account.id"
        assert "transactions.currency" in paths

    def test_flatten_invalid_json(self, tmp_path):
        f = tmp_path / "bad.json"
        f.write_text("{")
        result = CliRunner().invoke(main, ["flatten", str(f)])
        assert result.exit_code == 1


class TestCliMap:
    def test_map_writes_payload(self, tmp_path):
        output = tmp_path / "out" / "payload.json"
        result = CliRunner().invoke(main, [
            "map", str(FIXTURES / "user_api.md"),
            "-m", str(FIXTURES / "mapping.yaml"),
            "-c", str(FIXTURES / "accounts.json"),
            "-o", str(output),
        ])
        assert result.exit_code == 0
        assert json.loads(output.read_text()) == {
            "body.accountId": {
                "type": "dynamic",
                "source": "accounts.json",
                "field": "account.id",
                "value": "acc-1",
            },
        }

    def test_map_unknown_field(self, tmp_path):
        config = tmp_path / "mapping.yaml"
        config.write_text("body.missing:\n  value: x\n")
        result = CliRunner().invoke(main, [
            "map", str(FIXTURES / "create_user.sh"),
            "-m", str(config),
            "-o", str(tmp_path / "payload.json"),
        ])
        assert result.exit_code == 1
        assert "body.missing" in result.output


class TestCliInputErrors:
    def test_json_source_is_rejected(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "accounts.json")])
        assert result.exit_code == 1
        assert "JSON document" in result.output

    def test_non_utf8_companion_is_skipped(self, tmp_path):
        latin = tmp_path / "latin.json"
        latin.write_bytes(b'{"name": "Jos\xe9"}')
        result = CliRunner().invoke(main, [
            "fields", str(FIXTURES / "create_user.sh"),
            "-c", str(latin),
        ])
        assert result.exit_code == 0
        assert "skipped latin.json" in result.output
        assert "body.name" in result.output

    def test_non_utf8_flatten_fails_cleanly(self, tmp_path):
        latin = tmp_path / "latin.json"
        latin.write_bytes(b'{"name": "Jos\xe9"}')
        result = CliRunner().invoke(main, ["flatten", str(latin)])
        assert result.exit_code == 1
        assert "not UTF-8" in result.output

    def test_non_utf8_source_fails_cleanly(self, tmp_path):
        latin = tmp_path / "request.sh"
        latin.write_bytes(b"curl https://a.b -d 'Jos\xe9'")
        result = CliRunner().invoke(main, ["parse", str(latin)])
        assert result.exit_code == 1
        assert "not UTF-8" in result.output
