"""CLI entry point for curl-field-mapper."""

import json
import logging
from pathlib import Path

import click

from curl_field_mapper.fields.base import Field, FlattenedDocument
from curl_field_mapper.fields.extract import extract_fields
from curl_field_mapper.fields.flatten import flatten_document
from curl_field_mapper.fields.mapping import (
    MappingError,
    apply_mapping_config,
    build_mapping_payload,
    load_mapping_config,
)
from curl_field_mapper.parser.base import ParsedRequest, ParseFailure
from curl_field_mapper.parser.curl import parse_curl
from curl_field_mapper.parser.detect import detect_format
from curl_field_mapper.parser.markdown import parse_markdown

FORMATS = ["auto", "curl", "markdown"]


def _parse_source(file_path: Path, fmt: str) -> ParsedRequest:
    """Parse a curl or Markdown file, failing the command on a parse error."""
    if fmt == "auto":
        fmt = detect_format(file_path)
    if fmt == "json":
        raise click.ClickException(f"{file_path.name} is a JSON document, not a curl command; pass it with -c/--companion")

    text = _read_text(file_path)
    if text is None:
        raise click.ClickException(f"{file_path.name} is not UTF-8 text")
    if fmt == "markdown":
        result = parse_markdown(text).request
    else:
        result = parse_curl(text)

    if isinstance(result, ParseFailure):
        raise click.ClickException(f"{result.code.value}: {result.message}")
    return result


def _read_text(file_path: Path) -> str | None:
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return None


def _load_companions(paths: tuple[Path, ...]) -> dict[str, FlattenedDocument]:
    documents = {}
    for path in paths:
        text = _read_text(path)
        if text is None:
            doc = FlattenedDocument(source_id=path.name, error="UnicodeDecodeError: not UTF-8 text")
        else:
            doc = flatten_document(path.name, text)
        if doc.error:
            click.echo(f"Warning: skipped {path.name} ({doc.error})", err=True)
        documents[doc.source_id] = doc
    return documents


def _echo_fields(fields: list[Field], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([f.model_dump(mode="json") for f in fields], indent=2))
        return
    for f in fields:
        flag = "*" if f.editable else " "
        click.echo(f"{flag} {f.path:<40} {f.type.value:<8} {f.value}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """curl-field-mapper: turn curl commands into mappable request fields."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Input format.")
def parse(source: Path, fmt: str):
    """Parse a curl command and print the request as JSON."""
    request = _parse_source(source, fmt)
    click.echo(request.model_dump_json(indent=2))


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--companion", "companions", multiple=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Companion JSON document (repeatable).")
@click.option("--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Input format.")
@click.option("--json", "as_json", is_flag=True, help="Print fields as JSON.")
def fields(source: Path, companions: tuple[Path, ...], fmt: str, as_json: bool):
    """Extract the fields of a curl command and of its companion documents."""
    request = _parse_source(source, fmt)
    extracted = extract_fields(request)
    click.echo(f"{request.method} {request.url}: {len(extracted)} fields", err=True)
    _echo_fields(extracted, as_json)

    for source_id, doc in _load_companions(companions).items():
        click.echo(f"{source_id}: {len(doc.fields)} fields", err=True)
        _echo_fields(doc.fields, as_json)


@main.command()
@click.argument("json_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print fields as JSON.")
def flatten(json_path: Path, as_json: bool):
    """Flatten a JSON document into dotted-path fields."""
    text = _read_text(json_path)
    if text is None:
        raise click.ClickException(f"{json_path.name} is not UTF-8 text")
    doc = flatten_document(json_path.name, text)
    if doc.error:
        raise click.ClickException(doc.error)
    _echo_fields(doc.fields, as_json)


@main.command(name="map")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-m", "--mapping-file", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML mapping config.")
@click.option("-c", "--companion", "companions", multiple=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Companion JSON document (repeatable).")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the mapping payload JSON.")
@click.option("--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Input format.")
def map_fields(source: Path, mapping_file: Path, companions: tuple[Path, ...], output: Path, fmt: str):
    """Bind request fields to companion documents and write the mapping payload."""
    request = _parse_source(source, fmt)
    documents = _load_companions(companions)

    try:
        config = load_mapping_config(mapping_file)
        mapped = apply_mapping_config(extract_fields(request), config, documents)
    except MappingError as e:
        raise click.ClickException(str(e))

    payload = build_mapping_payload(mapped)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    click.echo(f"Wrote {len(payload)} mappings to {output}")
