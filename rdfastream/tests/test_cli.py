"""End-to-end tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rdflib import Graph, Literal, URIRef
from typer.testing import CliRunner

from rdfastream.cli import app
from rdfastream.tests.conftest import BASE

DOCUMENT = """<html>
  <body prefix="ex: http://ex.example/">
    <p about="#a" property="ex:name">Alice</p>
  </body>
</html>
"""


@pytest.fixture()
def html_file(tmp_path: Path) -> Path:
    path = tmp_path / "page.html"
    path.write_text(DOCUMENT, encoding="utf-8")
    return path


def test_parse_prints_nquads(html_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(html_file), "--base-iri", BASE])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert '<http://example.org/#a> <http://ex.example/name> "Alice"' in result.output


def test_parse_defaults_base_to_file_uri(html_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(html_file)])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert f"<{html_file.resolve().as_uri()}#a>" in result.output


def test_parse_writes_turtle_and_prefixes(html_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "out" / "page.ttl"
    prefixes = tmp_path / "out" / "prefixes.json"
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "parse",
            str(html_file),
            "--base-iri",
            BASE,
            "--format",
            "turtle",
            "--output",
            str(output),
            "--prefixes-out",
            str(prefixes),
        ],
    )
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    graph = Graph()
    graph.parse(output, format="turtle")
    assert (URIRef(BASE + "#a"), URIRef("http://ex.example/name"), Literal("Alice")) in graph
    assert json.loads(prefixes.read_text(encoding="utf-8")) == {"ex": "http://ex.example/"}


def test_parse_reads_yaml_config(html_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "rdfa.yaml"
    config.write_text(f"base_iri: {BASE}\nlanguage: en\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(html_file), "--config", str(config)])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert '<http://example.org/#a> <http://ex.example/name> "Alice"@en' in result.output


def test_parse_rejects_invalid_config(html_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "rdfa.yaml"
    config.write_text("profile: bogus\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(html_file), "--config", str(config)])
    assert result.exit_code == 2


def test_parse_rejects_unknown_format(html_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(html_file), "--format", "csv"])
    assert result.exit_code == 2


def test_parse_reports_syntax_errors(tmp_path: Path) -> None:
    broken = tmp_path / "broken.xhtml"
    broken.write_text("<html><body></html>", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["parse", str(broken), "--strict"])
    assert result.exit_code == 1


def test_profiles_lists_content_types() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["profiles"])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "RDFa profiles" in result.output
    assert "application/xhtml+xml -> xhtml" in result.output
