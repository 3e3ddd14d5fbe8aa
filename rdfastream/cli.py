"""Command-line interface for rdfastream."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import orjson
import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import RdfaParserOptions
from .exceptions import RdfaError
from .logging import configure_logging, get_logger
from .profiles import RDFA_CONTENT_TYPES, RDFA_FEATURES, RdfaFeatures
from .rdf.writer import parse_with_prefixes, serialize_quads, write_quads

app = typer.Typer(help="Extract RDF statements from RDFa markup.")
LOGGER = get_logger(__name__)

OUTPUT_FORMATS = ("nquads", "nt", "turtle", "trig", "xml", "json-ld")

SUFFIX_CONTENT_TYPES: Dict[str, str] = {
    ".html": "text/html",
    ".htm": "text/html",
    ".xhtml": "application/xhtml+xml",
    ".xml": "application/xml",
    ".svg": "image/svg+xml",
}


@app.callback()
def main() -> None:
    """rdfastream CLI root."""
    return None


def _load_yaml_config(config_path: Optional[Path]) -> dict[str, object]:
    if config_path is None:
        return {}
    if not config_path.exists():
        raise typer.BadParameter(f"Config file {config_path} does not exist")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:  # pragma: no cover - yaml error path
        raise typer.BadParameter(f"Failed to parse {config_path}: {error}") from error
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{config_path} must contain a mapping")
    return data


def _merge_config(config_path: Optional[Path], cli_options: dict[str, object]) -> RdfaParserOptions:
    file_overrides = _load_yaml_config(config_path)
    given = {key: value for key, value in cli_options.items() if value is not None}
    merged: dict[str, object] = {**file_overrides, **given}
    try:
        return RdfaParserOptions(**merged)
    except ValidationError as error:
        raise typer.BadParameter(str(error)) from error


def _guess_content_type(source: Path) -> Optional[str]:
    return SUFFIX_CONTENT_TYPES.get(source.suffix.lower())


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))


@app.command("parse")
def parse(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Markup document."),
    base_iri: Optional[str] = typer.Option(None, help="Base IRI; defaults to the file URI."),
    profile: Optional[str] = typer.Option(None, help="RDFa profile: core, html, xhtml or xml."),
    content_type: Optional[str] = typer.Option(None, help="Media type; guessed from the file suffix."),
    vocab: Optional[str] = typer.Option(None, help="Initial vocabulary IRI."),
    language: Optional[str] = typer.Option(None, help="Initial language tag."),
    strict: Optional[bool] = typer.Option(None, "--strict/--lenient", help="Tokenize as XML."),
    rdf_format: str = typer.Option("nquads", "--format", help="Output serialization."),
    output: Optional[Path] = typer.Option(None, help="Write output here instead of stdout."),
    config: Optional[Path] = typer.Option(None, help="YAML file with parser options."),
    prefixes_out: Optional[Path] = typer.Option(None, help="Write declared prefixes as JSON."),
    log_level: str = typer.Option("WARNING", help="Logging level."),
) -> None:
    """Parse SOURCE and print the extracted statements."""
    configure_logging(log_level)
    if rdf_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Unsupported format '{rdf_format}'; use one of {', '.join(OUTPUT_FORMATS)}")

    options = _merge_config(
        config,
        {
            "base_iri": base_iri,
            "profile": profile,
            "content_type": content_type,
            "vocab": vocab,
            "language": language,
            "strict": strict,
        },
    )
    if not options.base_iri:
        options.base_iri = source.resolve().as_uri()
    if options.profile is None and options.content_type is None:
        options.content_type = _guess_content_type(source)
        if options.content_type is None:
            LOGGER.warning("Unknown file suffix '%s'; using the full RDFa profile", source.suffix)

    LOGGER.info("Parsing %s with profile '%s'", source, options.resolve_profile())
    try:
        quads, prefixes = parse_with_prefixes(source.read_bytes(), options)
    except RdfaError as error:
        LOGGER.error("Failed to parse %s: %s", source, error)
        raise typer.Exit(code=1) from error
    LOGGER.info("Extracted %d statements", len(quads))

    if prefixes_out is not None:
        _write_json(prefixes_out, prefixes)
    if output is not None:
        write_quads(quads, output, rdf_format, prefixes)
    else:
        typer.echo(serialize_quads(quads, rdf_format, prefixes), nl=False)


@app.command("profiles")
def profiles() -> None:
    """Show the features enabled by each RDFa profile."""
    table = Table(title="RDFa profiles")
    table.add_column("feature")
    names = list(RDFA_FEATURES)
    for name in names:
        table.add_column(name or "(all)", justify="center")
    for feature in RdfaFeatures.model_fields:
        row = ["yes" if getattr(RDFA_FEATURES[name], feature) else "-" for name in names]
        table.add_row(feature, *row)
    console = Console()
    console.print(table)
    for content_type, profile in RDFA_CONTENT_TYPES.items():
        console.print(f"{content_type} -> {profile}")


__all__ = ["app"]
