"""RDF writer helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from rdflib import Dataset, Graph

from ..config import RdfaParserOptions
from ..parser import RdfaParser
from .terms import Quad

QUAD_FORMATS = frozenset({"nquads", "trig", "trix"})


def quads_to_dataset(quads: Iterable[Quad], prefixes: Optional[Mapping[str, str]] = None) -> Dataset:
    dataset = Dataset()
    _bind(dataset, prefixes)
    for subject, predicate, obj, graph in quads:
        dataset.add((subject, predicate, obj, graph))
    return dataset


def quads_to_graph(quads: Iterable[Quad], prefixes: Optional[Mapping[str, str]] = None) -> Graph:
    """Collect quads into a single graph, ignoring their graph names."""
    graph = Graph()
    _bind(graph, prefixes)
    for subject, predicate, obj, _ in quads:
        graph.add((subject, predicate, obj))
    return graph


def serialize_quads(
    quads: Iterable[Quad],
    rdf_format: str = "nquads",
    prefixes: Optional[Mapping[str, str]] = None,
) -> str:
    if rdf_format in QUAD_FORMATS:
        return quads_to_dataset(quads, prefixes).serialize(format=rdf_format)
    return quads_to_graph(quads, prefixes).serialize(format=rdf_format)


def write_quads(
    quads: Iterable[Quad],
    file_path: Path,
    rdf_format: str = "nquads",
    prefixes: Optional[Mapping[str, str]] = None,
) -> None:
    """Serialize quads to ``file_path`` in ``rdf_format``."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_quads(quads, rdf_format, prefixes), encoding="utf-8")


def parse_with_prefixes(
    document: Union[str, bytes],
    options: Optional[RdfaParserOptions] = None,
    **overrides: Any,
) -> Tuple[List[Quad], Dict[str, str]]:
    """Parse a whole document, also returning every prefix it declared."""
    prefixes: Dict[str, str] = {}
    parser = RdfaParser(options, prefix_listener=prefixes.__setitem__, **overrides)
    return parser.parse(document), prefixes


def parse_to_dataset(
    document: Union[str, bytes], options: Optional[RdfaParserOptions] = None, **overrides: Any
) -> Dataset:
    quads, prefixes = parse_with_prefixes(document, options, **overrides)
    return quads_to_dataset(quads, prefixes)


def parse_to_graph(document: Union[str, bytes], options: Optional[RdfaParserOptions] = None, **overrides: Any) -> Graph:
    quads, prefixes = parse_with_prefixes(document, options, **overrides)
    return quads_to_graph(quads, prefixes)


def _bind(graph: Graph, prefixes: Optional[Mapping[str, str]]) -> None:
    for prefix, namespace in (prefixes or {}).items():
        if prefix:
            graph.bind(prefix, namespace, override=True)


__all__ = [
    "parse_to_dataset",
    "parse_to_graph",
    "parse_with_prefixes",
    "quads_to_dataset",
    "quads_to_graph",
    "serialize_quads",
    "write_quads",
]
