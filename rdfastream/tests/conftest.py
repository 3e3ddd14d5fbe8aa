"""Shared fixtures driving the RDFa processor with hand-built tag events."""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple, Union

import pytest
from rdflib import Graph
from rdflib.term import Node

from rdfastream.config import RdfaParserOptions
from rdfastream.processor import RdfaProcessor
from rdfastream.sink import BufferedQuadSink

BASE = "http://example.org/"

Element = Tuple[str, Dict[str, str], List[Union[str, "Element"]]]
Triple = Tuple[Node, Node, Node]


def el(name: str, attributes: Dict[str, str] | None = None, *children: Union[str, Element]) -> Element:
    return (name, attributes or {}, list(children))


def feed(processor: RdfaProcessor, element: Element) -> None:
    name, attributes, children = element
    processor.on_tag_open(name, attributes)
    for child in children:
        if isinstance(child, str):
            processor.on_text(child)
        else:
            feed(processor, child)
    processor.on_tag_close()


def as_graph(triples: List[Triple]) -> Graph:
    graph = Graph()
    for triple in triples:
        graph.add(triple)
    return graph


@pytest.fixture()
def extract() -> Callable[..., List[Triple]]:
    """Run elements through a fresh processor and return the emitted triples in order."""

    def _extract(*elements: Element, **options: object) -> List[Triple]:
        options.setdefault("base_iri", BASE)
        sink = BufferedQuadSink()
        processor = RdfaProcessor(RdfaParserOptions(**options), sink=sink)
        for element in elements:
            feed(processor, element)
        processor.on_end()
        return [quad[:3] for quad in sink.drain()]

    return _extract
