"""rdflib-backed term construction for extracted statements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from rdflib import BNode, Literal, Namespace, URIRef
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.namespace import RDF, XSD
from rdflib.term import Node

from ..logging import get_logger

LOGGER = get_logger(__name__)

RDFA = Namespace("http://www.w3.org/ns/rdfa#")
XHV = Namespace("http://www.w3.org/1999/xhtml/vocab#")

# Label used for the bare "_:" blank node
IDENTITY_BLANK_NODE = "b_identity"

Quad = Tuple[Node, Node, Node, Node]


@dataclass(slots=True)
class TermFactory:
    """Builds subjects, predicates, objects and quads as rdflib terms."""

    default_graph_iri: Optional[str] = None

    def named_node(self, value: str) -> URIRef:
        return URIRef(value)

    def blank_node(self, label: Optional[str] = None) -> BNode:
        if label is None:
            return BNode()
        return BNode(label or IDENTITY_BLANK_NODE)

    def literal(self, value: str, *, datatype: Optional[URIRef] = None, language: Optional[str] = None) -> Literal:
        """Create a literal keeping its lexical form; an unusable language tag yields a plain literal."""
        if datatype is not None:
            return Literal(value, datatype=datatype, normalize=False)
        if language:
            try:
                return Literal(value, lang=language, normalize=False)
            except ValueError:
                LOGGER.debug("Ignoring invalid language tag %r", language)
        return Literal(value, normalize=False)

    def default_graph(self) -> URIRef:
        if self.default_graph_iri:
            return URIRef(self.default_graph_iri)
        return DATASET_DEFAULT_GRAPH_ID

    def quad(self, subject: Node, predicate: Node, obj: Node, graph: Optional[Node] = None) -> Quad:
        return (subject, predicate, obj, graph if graph is not None else self.default_graph())


__all__ = ["IDENTITY_BLANK_NODE", "Quad", "RDF", "RDFA", "TermFactory", "XHV", "XSD"]
