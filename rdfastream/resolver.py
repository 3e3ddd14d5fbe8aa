"""CURIE, term and IRI resolution against the evaluation context."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import urljoin

from rdflib import BNode, URIRef

from .frames import EvaluationFrame, Resource
from .logging import get_logger
from .rdf.terms import TermFactory, XHV

LOGGER = get_logger(__name__)

IRI_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+\-.]*|_):[^ \"<>{}|\\\[\]`\x00-\x20]*$")
PREFIX_NAME_PATTERN = re.compile(r"^([^:\s]+):$")
WHITESPACE = re.compile(r"\s+")

Term = Union[URIRef, BNode]
PrefixListener = Callable[[str, str], None]


def is_valid_iri(iri: str) -> bool:
    """Check that a string looks like an absolute IRI (or a blank node label)."""
    return bool(IRI_PATTERN.fullmatch(iri))


def parse_prefix_declarations(value: str) -> Dict[str, str]:
    """Parse a ``prefix`` attribute of whitespace separated ``name: iri`` pairs.

    Malformed fragments are skipped: a ``name:`` without an IRI, an IRI
    without a preceding ``name:`` and tokens such as ``:iri``.
    """
    declarations: Dict[str, str] = {}
    tokens = [token for token in WHITESPACE.split(value) if token]
    index = 0
    while index < len(tokens):
        match = PREFIX_NAME_PATTERN.match(tokens[index])
        if match is None:
            index += 1
            continue
        if index + 1 >= len(tokens) or PREFIX_NAME_PATTERN.match(tokens[index + 1]):
            index += 1
            continue
        declarations[match.group(1)] = tokens[index + 1]
        index += 2
    return declarations


def resolve_prefixes(
    attributes: Mapping[str, str],
    parent_prefixes: Dict[str, str],
    use_xmlns: bool,
) -> tuple[Dict[str, str], Dict[str, str]]:
    """Merge locally declared prefixes over the inherited ones.

    Returns ``(prefixes_all, prefixes_custom)``. When the tag declares
    nothing, the parent mapping itself is returned.
    """
    custom: Dict[str, str] = {}
    if use_xmlns:
        for name, value in attributes.items():
            if name == "xmlns" or name.startswith("xmlns:"):
                custom[name[6:]] = value
    prefix_value = attributes.get("prefix")
    if prefix_value:
        custom.update(parse_prefix_declarations(prefix_value))
    if not custom:
        return parent_prefixes, custom
    return {**parent_prefixes, **custom}, custom


def expand_prefixed_term(term: str, prefixes: Mapping[str, str]) -> str:
    """Expand ``prefix:local`` or a known term; anything else is returned unchanged."""
    prefix, separator, local = term.partition(":")
    if separator:
        if prefix == "":
            return str(XHV) + local
        expanded = prefixes.get(prefix)
        if expanded:
            return expanded + local
    if term:
        expanded = prefixes.get(term.lower())
        if expanded:
            return expanded
    return term


class TermResolver:
    """Turns attribute values into RDF terms.

    The only state is the document base IRI (which a ``<base>`` tag may
    move) and the hook used to allocate fresh blank nodes.
    """

    def __init__(self, factory: TermFactory, base_iri: str = "") -> None:
        self.factory = factory
        self.base_iri = factory.named_node(base_iri or "")
        self.blank_node_factory: Optional[Callable[[], BNode]] = None

    def set_document_base(self, href: str) -> None:
        """Move the document base, dropping any fragment of the new value."""
        self.base_iri = self.base_iri_from(href)
        LOGGER.debug("Document base IRI set to %s", self.base_iri)

    def base_iri_from(self, value: str, frame: Optional[EvaluationFrame] = None) -> URIRef:
        """Resolve a base value against the current base, dropping its fragment."""
        href = value.split("#", 1)[0]
        current = self.base_iri_term(frame) if frame is not None else self.base_iri
        return self.factory.named_node(urljoin(str(current), href))

    def base_iri_term(self, frame: EvaluationFrame) -> URIRef:
        return frame.local_base_iri or self.base_iri

    def resource_or_base(self, resource: Resource, frame: EvaluationFrame) -> Optional[Term]:
        if resource is True:
            return self.base_iri_term(frame)
        return resource

    def create_blank_node(self) -> BNode:
        if self.blank_node_factory is not None:
            return self.blank_node_factory()
        return self.factory.blank_node()

    def create_iri(
        self,
        term: Optional[str],
        frame: EvaluationFrame,
        vocab: bool,
        allow_safe_curie: bool,
        allow_blank_node: bool,
    ) -> Optional[Term]:
        """Resolve a term, CURIE, safe CURIE or IRI.

        ``vocab`` selects vocabulary mode (bare terms against ``@vocab``)
        over base mode (relative IRIs against the base). Returns None when
        the value cannot be turned into a valid term.
        """
        term = term or ""

        if not allow_safe_curie:
            if not vocab:
                term = urljoin(str(self.base_iri_term(frame)), term)
            if not is_valid_iri(term):
                LOGGER.debug("Dropping invalid IRI %r", term)
                return None
            return self.factory.named_node(term)

        if len(term) > 1 and term[0] == "[" and term[-1] == "]":
            term = term[1:-1]
            if ":" not in term:
                return None

        if term.startswith("_:"):
            if not allow_blank_node:
                return None
            return self.factory.blank_node(term[2:])

        if vocab and frame.vocab and ":" not in term:
            return self.factory.named_node(frame.vocab + term)

        iri = expand_prefixed_term(term, frame.prefixes_all)
        if not vocab or iri != term:
            iri = urljoin(str(self.base_iri_term(frame)), iri)
        if not is_valid_iri(iri):
            LOGGER.debug("Dropping unresolvable term %r", term)
            return None
        return self.factory.named_node(iri)

    def create_vocab_iris(
        self,
        terms: str,
        frame: EvaluationFrame,
        allow_terms: bool,
        allow_blank_node: bool,
    ) -> List[Term]:
        """Resolve a whitespace separated list in vocabulary mode, dropping failures."""
        resolved: List[Term] = []
        for token in WHITESPACE.split(terms):
            if not token or (not allow_terms and ":" not in token):
                continue
            iri = self.create_iri(token, frame, True, True, allow_blank_node)
            if iri is not None:
                resolved.append(iri)
        return resolved


__all__ = [
    "IRI_PATTERN",
    "PrefixListener",
    "Term",
    "TermResolver",
    "expand_prefixed_term",
    "is_valid_iri",
    "parse_prefix_declarations",
    "resolve_prefixes",
]
