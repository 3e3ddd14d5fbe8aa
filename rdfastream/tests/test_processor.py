"""Tests for the tag event processor, driven with hand-built tag events."""

from __future__ import annotations

from typing import List

import pytest
from rdflib import BNode, Literal, Namespace, URIRef
from rdflib.namespace import RDF, XSD

from rdfastream.config import RdfaParserOptions
from rdfastream.exceptions import RdfaProtocolError
from rdfastream.processor import RdfaProcessor
from rdfastream.rdf.terms import RDFA, XHV
from rdfastream.sink import BufferedQuadSink
from rdfastream.tests.conftest import BASE, as_graph, el, feed

EX = Namespace("http://example.org/")
DC = Namespace("http://purl.org/dc/terms/")
FOAF = Namespace("http://xmlns.com/foaf/0.1/")
SCHEMA = Namespace("http://schema.org/")


def test_property_with_resource_on_root(extract) -> None:
    triples = extract(el("div", {"property": "dc:title", "resource": "img.jpg"}))
    assert triples == [(URIRef(BASE), DC.title, URIRef(BASE + "img.jpg"))]


def test_prefix_declarations_are_scoped(extract) -> None:
    triples = extract(
        el(
            "div",
            {"prefix": "ex: http://a.example/"},
            el("p", {"about": "ex:s", "property": "ex:p", "content": "v"}),
            el(
                "div",
                {"prefix": "ex: http://b.example/"},
                el("p", {"about": "ex:s", "property": "ex:p", "content": "w"}),
            ),
            el("p", {"about": "ex:t", "property": "ex:p", "content": "z"}),
        )
    )
    assert triples == [
        (URIRef("http://a.example/s"), URIRef("http://a.example/p"), Literal("v")),
        (URIRef("http://b.example/s"), URIRef("http://b.example/p"), Literal("w")),
        (URIRef("http://a.example/t"), URIRef("http://a.example/p"), Literal("z")),
    ]


def test_typeof_introduces_blank_node_subject(extract) -> None:
    triples = extract(
        el(
            "div",
            {"vocab": "http://schema.org/"},
            el("div", {"typeof": "Person"}, el("span", {"property": "name"}, "Alice")),
        )
    )
    assert triples[0] == (URIRef(BASE), RDFA.usesVocabulary, URIRef("http://schema.org/"))
    person = triples[1][0]
    assert isinstance(person, BNode)
    assert triples[1:] == [(person, RDF.type, SCHEMA.Person), (person, SCHEMA.name, Literal("Alice"))]


def test_property_with_typeof_links_new_resource(extract) -> None:
    triples = extract(
        el(
            "div",
            {"about": "#a"},
            el(
                "div",
                {"property": "http://example.org/author", "typeof": "http://example.org/Person"},
                el("span", {"property": "http://example.org/name"}, "Bob"),
            ),
        )
    )
    author = triples[0][0]
    assert isinstance(author, BNode)
    assert triples == [
        (author, RDF.type, EX.Person),
        (URIRef(BASE + "#a"), EX.author, author),
        (author, EX.name, Literal("Bob")),
    ]


def test_rel_completes_with_each_child_subject(extract) -> None:
    triples = extract(
        el(
            "div",
            {"about": "#a", "rel": "foaf:knows"},
            el("span", {"about": "#b"}),
            el("span", {"about": "#c"}),
        )
    )
    assert triples == [
        (URIRef(BASE + "#a"), FOAF.knows, URIRef(BASE + "#b")),
        (URIRef(BASE + "#a"), FOAF.knows, URIRef(BASE + "#c")),
    ]


def test_incomplete_triples_pass_through_plain_elements(extract) -> None:
    triples = extract(
        el("div", {"about": "#a", "rel": "foaf:knows"}, el("p", {}, el("span", {"about": "#b"}))),
    )
    assert triples == [(URIRef(BASE + "#a"), FOAF.knows, URIRef(BASE + "#b"))]


def test_rev_reverses_direction(extract) -> None:
    triples = extract(el("div", {"about": "#a", "rev": "foaf:knows", "resource": "#b"}))
    assert triples == [(URIRef(BASE + "#b"), FOAF.knows, URIRef(BASE + "#a"))]


def test_rel_completed_by_typed_child(extract) -> None:
    graph = as_graph(
        extract(
            el(
                "div",
                {"about": "#a", "rel": "http://example.org/r"},
                el("span", {"typeof": "http://example.org/T"}),
            )
        )
    )
    [child] = list(graph.objects(URIRef(BASE + "#a"), EX.r))
    assert isinstance(child, BNode)
    assert (child, RDF.type, EX.T) in graph
    assert len(graph) == 2


def test_non_curie_rel_is_dropped_when_property_present(extract) -> None:
    triples = extract(el("a", {"property": "http://example.org/p", "rel": "license", "href": "http://l.example/"}))
    assert triples == [(URIRef(BASE), EX.p, URIRef("http://l.example/"))]


def test_rel_terms_without_property(extract) -> None:
    triples = extract(el("a", {"rel": "license", "href": "http://l.example/"}))
    assert triples == [(URIRef(BASE), XHV.license, URIRef("http://l.example/"))]


def test_head_and_body_inherit_subject(extract) -> None:
    triples = extract(el("html", {"about": "http://x.example/"}, el("body", {"typeof": "http://example.org/T"})))
    assert triples == [(URIRef("http://x.example/"), RDF.type, EX.T)]


def test_base_tag_moves_document_base(extract) -> None:
    triples = extract(
        el(
            "html",
            {},
            el("head", {}, el("base", {"href": "http://other.example/doc#frag"})),
            el("body", {}, el("p", {"property": "http://example.org/p", "content": "x"})),
        )
    )
    assert triples == [(URIRef("http://other.example/doc"), EX.p, Literal("x"))]


def test_base_tag_ignored_by_core_profile(extract) -> None:
    triples = extract(
        el(
            "html",
            {},
            el("head", {}, el("base", {"href": "http://other.example/doc"})),
            el("body", {}, el("p", {"property": "http://example.org/p", "content": "x"})),
        ),
        profile="core",
    )
    assert triples == [(URIRef(BASE), EX.p, Literal("x"))]


def test_xml_base_scopes_relative_iris(extract) -> None:
    triples = extract(
        el(
            "div",
            {"xml:base": "http://base2.example/dir/"},
            el("span", {"about": "x", "property": "http://example.org/p", "content": "c"}),
        )
    )
    assert triples == [(URIRef("http://base2.example/dir/x"), EX.p, Literal("c"))]


def test_language_inheritance(extract) -> None:
    triples = extract(
        el(
            "div",
            {"lang": "en"},
            el("span", {"property": "http://example.org/a"}, "hi"),
            el("span", {"property": "http://example.org/b", "xml:lang": ""}, "plain"),
        )
    )
    assert triples[0][2].language == "en"
    assert triples[1][2].language is None


def test_initial_language_option(extract) -> None:
    [triple] = extract(el("span", {"property": "http://example.org/a"}, "hallo"), language="de")
    assert triple[2].language == "de"


def test_empty_vocab_resets_to_initial_vocab(extract) -> None:
    triples = extract(
        el(
            "div",
            {"vocab": "http://schema.org/"},
            el("span", {"vocab": ""}, el("b", {"property": "name"}, "x")),
        ),
        vocab="http://initial.example/",
    )
    assert triples == [
        (URIRef(BASE), RDFA.usesVocabulary, URIRef("http://schema.org/")),
        (URIRef(BASE), URIRef("http://initial.example/name"), Literal("x")),
    ]


def test_time_tag_infers_datatypes(extract) -> None:
    triples = extract(
        el(
            "div",
            {},
            el("time", {"property": "http://example.org/d"}, "2012-03-18"),
            el("time", {"property": "http://example.org/d"}, "2012-03-18T00:00:00Z"),
            el("time", {"property": "http://example.org/d"}, "last week"),
        )
    )
    assert [triple[2].datatype for triple in triples] == [XSD.date, XSD.dateTime, None]


def test_datetime_attribute_wins_over_text(extract) -> None:
    [triple] = extract(el("time", {"property": "http://example.org/d", "datetime": "2012-03-18T00:00:00Z"}, "March"))
    assert triple[2] == Literal("2012-03-18T00:00:00Z", datatype=XSD.dateTime, normalize=False)


def test_content_wins_over_text(extract) -> None:
    [triple] = extract(el("span", {"property": "http://example.org/p", "content": "attr"}, "text"))
    assert str(triple[2]) == "attr"


def test_empty_element_gives_empty_literal(extract) -> None:
    assert extract(el("span", {"property": "http://example.org/p"})) == [(URIRef(BASE), EX.p, Literal(""))]


def test_explicit_datatype(extract) -> None:
    [triple] = extract(el("span", {"property": "http://example.org/p", "datatype": "xsd:integer"}, "42"))
    assert triple[2].datatype == XSD.integer
    assert str(triple[2]) == "42"


def test_xml_literal_serializes_child_markup(extract) -> None:
    [triple] = extract(
        el(
            "div",
            {"property": "http://example.org/p", "datatype": "rdf:XMLLiteral"},
            "a ",
            el("b", {"class": "x"}, "bold & brave"),
        )
    )
    assert triple[2].datatype == RDF.XMLLiteral
    assert str(triple[2]) == 'a <b class="x">bold &amp; brave</b>'


def test_plain_property_uses_text_without_markup(extract) -> None:
    [triple] = extract(el("div", {"property": "http://example.org/p"}, "a ", el("b", {}, "bold")))
    assert str(triple[2]) == "a bold"


def test_role_attribute(extract) -> None:
    triples = extract(el("div", {"id": "nav", "role": "navigation"}))
    assert triples == [(URIRef(BASE + "#nav"), XHV.role, XHV.navigation)]


def test_role_attribute_ignored_by_core_profile(extract) -> None:
    assert extract(el("div", {"id": "nav", "role": "navigation"}), profile="core") == []


def test_xhtml_initial_context_terms(extract) -> None:
    triples = extract(el("a", {"rel": "next", "href": "page2"}), profile="xhtml")
    assert triples == [(URIRef(BASE), XHV.next, URIRef(BASE + "page2"))]
    assert extract(el("a", {"rel": "next", "href": "page2"}), profile="html") == []


def test_xmlns_prefix_mappings(extract) -> None:
    triples = extract(el("div", {"xmlns:ex": "http://ns.example/", "about": "#a", "property": "ex:p", "content": "v"}))
    assert triples == [(URIRef(BASE + "#a"), URIRef("http://ns.example/p"), Literal("v"))]


def test_unresolvable_values_drop_only_their_statement(extract) -> None:
    triples = extract(
        el(
            "div",
            {"about": "#a"},
            el("span", {"property": "unknown", "content": "dropped"}),
            el("span", {"property": "http://example.org/p", "content": "kept"}),
        )
    )
    assert triples == [(URIRef(BASE + "#a"), EX.p, Literal("kept"))]


def test_default_graph_and_custom_graph() -> None:
    sink = BufferedQuadSink()
    processor = RdfaProcessor(RdfaParserOptions(base_iri=BASE, default_graph="http://graph.example/"), sink=sink)
    feed(processor, el("span", {"property": "http://example.org/p", "content": "v"}))
    processor.on_end()
    [quad] = sink.drain()
    assert quad[3] == URIRef("http://graph.example/")


def test_prefix_listener_receives_local_declarations() -> None:
    seen: List[tuple[str, str]] = []
    processor = RdfaProcessor(
        RdfaParserOptions(base_iri=BASE),
        sink=BufferedQuadSink(),
        prefix_listener=lambda prefix, iri: seen.append((prefix, iri)),
    )
    feed(processor, el("div", {"prefix": "ex: http://ex.example/ foo: http://foo.example/"}))
    processor.on_end()
    assert seen == [("ex", "http://ex.example/"), ("foo", "http://foo.example/")]


def test_on_end_closes_open_tags() -> None:
    sink = BufferedQuadSink()
    processor = RdfaProcessor(RdfaParserOptions(base_iri=BASE), sink=sink)
    processor.on_tag_open("div", {"about": "#a"})
    processor.on_tag_open("span", {"property": "http://example.org/p"})
    processor.on_text("unfinished")
    processor.on_end()
    assert [quad[:3] for quad in sink.drain()] == [(URIRef(BASE + "#a"), EX.p, Literal("unfinished"))]


def test_closing_without_opening_is_a_protocol_error() -> None:
    processor = RdfaProcessor(RdfaParserOptions(base_iri=BASE), sink=BufferedQuadSink())
    with pytest.raises(RdfaProtocolError):
        processor.on_tag_close()


def test_sink_errors_propagate() -> None:
    class FailingSink:
        def emit(self, quad) -> None:
            raise RuntimeError("sink is full")

    processor = RdfaProcessor(RdfaParserOptions(base_iri=BASE), sink=FailingSink())
    with pytest.raises(RuntimeError, match="sink is full"):
        processor.on_tag_open("div", {"property": "http://example.org/p", "content": "v"})


def test_unresolvable_datatype_drops_the_statement(extract) -> None:
    triples = extract(
        el(
            "div",
            {"about": "#s"},
            el("span", {"property": "http://example.org/p", "datatype": "not a type"}, "v"),
            el("span", {"property": "http://example.org/p", "datatype": "[bad]", "content": "w"}),
            el("span", {"property": "http://example.org/q"}, "kept"),
        )
    )
    assert triples == [(URIRef(BASE + "#s"), EX.q, Literal("kept"))]


def test_relative_prefix_follows_moved_document_base(extract) -> None:
    triples = extract(
        el(
            "html",
            {},
            el("head", {}, el("base", {"href": "http://other.example/"})),
            el("body", {}, el("p", {"prefix": "r: rel/", "property": "r:p", "content": "v"})),
        )
    )
    assert triples == [(URIRef("http://other.example/"), URIRef("http://other.example/rel/p"), Literal("v"))]
