"""RDFa Core processing: tag events in, statements out."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional
from xml.sax.saxutils import escape, quoteattr

from rdflib import BNode, URIRef
from rdflib.term import Node

from .attributes import TagAttributes
from .config import RdfaParserOptions
from .extract.base import TagEventHandler
from .frames import ContextStack, EvaluationFrame, IncompleteTriple, Resource
from .lists import ListBuilder
from .literals import create_literal
from .logging import get_logger
from .patterns import BlankNodeAnchors, PatternRegistry, RdfaPattern
from .rdf.context import initial_prefixes
from .rdf.terms import RDF, RDFA, XHV, TermFactory
from .resolver import PrefixListener, TermResolver, resolve_prefixes
from .sink import QuadSink

LOGGER = get_logger(__name__)

HEAD_BODY = frozenset({"head", "body"})
# Attributes naming the pattern itself, replaced by the copy subject
PATTERN_IDENTITY = frozenset({"about", "resource", "href", "src", "typeof"})


class RdfaProcessor(TagEventHandler):
    """Evaluation state machine for one document.

    Every opening tag pushes an evaluation frame, works out the new subject,
    the object resource and the typed resource, and emits what it can right
    away. Text-valued properties wait for the closing tag. ``rdfa:copy``
    requests wait for the end of the document.
    """

    def __init__(
        self,
        options: Optional[RdfaParserOptions] = None,
        *,
        factory: Optional[TermFactory] = None,
        sink: QuadSink,
        prefix_listener: Optional[PrefixListener] = None,
    ) -> None:
        self.options = options or RdfaParserOptions()
        self.features = self.options.resolve_features()
        self.factory = factory or TermFactory(self.options.default_graph)
        self.sink = sink
        self.prefix_listener = prefix_listener
        self.resolver = TermResolver(self.factory, self.options.base_iri)
        self.lists = ListBuilder(self.resolver.create_blank_node, self._emit)
        self.patterns = PatternRegistry()
        self._graph = self.factory.default_graph()
        self._copy_enabled = self.features.copy_rdfa_patterns
        self._instantiating: List[Node] = []
        self._replaying = 0
        root = EvaluationFrame(
            name="",
            prefixes_all=initial_prefixes(xhtml=self.features.xhtml_initial_context),
            vocab=self.options.vocab,
            language=self.options.language or None,
            is_initial=True,
        )
        self.stack = ContextStack(root)

    # -- tag events -----------------------------------------------------

    def on_tag_open(self, name: str, attributes: Mapping[str, str]) -> None:
        top = self.stack.top()
        parent = self.stack.effective_parent()
        frame = parent.child(name)
        frame.collect_child_tags = top.collect_child_tags
        self.stack.push(frame)

        if top.collect_child_tags:
            self._serialize_open_tag(frame, top, name, attributes)
            if self.features.skip_handling_xml_literal_children:
                return

        if top.collected_pattern is not None:
            child = RdfaPattern(name=name, attributes=dict(attributes))
            top.collected_pattern.content.append(child)
            frame.collected_pattern = child
            return

        features = self.features
        attrs = TagAttributes.parse(attributes, features.only_allow_uri_rel_rev_if_property)

        if features.base_tag and name == "base" and attrs.href is not None:
            self.resolver.set_document_base(attrs.href)
        vocab_iri = self._apply_scope(frame, attrs)
        if features.time_tag and name == "time" and attrs.datatype is None:
            frame.interpret_object_as_time = True

        if self._copy_enabled:
            if self._open_pattern(frame, parent, name, attributes, attrs):
                return
            if self._open_copy(frame, parent, attrs):
                return

        if vocab_iri is not None:
            self._emit(self.resolver.base_iri_term(frame), RDFA.usesVocabulary, vocab_iri)
        if features.role_attribute and attrs.role:
            self._emit_roles(frame, attrs)

        self._process(frame, parent, name, attrs)

    def on_text(self, data: str) -> None:
        frame = self.stack.top()
        if frame.collected_pattern is not None:
            frame.collected_pattern.content.append(data)
            return
        frame.text_with_tags.append(escape(data))
        frame.text_without_tags.append(data)

    def on_tag_close(self) -> None:
        frame = self.stack.top()
        if frame.collected_pattern is not None:
            self.stack.pop()
            if frame.collected_pattern.root_pattern:
                self.patterns.define(frame.collected_pattern)
            return

        if not (frame.serialize_tag and self.features.skip_handling_xml_literal_children):
            if frame.predicates:
                self._emit_text_property(frame)
            if frame.owns_list_mapping:
                self.lists.materialize(self.resolver.resource_or_base(frame.subject, frame), frame.list_mapping)

        self.stack.pop()
        if frame.serialize_tag:
            frame.text_with_tags.append(f"</{frame.name}>")
        parent = self.stack.top()
        parent.text_with_tags.extend(frame.text_with_tags)
        parent.text_without_tags.extend(frame.text_without_tags)

    def on_end(self) -> None:
        while len(self.stack) > 1:
            self.on_tag_close()
        if self._copy_enabled:
            self._resolve_copies()
        self._emit_unreferenced_patterns()

    # -- opening tag steps ------------------------------------------------

    def _serialize_open_tag(
        self, frame: EvaluationFrame, top: EvaluationFrame, name: str, attributes: Mapping[str, str]
    ) -> None:
        serialized = dict(attributes)
        if not top.serialize_tag:
            # Outermost captured element: carry the namespaces declared around it
            for scope in self.stack:
                for prefix, iri in scope.prefixes_custom.items():
                    serialized.setdefault(f"xmlns:{prefix}" if prefix else "xmlns", iri)
        rendered = "".join(f" {key}={quoteattr(value)}" for key, value in serialized.items())
        frame.text_with_tags.append(f"<{name}{rendered}>")
        frame.serialize_tag = True

    def _apply_scope(self, frame: EvaluationFrame, attrs: TagAttributes) -> Optional[URIRef]:
        """Apply base, prefix, language and vocabulary declarations to ``frame``.

        Returns the vocabulary IRI when the tag declares a new one.
        """
        if self.features.xml_base and attrs.xml_base is not None:
            frame.local_base_iri = self.resolver.base_iri_from(attrs.xml_base, frame)

        frame.prefixes_all, frame.prefixes_custom = resolve_prefixes(
            attrs.raw, frame.prefixes_all, self.features.xmlns_prefix_mappings
        )
        if self.prefix_listener is not None and not self._replaying:
            for prefix, iri in frame.prefixes_custom.items():
                self.prefix_listener(prefix, iri)

        if attrs.xml_lang is not None:
            frame.language = attrs.xml_lang or None
        elif self.features.lang_attribute and attrs.lang is not None:
            frame.language = attrs.lang or None

        if attrs.vocab is None:
            return None
        if not attrs.vocab:
            frame.vocab = self.stack.root().vocab
            return None
        vocab_iri = self.resolver.create_iri(attrs.vocab, frame, False, False, False)
        if vocab_iri is None:
            return None
        frame.vocab = str(vocab_iri)
        return vocab_iri

    def _open_pattern(
        self,
        frame: EvaluationFrame,
        parent: EvaluationFrame,
        name: str,
        attributes: Mapping[str, str],
        attrs: TagAttributes,
    ) -> bool:
        if not attrs.typeof:
            return False
        types = self.resolver.create_vocab_iris(attrs.typeof, frame, True, False)
        if RDFA.Pattern not in types:
            return False
        key = None
        if attrs.resource is not None:
            key = self.resolver.create_iri(attrs.resource, frame, False, True, True)
        elif attrs.about is not None:
            key = self.resolver.create_iri(attrs.about, frame, False, True, True)
        frame.collected_pattern = RdfaPattern(
            name=name,
            attributes=dict(attributes),
            root_pattern=True,
            key=key,
            parent_frame=_snapshot(parent),
            scope=_snapshot(frame),
        )
        return True

    def _open_copy(self, frame: EvaluationFrame, parent: EvaluationFrame, attrs: TagAttributes) -> bool:
        """Record an ``rdfa:copy`` request and strip it from ``@property``.

        Returns True when ``rdfa:copy`` was the only property, in which case
        the element is skipped.
        """
        if not attrs.property_:
            return False
        tokens = attrs.property_.split()
        remaining = [token for token in tokens if self.resolver.create_iri(token, frame, True, True, False) != RDFA.copy]
        if len(remaining) == len(tokens):
            return False
        subject: Resource = parent.object
        if attrs.about is not None:
            subject = self.resolver.create_iri(attrs.about, frame, False, True, True)
        subject_term = self.resolver.resource_or_base(subject, frame)
        target = None
        if attrs.resource is not None:
            target = self.resolver.create_iri(attrs.resource, frame, False, True, True)
        elif attrs.href_or_src is not None:
            target = self.resolver.create_iri(attrs.href_or_src, frame, False, False, True)
        if target is None or subject_term is None:
            LOGGER.debug("Ignoring rdfa:copy without a usable subject or target")
        elif not self._replaying:
            self.patterns.request_copy(target, subject_term)
        elif target in self._instantiating:
            LOGGER.debug("Ignoring cyclic rdfa:copy of %s", target)
        else:
            pattern = self.patterns.get(target)
            if pattern is None:
                LOGGER.debug("No pattern %s for rdfa:copy", target)
            else:
                self._instantiate(pattern, subject_term)
        if remaining:
            attrs.property_ = " ".join(remaining)
            return False
        frame.skip_element = True
        return True

    def _emit_roles(self, frame: EvaluationFrame, attrs: TagAttributes) -> None:
        if attrs.id:
            role_subject = self.resolver.create_iri("#" + attrs.id, frame, False, False, False)
        else:
            role_subject = self.resolver.create_blank_node()
        role_scope = _snapshot(frame)
        role_scope.vocab = str(XHV)
        for role in self.resolver.create_vocab_iris(attrs.role or "", role_scope, True, False):
            self._emit(role_subject, XHV.role, role)

    def _process(self, frame: EvaluationFrame, parent: EvaluationFrame, name: str, attrs: TagAttributes) -> None:
        features = self.features
        resolver = self.resolver
        is_root = parent.is_initial
        head_body = features.inherit_subject_in_head_body and name in HEAD_BODY
        about = resolver.create_iri(attrs.about, frame, False, True, True) if attrs.about is not None else None
        resource = resolver.create_iri(attrs.resource, frame, False, True, True) if attrs.resource is not None else None
        href_src = (
            resolver.create_iri(attrs.href_or_src, frame, False, False, True) if attrs.href_or_src is not None else None
        )
        has_datetime = features.datetime_attribute and attrs.datetime is not None
        frame.inlist = attrs.inlist

        new_subject: Resource = None
        current_object: Resource = None
        typed: Resource = None

        if not attrs.has_rel_or_rev:
            if (
                attrs.property_ is not None
                and attrs.content is None
                and attrs.datatype is None
                and not has_datetime
            ):
                if about is not None:
                    new_subject = about
                elif is_root:
                    new_subject = True
                elif parent.object is not None:
                    new_subject = parent.object
                if attrs.typeof is not None:
                    if about is not None:
                        typed = about
                    elif is_root:
                        typed = True
                    else:
                        typed = _first(resource, href_src)
                        if typed is None and head_body:
                            typed = new_subject
                        if typed is None:
                            typed = resolver.create_blank_node()
                    current_object = typed
            else:
                new_subject = _first(about, resource, href_src)
                if new_subject is None:
                    if is_root:
                        new_subject = True
                    elif attrs.typeof is not None and not head_body:
                        new_subject = resolver.create_blank_node()
                    else:
                        new_subject = parent.object
                        if attrs.property_ is None:
                            frame.skip_element = True
                if attrs.typeof is not None:
                    typed = new_subject
        else:
            about_present = about is not None or is_root
            if about is not None:
                new_subject = about
            elif is_root:
                new_subject = True
            else:
                new_subject = parent.object
            if attrs.typeof is not None and about_present:
                typed = new_subject
            current_object = _first(resource, href_src)
            if current_object is None and attrs.typeof is not None and not about_present and not head_body:
                current_object = resolver.create_blank_node()
            if attrs.typeof is not None and not about_present:
                typed = new_subject if head_body else current_object

        if attrs.typeof is not None and typed is not None:
            typed_term = resolver.resource_or_base(typed, frame)
            for rdf_type in resolver.create_vocab_iris(attrs.typeof, frame, True, False):
                self._emit(typed_term, RDF.type, rdf_type)

        if new_subject is not None and new_subject != parent.object:
            frame.list_mapping = {}
            frame.owns_list_mapping = True

        allow_terms = not (features.only_allow_uri_rel_rev_if_property and attrs.property_ is not None)
        rels = resolver.create_vocab_iris(attrs.rel, frame, allow_terms, False) if attrs.rel else []
        revs = resolver.create_vocab_iris(attrs.rev, frame, allow_terms, False) if attrs.rev else []
        subject_term = resolver.resource_or_base(new_subject, frame)

        if current_object is not None:
            object_term = resolver.resource_or_base(current_object, frame)
            if attrs.inlist:
                for predicate in rels:
                    self.lists.add(frame, predicate, object_term)
            else:
                for predicate in rels:
                    self._emit(subject_term, predicate, object_term)
                for predicate in revs:
                    self._emit(object_term, predicate, subject_term)
        elif rels or revs:
            for predicate in rels:
                items = ListBuilder.ensure(frame, predicate) if attrs.inlist else None
                frame.incomplete_triples.append(IncompleteTriple(predicate, False, items))
            for predicate in revs:
                frame.incomplete_triples.append(IncompleteTriple(predicate, True))
            current_object = resolver.create_blank_node()

        if attrs.property_ is not None:
            self._process_property(frame, attrs, subject_term, typed, resource, href_src, has_datetime)

        if not frame.skip_element and new_subject is not None:
            if parent.incomplete_triples:
                self._complete_triples(parent, subject_term, frame)
        elif not frame.incomplete_triples:
            frame.incomplete_triples = parent.incomplete_triples

        frame.subject = new_subject if new_subject is not None else parent.subject
        if current_object is not None:
            frame.object = current_object
        elif new_subject is not None:
            frame.object = new_subject
        else:
            frame.object = parent.subject

    def _process_property(
        self,
        frame: EvaluationFrame,
        attrs: TagAttributes,
        subject_term: Optional[Node],
        typed: Resource,
        resource: Optional[Node],
        href_src: Optional[Node],
        has_datetime: bool,
    ) -> None:
        resolver = self.resolver
        predicates = resolver.create_vocab_iris(attrs.property_ or "", frame, True, False)
        if attrs.datatype:
            frame.datatype = resolver.create_iri(attrs.datatype, frame, True, True, False)
            if frame.datatype is None:
                LOGGER.debug("Dropping %s with unresolvable datatype %r", attrs.property_, attrs.datatype)
                return
            if self._is_markup_datatype(frame.datatype):
                frame.collect_child_tags = True

        local_object: Resource = None
        if attrs.datatype is None:
            if not attrs.has_rel_or_rev and attrs.content is None:
                local_object = _first(resource, href_src)
            if local_object is None and attrs.typeof is not None and attrs.about is None:
                local_object = typed

        if attrs.content is not None:
            value = create_literal(attrs.content, frame, self.factory)
        elif has_datetime:
            if frame.datatype is None:
                frame.interpret_object_as_time = True
            value = create_literal(attrs.datetime or "", frame, self.factory)
        elif local_object is not None:
            value = resolver.resource_or_base(local_object, frame)
        else:
            frame.predicates = predicates
            return

        for predicate in predicates:
            if attrs.inlist:
                self.lists.add(frame, predicate, value)
            else:
                self._emit(subject_term, predicate, value)

    def _complete_triples(self, parent: EvaluationFrame, subject_term: Optional[Node], frame: EvaluationFrame) -> None:
        parent_subject = self.resolver.resource_or_base(parent.subject, frame)
        for incomplete in parent.incomplete_triples:
            if incomplete.list_items is not None:
                if subject_term is not None:
                    incomplete.list_items.append(subject_term)
            elif incomplete.reverse:
                self._emit(subject_term, incomplete.predicate, parent_subject)
            else:
                self._emit(parent_subject, incomplete.predicate, subject_term)

    # -- closing tag steps ------------------------------------------------

    def _is_markup_datatype(self, datatype: Optional[Node]) -> bool:
        if datatype == RDF.XMLLiteral:
            return True
        return self.features.html_datatype and datatype == RDF.HTML

    def _emit_text_property(self, frame: EvaluationFrame) -> None:
        text = frame.markup if self._is_markup_datatype(frame.datatype) else frame.text
        literal = create_literal(text, frame, self.factory)
        subject = self.resolver.resource_or_base(frame.subject, frame)
        for predicate in frame.predicates or ():
            if frame.inlist:
                self.lists.add(frame, predicate, literal)
            else:
                self._emit(subject, predicate, literal)

    # -- patterns ---------------------------------------------------------

    def _resolve_copies(self) -> None:
        while True:
            ready = self.patterns.take_resolvable()
            if not ready:
                break
            for request, pattern in ready:
                self._instantiate(pattern, request.subject)
        for request in self.patterns.pending:
            LOGGER.debug("No pattern %s for rdfa:copy on %s", request.target, request.subject)

    def _instantiate(self, pattern: RdfaPattern, subject: Node) -> None:
        """Replay ``pattern`` onto ``subject``.

        The pattern root is replayed with ``subject`` in place of its own
        identity and without the ``rdfa:Pattern`` type, so its remaining
        types and properties land on ``subject`` before its children are
        replayed.
        """
        pattern.referenced = True
        anchors = BlankNodeAnchors(pattern, self.factory)
        previous_factory = self.resolver.blank_node_factory
        declared = pattern.parent_frame or pattern.scope
        scope = _replay_frame(declared, subject, subject, is_initial=False)
        root_attributes = self._copy_site_attributes(pattern, subject)
        self._instantiating.append(pattern.key)
        self.resolver.blank_node_factory = anchors
        self._replaying += 1
        self.stack.push(scope)
        try:
            self.on_tag_open(pattern.name, root_attributes)
            self._replay(pattern, anchors)
            self.on_tag_close()
        finally:
            self.stack.pop()
            self._replaying -= 1
            self.resolver.blank_node_factory = previous_factory
            self._instantiating.pop()
        self.lists.materialize(subject, scope.list_mapping)

    def _copy_site_attributes(self, pattern: RdfaPattern, subject: Node) -> Dict[str, str]:
        attributes = {key: value for key, value in pattern.attributes.items() if key not in PATTERN_IDENTITY}
        attributes["about"] = f"_:{subject}" if isinstance(subject, BNode) else str(subject)
        scope = pattern.scope or pattern.parent_frame
        types = [
            token
            for token in pattern.attributes.get("typeof", "").split()
            if scope is None or self.resolver.create_iri(token, scope, True, True, False) != RDFA.Pattern
        ]
        if types:
            attributes["typeof"] = " ".join(types)
        return attributes

    def _replay(self, pattern: RdfaPattern, anchors: Optional[BlankNodeAnchors]) -> None:
        for index, item in enumerate(pattern.content):
            if isinstance(item, str):
                self.on_text(item)
                continue
            if anchors is not None:
                anchors.enter(index)
            self.on_tag_open(item.name, item.attributes)
            self._replay(item, anchors)
            self.on_tag_close()
            if anchors is not None:
                anchors.leave()

    def _emit_unreferenced_patterns(self) -> None:
        """Patterns nobody copied are ordinary data after all."""
        unreferenced = self.patterns.unreferenced()
        if not unreferenced:
            return
        copy_enabled = self._copy_enabled
        self._copy_enabled = False
        self._replaying += 1
        try:
            for pattern in unreferenced:
                declared = pattern.parent_frame
                if declared is None:
                    continue
                scope = _replay_frame(declared, declared.subject, declared.object, is_initial=declared.is_initial)
                self.stack.push(scope)
                try:
                    self.on_tag_open(pattern.name, pattern.attributes)
                    self._replay(pattern, None)
                    self.on_tag_close()
                finally:
                    self.stack.pop()
        finally:
            self._replaying -= 1
            self._copy_enabled = copy_enabled

    # -- output -----------------------------------------------------------

    def _emit(self, subject: Optional[Node], predicate: Optional[Node], obj: Optional[Node]) -> None:
        if subject is None or predicate is None or obj is None:
            LOGGER.debug("Dropping incomplete statement (%s, %s, %s)", subject, predicate, obj)
            return
        self.sink.emit(self.factory.quad(subject, predicate, obj, self._graph))


def _first(*candidates: Optional[Node]) -> Optional[Node]:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _snapshot(frame: EvaluationFrame) -> EvaluationFrame:
    """Copy of the scoped values of ``frame``, detached from its mutable buffers."""
    return EvaluationFrame(
        name=frame.name,
        prefixes_all=frame.prefixes_all,
        prefixes_custom=frame.prefixes_custom,
        subject=frame.subject,
        object=frame.object,
        vocab=frame.vocab,
        language=frame.language,
        local_base_iri=frame.local_base_iri,
        is_initial=frame.is_initial,
    )


def _replay_frame(source: EvaluationFrame, subject: Resource, obj: Resource, *, is_initial: bool) -> EvaluationFrame:
    frame = _snapshot(source)
    frame.subject = subject
    frame.object = obj
    frame.is_initial = is_initial
    frame.owns_list_mapping = True
    return frame


__all__ = ["RdfaProcessor"]
