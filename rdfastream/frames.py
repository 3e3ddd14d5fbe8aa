"""Evaluation context frames, one per open tag, and the stack that holds them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Union

from rdflib import URIRef
from rdflib.term import Node

from .exceptions import RdfaProtocolError

if TYPE_CHECKING:
    from .patterns import RdfaPattern

# A resource slot: a term, True for "the base IRI", or None when unset
Resource = Union[Node, bool, None]
ListMapping = Dict[Node, List[Node]]


@dataclass(slots=True)
class IncompleteTriple:
    """A rel/rev predicate waiting for a descendant to provide its object."""

    predicate: Node
    reverse: bool = False
    # Set when the predicate came with @inlist; completion appends to this list
    list_items: Optional[List[Node]] = None


@dataclass(slots=True)
class EvaluationFrame:
    name: str
    prefixes_all: Dict[str, str]
    prefixes_custom: Dict[str, str] = field(default_factory=dict)
    subject: Resource = None
    object: Resource = None
    predicates: Optional[List[Node]] = None
    vocab: Optional[str] = None
    language: Optional[str] = None
    datatype: Optional[URIRef] = None
    incomplete_triples: List[IncompleteTriple] = field(default_factory=list)
    inlist: bool = False
    list_mapping: ListMapping = field(default_factory=dict)
    owns_list_mapping: bool = False
    collect_child_tags: bool = False
    serialize_tag: bool = False
    collected_pattern: Optional["RdfaPattern"] = None
    interpret_object_as_time: bool = False
    skip_element: bool = False
    text_with_tags: List[str] = field(default_factory=list)
    text_without_tags: List[str] = field(default_factory=list)
    local_base_iri: Optional[URIRef] = None
    is_initial: bool = False

    def child(self, name: str) -> "EvaluationFrame":
        """Open a frame for a nested tag, inheriting the scoped values of this one.

        Mappings are shared, not copied; a frame that declares something new
        replaces the mapping instead of mutating it.
        """
        return EvaluationFrame(
            name=name,
            prefixes_all=self.prefixes_all,
            subject=self.subject,
            object=self.object,
            vocab=self.vocab,
            language=self.language,
            list_mapping=self.list_mapping,
            collect_child_tags=self.collect_child_tags,
            local_base_iri=self.local_base_iri,
        )

    @property
    def text(self) -> str:
        return "".join(self.text_without_tags)

    @property
    def markup(self) -> str:
        return "".join(self.text_with_tags)


class ContextStack:
    """LIFO of evaluation frames mirroring the open-tag nesting."""

    def __init__(self, root: EvaluationFrame) -> None:
        self._frames: List[EvaluationFrame] = [root]

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[EvaluationFrame]:
        return iter(self._frames)

    def top(self) -> EvaluationFrame:
        return self._frames[-1]

    def parent(self) -> Optional[EvaluationFrame]:
        """Frame directly under the top, or None when only the root frame is open."""
        return self._frames[-2] if len(self._frames) > 1 else None

    def root(self) -> EvaluationFrame:
        return self._frames[0]

    def push(self, frame: EvaluationFrame) -> None:
        self._frames.append(frame)

    def pop(self) -> EvaluationFrame:
        if len(self._frames) == 1:
            raise RdfaProtocolError("Received a closing tag without a matching opening tag")
        return self._frames.pop()

    def effective_parent(self) -> EvaluationFrame:
        """Return the nearest frame that was not skipped.

        When skipped frames are passed over, the result still carries the
        language, prefixes, vocabulary and base of the innermost frame.
        """
        top = self._frames[-1]
        index = len(self._frames) - 1
        while index > 0 and self._frames[index].skip_element:
            index -= 1
        found = self._frames[index]
        if found is top:
            return top
        return replace(
            found,
            language=top.language,
            prefixes_all=top.prefixes_all,
            prefixes_custom=top.prefixes_custom,
            vocab=top.vocab,
            local_base_iri=top.local_base_iri,
        )


__all__ = ["ContextStack", "EvaluationFrame", "IncompleteTriple", "ListMapping", "Resource"]
