"""Accumulation of @inlist values and their materialization as RDF collections."""

from __future__ import annotations

from typing import Callable, List

from rdflib.term import Node

from .frames import EvaluationFrame, ListMapping
from .rdf.terms import RDF

Emit = Callable[[Node, Node, Node], None]


class ListBuilder:
    """Collects list members per predicate in the list scope of a subject."""

    def __init__(self, create_blank_node: Callable[[], Node], emit: Emit) -> None:
        self._create_blank_node = create_blank_node
        self._emit = emit

    @staticmethod
    def ensure(frame: EvaluationFrame, predicate: Node) -> List[Node]:
        """Return the list for ``predicate`` in the frame's scope, creating it empty."""
        return frame.list_mapping.setdefault(predicate, [])

    def add(self, frame: EvaluationFrame, predicate: Node, item: Node) -> None:
        self.ensure(frame, predicate).append(item)

    def materialize(self, subject: Node, list_mapping: ListMapping) -> None:
        """Emit every list of the scope as an ``rdf:first``/``rdf:rest`` chain hanging off ``subject``."""
        for predicate, items in list_mapping.items():
            if not items:
                self._emit(subject, predicate, RDF.nil)
                continue
            cells = [self._create_blank_node() for _ in items]
            self._emit(subject, predicate, cells[0])
            for index, (cell, item) in enumerate(zip(cells, items)):
                self._emit(cell, RDF.first, item)
                rest = cells[index + 1] if index + 1 < len(cells) else RDF.nil
                self._emit(cell, RDF.rest, rest)


__all__ = ["ListBuilder"]
