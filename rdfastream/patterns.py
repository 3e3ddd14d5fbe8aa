"""Capture of rdfa:Pattern subtrees and deferred resolution of rdfa:copy requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from rdflib import BNode
from rdflib.term import Node

from .frames import EvaluationFrame
from .logging import get_logger
from .rdf.terms import TermFactory

LOGGER = get_logger(__name__)

AnchorKey = Tuple[Tuple[int, ...], int]


@dataclass(slots=True, eq=False)
class RdfaPattern:
    """One element of a captured pattern subtree, with its text and children in document order."""

    name: str
    attributes: Dict[str, str]
    root_pattern: bool = False
    key: Optional[Node] = None
    content: List[Union[str, "RdfaPattern"]] = field(default_factory=list)
    referenced: bool = False
    # Scope the pattern root was declared in
    parent_frame: Optional[EvaluationFrame] = None
    # Scope of the pattern root itself, used when its children are copied
    scope: Optional[EvaluationFrame] = None
    constructed_blank_nodes: Dict[AnchorKey, BNode] = field(default_factory=dict)


class BlankNodeAnchors:
    """Blank node allocator that gives a pattern the same nodes on every copy.

    Nodes are keyed by the child-index path of the element being replayed
    and the allocation ordinal within that element.
    """

    def __init__(self, pattern: RdfaPattern, factory: TermFactory) -> None:
        self.pattern = pattern
        self.factory = factory
        self._path: List[int] = []
        self._ordinals: Dict[Tuple[int, ...], int] = {}

    def enter(self, index: int) -> None:
        self._path.append(index)

    def leave(self) -> None:
        self._path.pop()

    def __call__(self) -> BNode:
        path = tuple(self._path)
        ordinal = self._ordinals.get(path, 0)
        self._ordinals[path] = ordinal + 1
        key = (path, ordinal)
        node = self.pattern.constructed_blank_nodes.get(key)
        if node is None:
            node = self.factory.blank_node()
            self.pattern.constructed_blank_nodes[key] = node
        return node


@dataclass(slots=True)
class CopyRequest:
    target: Node
    subject: Node


class PatternRegistry:
    """Patterns by key, unkeyed patterns, and copy requests in the order they were made."""

    def __init__(self) -> None:
        self._patterns: Dict[Node, RdfaPattern] = {}
        self._anonymous: List[RdfaPattern] = []
        self.pending: List[CopyRequest] = []

    def __len__(self) -> int:
        return len(self._patterns) + len(self._anonymous)

    def define(self, pattern: RdfaPattern) -> None:
        if pattern.key is None:
            self._anonymous.append(pattern)
            return
        if pattern.key in self._patterns:
            LOGGER.debug("Ignoring duplicate definition of pattern %s", pattern.key)
            return
        self._patterns[pattern.key] = pattern

    def get(self, key: Node) -> Optional[RdfaPattern]:
        return self._patterns.get(key)

    def request_copy(self, target: Node, subject: Node) -> None:
        self.pending.append(CopyRequest(target=target, subject=subject))

    def take_resolvable(self) -> List[Tuple[CopyRequest, RdfaPattern]]:
        """Remove and return pending requests whose pattern is known, oldest first."""
        ready: List[Tuple[CopyRequest, RdfaPattern]] = []
        remaining: List[CopyRequest] = []
        for request in self.pending:
            pattern = self._patterns.get(request.target)
            if pattern is None:
                remaining.append(request)
            else:
                ready.append((request, pattern))
        self.pending = remaining
        return ready

    def unreferenced(self) -> List[RdfaPattern]:
        return [pattern for pattern in self._patterns.values() if not pattern.referenced] + [
            pattern for pattern in self._anonymous if not pattern.referenced
        ]


__all__ = ["BlankNodeAnchors", "CopyRequest", "PatternRegistry", "RdfaPattern"]
