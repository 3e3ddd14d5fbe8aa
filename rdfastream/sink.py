"""Destinations for emitted quads."""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Protocol

from .rdf.terms import Quad


class QuadSink(Protocol):
    def emit(self, quad: Quad) -> None:
        ...


class BufferedQuadSink:
    """Queue of quads the host drains after each chunk."""

    def __init__(self) -> None:
        self._buffer: Deque[Quad] = deque()

    def __len__(self) -> int:
        return len(self._buffer)

    def emit(self, quad: Quad) -> None:
        self._buffer.append(quad)

    def drain(self) -> List[Quad]:
        drained = list(self._buffer)
        self._buffer.clear()
        return drained


__all__ = ["BufferedQuadSink", "QuadSink"]
