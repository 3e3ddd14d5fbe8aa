"""Interfaces between the markup tokenizer and the RDFa processor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Protocol


class HtmlParseListener(Protocol):
    """Observer of the raw tokenizer events; it cannot influence extraction."""

    def on_tag_open(self, name: str, attributes: Mapping[str, str]) -> None:
        ...

    def on_text(self, data: str) -> None:
        ...

    def on_tag_close(self) -> None:
        ...

    def on_end(self) -> None:
        ...


class TagEventHandler(ABC):
    """Consumer of markup parse events in document order."""

    @abstractmethod
    def on_tag_open(self, name: str, attributes: Mapping[str, str]) -> None:
        """Handle an opening tag with its decoded attributes."""

    @abstractmethod
    def on_text(self, data: str) -> None:
        """Handle a run of character data."""

    @abstractmethod
    def on_tag_close(self) -> None:
        """Handle the closing of the innermost open tag."""

    @abstractmethod
    def on_end(self) -> None:
        """Handle the end of the document."""


__all__ = ["HtmlParseListener", "TagEventHandler"]
