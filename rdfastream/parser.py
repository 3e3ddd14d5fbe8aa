"""Streaming RDFa parser facade."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Union

from .config import RdfaParserOptions
from .exceptions import RdfaParserError
from .extract.base import HtmlParseListener
from .extract.markup_bridge import MarkupTokenizer
from .logging import get_logger
from .processor import RdfaProcessor
from .rdf.terms import Quad, TermFactory
from .resolver import PrefixListener
from .sink import BufferedQuadSink, QuadSink

LOGGER = get_logger(__name__)

Chunk = Union[str, bytes]


class RdfaParser:
    """Push parser: feed markup chunks, collect the quads they produced.

    Options can be given as an ``RdfaParserOptions`` instance, as keyword
    overrides, or both. A parser handles exactly one document.
    """

    def __init__(
        self,
        options: Optional[RdfaParserOptions] = None,
        *,
        term_factory: Optional[TermFactory] = None,
        sink: Optional[QuadSink] = None,
        html_parse_listener: Optional[HtmlParseListener] = None,
        prefix_listener: Optional[PrefixListener] = None,
        **overrides: Any,
    ) -> None:
        base = options or RdfaParserOptions()
        self.options = RdfaParserOptions(**{**base.model_dump(), **overrides}) if overrides else base
        self.term_factory = term_factory or TermFactory(self.options.default_graph)
        self._buffer = BufferedQuadSink()
        self.sink: QuadSink = sink or self._buffer
        self.html_parse_listener = html_parse_listener
        self.prefix_listener = prefix_listener
        self.processor = RdfaProcessor(
            self.options,
            factory=self.term_factory,
            sink=self.sink,
            prefix_listener=prefix_listener,
        )
        self.tokenizer = MarkupTokenizer(
            self.processor,
            strict=self.options.strict,
            encoding=self.options.encoding,
            listener=html_parse_listener,
        )
        self._closed = False
        LOGGER.debug("Parser created with features %s", self.processor.features)

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, chunk: Chunk) -> List[Quad]:
        """Tokenize ``chunk`` and return the quads completed so far."""
        if self._closed:
            raise RdfaParserError("Cannot feed a parser after close()")
        self.tokenizer.feed(chunk)
        return self._buffer.drain()

    def close(self) -> List[Quad]:
        """End the document, resolve pattern copies and return the remaining quads."""
        if self._closed:
            raise RdfaParserError("Parser is already closed")
        self._closed = True
        self.tokenizer.close()
        return self._buffer.drain()

    def parse(self, document: Chunk) -> List[Quad]:
        quads = self.feed(document)
        quads.extend(self.close())
        return quads

    def import_stream(self, chunks: Iterable[Chunk]) -> Iterator[Quad]:
        """Parse ``chunks`` with a fresh parser configured like this one."""
        parser = RdfaParser(
            self.options,
            term_factory=self.term_factory,
            html_parse_listener=self.html_parse_listener,
            prefix_listener=self.prefix_listener,
        )
        for chunk in chunks:
            yield from parser.feed(chunk)
        yield from parser.close()


__all__ = ["Chunk", "RdfaParser"]
