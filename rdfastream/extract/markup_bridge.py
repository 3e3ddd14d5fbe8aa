"""Bridge from lxml's incremental parsers to tag events."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple, Union

from lxml import etree

from ..exceptions import RdfaParserError, RdfaSyntaxError
from ..logging import get_logger
from .base import HtmlParseListener, TagEventHandler

LOGGER = get_logger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class _LxmlTarget:
    """Parser target forwarding lxml callbacks to a ``TagEventHandler``."""

    def __init__(
        self,
        handlers: List[Union[TagEventHandler, HtmlParseListener]],
        *,
        xml_mode: bool,
    ) -> None:
        self.handlers = handlers
        self.xml_mode = xml_mode
        self._pending_namespaces: List[Tuple[str, str]] = []
        # one uri->prefix mapping per open element
        self._namespace_scopes: List[Dict[str, str]] = []

    def start_ns(self, prefix: Optional[str], uri: str) -> None:
        self._pending_namespaces.append((prefix or "", uri))

    def start(self, tag: str, attrib: Mapping[str, str]) -> None:
        if self.xml_mode:
            name, attributes = self._qualify(tag, attrib)
        else:
            name, attributes = tag, dict(attrib)
        for handler in self.handlers:
            handler.on_tag_open(name, attributes)

    def end(self, tag: str) -> None:
        if self.xml_mode and self._namespace_scopes:
            self._namespace_scopes.pop()
        for handler in self.handlers:
            handler.on_tag_close()

    def data(self, data: str) -> None:
        for handler in self.handlers:
            handler.on_text(data)

    def close(self) -> None:
        return None

    def _qualify(self, tag: str, attrib: Mapping[str, str]) -> Tuple[str, Dict[str, str]]:
        scope: Dict[str, str] = {}
        attributes: Dict[str, str] = {}
        for prefix, uri in self._pending_namespaces:
            scope[uri] = prefix
            attributes[f"xmlns:{prefix}" if prefix else "xmlns"] = uri
        self._pending_namespaces = []
        self._namespace_scopes.append(scope)
        for key, value in attrib.items():
            attributes[self._prefixed(key)] = value
        return self._prefixed(tag), attributes

    def _prefixed(self, name: str) -> str:
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        if uri == XML_NAMESPACE:
            return f"xml:{local}"
        for scope in reversed(self._namespace_scopes):
            if uri in scope:
                prefix = scope[uri]
                return f"{prefix}:{local}" if prefix else local
        return local


class MarkupTokenizer:
    """Incremental HTML (lenient) or XML (strict) tokenizer driving a ``TagEventHandler``."""

    def __init__(
        self,
        handler: TagEventHandler,
        *,
        strict: bool = False,
        encoding: str = "utf-8",
        listener: Optional[HtmlParseListener] = None,
    ) -> None:
        self.handler = handler
        self.listener = listener
        self.encoding = encoding
        self.strict = strict
        handlers: List[Union[TagEventHandler, HtmlParseListener]] = [handler]
        if listener is not None:
            handlers.insert(0, listener)
        self._target = _LxmlTarget(handlers, xml_mode=strict)
        if strict:
            self._parser = etree.XMLParser(target=self._target, encoding=encoding, resolve_entities=False)
        else:
            self._parser = etree.HTMLParser(target=self._target, encoding=encoding)
        self._has_content = False
        self._closed = False

    def feed(self, chunk: Union[str, bytes]) -> None:
        if self._closed:
            raise RdfaParserError("Cannot feed a tokenizer after the document was closed")
        data = chunk.encode(self.encoding) if isinstance(chunk, str) else chunk
        if not data:
            return
        if not self._has_content and not data.strip():
            # lxml rejects documents made only of whitespace
            return
        self._has_content = True
        try:
            self._parser.feed(data)
        except etree.XMLSyntaxError as error:
            raise _syntax_error(error) from error

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._has_content:
            try:
                self._parser.close()
            except etree.XMLSyntaxError as error:
                raise _syntax_error(error) from error
        else:
            LOGGER.debug("Closing an empty document")
        for handler in self._target.handlers:
            handler.on_end()


def _syntax_error(error: etree.XMLSyntaxError) -> RdfaSyntaxError:
    line, column = getattr(error, "position", (None, None))
    return RdfaSyntaxError(str(error.msg or error), line=line, column=column)


__all__ = ["MarkupTokenizer", "XML_NAMESPACE"]
