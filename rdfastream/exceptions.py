"""Exception hierarchy raised by the RDFa parser."""

from __future__ import annotations


class RdfaError(Exception):
    """Base class for all rdfastream errors."""


class RdfaSyntaxError(RdfaError):
    """The markup tokenizer could not read the document."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{location}")


class RdfaProtocolError(RdfaError):
    """Tag events arrived in an order the evaluation stack cannot follow."""


class RdfaParserError(RdfaError):
    """The parser was used after the document was closed."""


__all__ = ["RdfaError", "RdfaParserError", "RdfaProtocolError", "RdfaSyntaxError"]
