"""Streaming RDFa Core extraction producing rdflib terms."""

from .config import RdfaParserOptions
from .exceptions import RdfaError, RdfaParserError, RdfaProtocolError, RdfaSyntaxError
from .parser import RdfaParser
from .processor import RdfaProcessor
from .profiles import RdfaFeatures

__all__ = [
    "RdfaError",
    "RdfaFeatures",
    "RdfaParser",
    "RdfaParserError",
    "RdfaParserOptions",
    "RdfaProcessor",
    "RdfaProtocolError",
    "RdfaSyntaxError",
]
