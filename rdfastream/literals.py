"""Literal construction with datatype, language and date/time inference."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from rdflib import Literal, URIRef

from .frames import EvaluationFrame
from .rdf.terms import XSD, TermFactory

# Order matters: the first matching form wins.
TIME_PATTERNS: Tuple[Tuple[re.Pattern[str], URIRef], ...] = (
    (re.compile(r"^-?P([0-9]+Y)?([0-9]+M)?([0-9]+D)?(T([0-9]+H)?([0-9]+M)?([0-9]+(\.[0-9])?S)?)?$"), XSD.duration),
    (
        re.compile(
            r"^[0-9]+-[0-9][0-9]-[0-9][0-9]T[0-9][0-9]:[0-9][0-9]:[0-9][0-9]((Z?)|([+-][0-9][0-9]:[0-9][0-9]))$"
        ),
        XSD.dateTime,
    ),
    (re.compile(r"^[0-9]+-[0-9][0-9]-[0-9][0-9]Z?$"), XSD.date),
    (re.compile(r"^[0-9][0-9]:[0-9][0-9]:[0-9][0-9]((Z?)|([+-][0-9][0-9]:[0-9][0-9]))$"), XSD.time),
    (re.compile(r"^[0-9]+-[0-9][0-9]$"), XSD.gYearMonth),
    (re.compile(r"^[0-9]+$"), XSD.gYear),
)


def infer_time_datatype(value: str) -> Optional[URIRef]:
    """Return the XSD date/time datatype whose lexical form ``value`` matches."""
    for pattern, datatype in TIME_PATTERNS:
        if pattern.fullmatch(value):
            return datatype
    return None


def create_literal(value: str, frame: EvaluationFrame, factory: TermFactory) -> Literal:
    """Build the literal for ``value`` in the scope of ``frame``.

    An explicit datatype beats the language. Inside ``<time>`` or for
    ``@datetime`` a missing datatype is inferred from the value's shape.
    """
    datatype = frame.datatype
    if datatype is None and frame.interpret_object_as_time:
        datatype = infer_time_datatype(value)
    if datatype is not None:
        return factory.literal(value, datatype=datatype)
    return factory.literal(value, language=frame.language or None)


__all__ = ["TIME_PATTERNS", "create_literal", "infer_time_datatype"]
