"""Structured view over the RDFa attributes of a single tag."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


def _keep_absolute(value: str) -> Optional[str]:
    tokens = [token for token in value.split() if ":" in token]
    return " ".join(tokens) if tokens else None


@dataclass(slots=True)
class TagAttributes:
    about: Optional[str] = None
    resource: Optional[str] = None
    href: Optional[str] = None
    src: Optional[str] = None
    typeof: Optional[str] = None
    property_: Optional[str] = None
    rel: Optional[str] = None
    rev: Optional[str] = None
    content: Optional[str] = None
    datatype: Optional[str] = None
    datetime: Optional[str] = None
    vocab: Optional[str] = None
    prefix: Optional[str] = None
    lang: Optional[str] = None
    xml_lang: Optional[str] = None
    xml_base: Optional[str] = None
    role: Optional[str] = None
    id: Optional[str] = None
    inlist: bool = False
    raw: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw: Mapping[str, str], only_uri_rel_rev_if_property: bool = False) -> "TagAttributes":
        """Pick the RDFa attributes out of a raw attribute mapping.

        With ``only_uri_rel_rev_if_property`` and ``@property`` present, only
        CURIE or IRI tokens of ``@rel``/``@rev`` survive; if none survive
        the attribute counts as absent.
        """
        attributes = cls(
            about=raw.get("about"),
            resource=raw.get("resource"),
            href=raw.get("href"),
            src=raw.get("src"),
            typeof=raw.get("typeof"),
            property_=raw.get("property"),
            rel=raw.get("rel"),
            rev=raw.get("rev"),
            content=raw.get("content"),
            datatype=raw.get("datatype"),
            datetime=raw.get("datetime"),
            vocab=raw.get("vocab"),
            prefix=raw.get("prefix"),
            lang=raw.get("lang"),
            xml_lang=raw.get("xml:lang"),
            xml_base=raw.get("xml:base"),
            role=raw.get("role"),
            id=raw.get("id"),
            inlist="inlist" in raw,
            raw=dict(raw),
        )
        if only_uri_rel_rev_if_property and attributes.property_ is not None:
            if attributes.rel is not None:
                attributes.rel = _keep_absolute(attributes.rel)
            if attributes.rev is not None:
                attributes.rev = _keep_absolute(attributes.rev)
        return attributes

    @property
    def has_rel_or_rev(self) -> bool:
        return self.rel is not None or self.rev is not None

    @property
    def href_or_src(self) -> Optional[str]:
        return self.href if self.href is not None else self.src


__all__ = ["TagAttributes"]
