"""RDFa profiles and the optional features each one enables."""

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict

RdfaProfile = Literal["", "core", "html", "xhtml", "xml"]


class RdfaFeatures(BaseModel):
    """Toggles for behaviour that differs between host languages."""

    model_config = ConfigDict(frozen=True)

    # <base href> sets the document base IRI
    base_tag: bool = False
    # xml:base sets a base IRI for the element subtree
    xml_base: bool = False
    # plain @lang sets the language next to xml:lang
    lang_attribute: bool = False
    # non-CURIE, non-IRI rel/rev values are ignored when @property is present
    only_allow_uri_rel_rev_if_property: bool = False
    # <head> and <body> inherit the parent object as subject
    inherit_subject_in_head_body: bool = False
    datetime_attribute: bool = False
    # <time> contents get a date/time datatype when they look like one
    time_tag: bool = False
    # rdf:HTML as datatype serializes the element contents
    html_datatype: bool = False
    copy_rdfa_patterns: bool = False
    xmlns_prefix_mappings: bool = False
    # children of an rdf:XMLLiteral element are not processed as RDFa
    skip_handling_xml_literal_children: bool = False
    xhtml_initial_context: bool = False
    role_attribute: bool = False


RDFA_FEATURES: Dict[str, RdfaFeatures] = {
    "": RdfaFeatures(
        base_tag=True,
        xml_base=True,
        lang_attribute=True,
        only_allow_uri_rel_rev_if_property=True,
        inherit_subject_in_head_body=True,
        datetime_attribute=True,
        time_tag=True,
        html_datatype=True,
        copy_rdfa_patterns=True,
        xmlns_prefix_mappings=True,
        xhtml_initial_context=True,
        role_attribute=True,
    ),
    "core": RdfaFeatures(
        lang_attribute=True,
        only_allow_uri_rel_rev_if_property=True,
        copy_rdfa_patterns=True,
        xmlns_prefix_mappings=True,
    ),
    "html": RdfaFeatures(
        base_tag=True,
        lang_attribute=True,
        only_allow_uri_rel_rev_if_property=True,
        inherit_subject_in_head_body=True,
        datetime_attribute=True,
        time_tag=True,
        html_datatype=True,
        copy_rdfa_patterns=True,
        xmlns_prefix_mappings=True,
        role_attribute=True,
    ),
    "xhtml": RdfaFeatures(
        base_tag=True,
        lang_attribute=True,
        only_allow_uri_rel_rev_if_property=True,
        inherit_subject_in_head_body=True,
        datetime_attribute=True,
        time_tag=True,
        html_datatype=True,
        copy_rdfa_patterns=True,
        xmlns_prefix_mappings=True,
        xhtml_initial_context=True,
        role_attribute=True,
    ),
    "xml": RdfaFeatures(
        xml_base=True,
        lang_attribute=True,
        datetime_attribute=True,
        time_tag=True,
        xmlns_prefix_mappings=True,
        role_attribute=True,
    ),
}

RDFA_CONTENT_TYPES: Dict[str, str] = {
    "text/html": "html",
    "application/xhtml+xml": "xhtml",
    "application/xml": "xml",
    "text/xml": "xml",
    "image/svg+xml": "xml",
}


def content_type_to_profile(content_type: str | None) -> str:
    """Map a media type to a profile, falling back to the full profile."""
    if not content_type:
        return ""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return RDFA_CONTENT_TYPES.get(media_type, "")


def features_for_profile(profile: str) -> RdfaFeatures:
    try:
        return RDFA_FEATURES[profile]
    except KeyError as error:
        raise ValueError(f"Unknown RDFa profile '{profile}'") from error


__all__ = [
    "RDFA_CONTENT_TYPES",
    "RDFA_FEATURES",
    "RdfaFeatures",
    "RdfaProfile",
    "content_type_to_profile",
    "features_for_profile",
]
