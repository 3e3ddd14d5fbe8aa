"""Configuration models for rdfastream."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .profiles import RdfaFeatures, RdfaProfile, content_type_to_profile, features_for_profile


class RdfaParserOptions(BaseModel):
    base_iri: str = ""
    vocab: Optional[str] = None
    language: Optional[str] = None
    # None selects the dataset default graph
    default_graph: Optional[str] = None
    profile: Optional[RdfaProfile] = None
    content_type: Optional[str] = None
    features: Optional[RdfaFeatures] = None
    # tokenize as XML instead of lenient HTML
    strict: bool = False
    encoding: str = "utf-8"

    def resolve_profile(self) -> str:
        if self.profile is not None:
            return self.profile
        return content_type_to_profile(self.content_type)

    def resolve_features(self) -> RdfaFeatures:
        """Explicit features win over the profile, which wins over the content type."""
        if self.features is not None:
            return self.features
        return features_for_profile(self.resolve_profile())


__all__ = ["RdfaParserOptions"]
