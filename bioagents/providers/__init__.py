"""Concrete capability providers for the harvest, enrich and issue pipeline."""

from .dataverse import DataverseHarvesterProvider
from .did_issuer import DIDIssuerProvider
from .enricher import MetadataEnricherProvider, build_model

__all__ = [
    "DataverseHarvesterProvider",
    "DIDIssuerProvider",
    "MetadataEnricherProvider",
    "build_model",
]
