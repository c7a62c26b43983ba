"""
External collaborators: the image-search and enrichment providers.
"""

from .enrichment import (
    EnrichmentClient,
    EnrichmentResult,
    HeuristicEnrichmentClient,
    OllamaEnrichmentClient,
    OpenAICompatibleEnrichmentClient,
    create_enrichment_client,
)
from .image_search import ImageSearchProvider, OpenverseClient, item_from_record

__all__ = [
    "EnrichmentClient",
    "EnrichmentResult",
    "HeuristicEnrichmentClient",
    "OllamaEnrichmentClient",
    "OpenAICompatibleEnrichmentClient",
    "create_enrichment_client",
    "ImageSearchProvider",
    "OpenverseClient",
    "item_from_record",
]
