"""
Version constants for the curation engine.

Bump a component version whenever its observable output changes so that
refined queries stay reproducible across releases.
"""

from typing import Dict

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
TOKENIZER_VERSION = "tokenizer-1.0.0"
LEXICON_VERSION = "lexicons-en-2026.1"
SCORING_VERSION = "scoring-1.0.0"
ENRICHMENT_PROMPT_VERSION = "enrich-prompt-v1.0"


def get_component_versions() -> Dict[str, str]:
    """
    Get current component versions.

    Returns:
        Mapping of component name to version string
    """
    return {
        "tokenizer": TOKENIZER_VERSION,
        "lexicons": LEXICON_VERSION,
        "scoring": SCORING_VERSION,
        "enrichment_prompt": ENRICHMENT_PROMPT_VERSION,
    }
