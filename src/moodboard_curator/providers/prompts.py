"""
Versioned prompt templates for the enrichment provider.
"""

from typing import Sequence

from ..version import ENRICHMENT_PROMPT_VERSION

__all__ = ["ENRICHMENT_PROMPT_VERSION", "SYSTEM_PROMPT", "build_enrichment_prompt"]


SYSTEM_PROMPT = """You turn a free-text mood description into an image search query.

Return ONLY a JSON object with these keys:
- "refined_query": 3 to 10 concrete visual keywords separated by spaces,
  suitable for a stock/open-license image search engine. No punctuation.
- "colors": list of color words implied by the description
- "moods": list of mood words implied by the description
- "tags": list of other short descriptive tags (subjects, composition, lighting)

Prefer nouns and adjectives a photographer would use in a title.
Keep any colors the user typed explicitly."""


def build_enrichment_prompt(text: str, kept_titles: Sequence[str] = ()) -> str:
    """
    Build the user prompt for one enrichment call.

    Args:
        text: Free text typed by the user
        kept_titles: Titles of images the user already kept, newest first

    Returns:
        Prompt string
    """
    lines = [f"Description: {text.strip()}"]
    if kept_titles:
        lines.append("Images the user already liked:")
        lines.extend(f"- {title}" for title in kept_titles)
    lines.append("Respond with the JSON object only.")
    return "\n".join(lines)
