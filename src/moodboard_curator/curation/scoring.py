"""
Scoring accumulator for query refinement.

Blends weighted token contributions from several text sources (raw user
text, the active query, kept titles, the just-accepted title) into one
score table, then extracts a compact deduplicated keyword list.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog

from ..config import Settings, settings
from ..models.items import Item
from ..models.session import Session
from .lexicons import COLOR_WORDS, STOPWORDS
from .tokenizer import MIN_SCORED_LENGTH, domain_bias, pos_bias, tokenize


logger = structlog.get_logger(__name__)

# token -> accumulated weight; insertion order follows scoring call order
ScoreTable = Dict[str, float]

# Longest first so "ing" wins over "s"
ROOT_SUFFIXES = ("ing", "es", "ed", "ly", "s")
MIN_ROOT_LENGTH = 3


@dataclass(frozen=True)
class RefinementWeights:
    """Tuning constants for blending refinement sources."""

    base: float = 1.0
    kept: float = 1.4
    accepted: float = 1.8
    color_hint_bonus: float = 0.6
    max_kept_titles: int = 5
    max_keywords: int = 12

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "RefinementWeights":
        config = config or settings
        return cls(
            base=config.refine_weight_base,
            kept=config.refine_weight_kept,
            accepted=config.refine_weight_accepted,
            color_hint_bonus=config.refine_color_hint_bonus,
            max_kept_titles=config.refine_max_kept_titles,
            max_keywords=config.refine_max_keywords,
        )


def _is_scorable(token: str) -> bool:
    return len(token) >= MIN_SCORED_LENGTH and token not in STOPWORDS


def score_tokens_from(text: str, weight: float, table: ScoreTable) -> ScoreTable:
    """
    Add ``weight * pos_bias * domain_bias`` to the table for every scorable token.

    Stopwords and tokens shorter than three characters are dropped. A token
    occurring twice in ``text`` contributes twice.

    Args:
        text: Source text
        weight: Source weight
        table: Score table, updated in place

    Returns:
        The same table, for chaining
    """
    for token in tokenize(text):
        if not _is_scorable(token):
            continue
        table[token] = table.get(token, 0.0) + weight * pos_bias(token) * domain_bias(token)
    return table


def preseed_color_hints(table: ScoreTable, raw_user_text: str, bonus: float = 0.6) -> ScoreTable:
    """
    Give every color word the user typed a flat bump before weighted scoring.

    Uses the unmodified user text, never the internal query, so typed color
    intent survives dilution by heavier but less color-specific sources.
    """
    for token in tokenize(raw_user_text):
        if token in COLOR_WORDS:
            table[token] = table.get(token, 0.0) + bonus
    return table


def keyword_root(token: str) -> str:
    """
    Naive stem used to collapse inflected duplicates.

    Examples:
        >>> keyword_root("shadows")
        'shadow'
        >>> keyword_root("glowing")
        'glow'
        >>> keyword_root("sky")
        'sky'
    """
    for suffix in ROOT_SUFFIXES:
        if token.endswith(suffix) and len(token) - len(suffix) >= MIN_ROOT_LENGTH:
            return token[: -len(suffix)]
    return token


def top_keywords(table: ScoreTable, max_keywords: int = 12) -> List[str]:
    """
    Highest-scoring tokens, one per naive root.

    Ties keep table insertion order (the sort is stable), which follows the
    order in which sources were scored.

    Args:
        table: Score table
        max_keywords: Maximum number of keywords returned

    Returns:
        Keywords ordered by descending score
    """
    ranked = sorted(table.items(), key=lambda entry: entry[1], reverse=True)

    keywords: List[str] = []
    roots = set()
    for token, _ in ranked:
        if len(keywords) >= max_keywords:
            break
        root = keyword_root(token)
        if root in roots:
            continue
        roots.add(root)
        keywords.append(token)
    return keywords


def build_score_table(
    item: Optional[Item],
    session: Session,
    weights: RefinementWeights,
) -> ScoreTable:
    """
    Run the scoring passes in their fixed order.

    1. Color hints from the user's visible text
    2. Active query at the base weight
    3. Up to ``max_kept_titles`` most recent kept titles (the accepted item excluded)
    4. The accepted item's title
    """
    table: ScoreTable = {}
    preseed_color_hints(table, session.visible_text, weights.color_hint_bonus)
    score_tokens_from(session.active_query, weights.base, table)

    exclude_id = item.id if item is not None else None
    for title in session.kept_titles(weights.max_kept_titles, exclude_id=exclude_id):
        score_tokens_from(title, weights.kept, table)

    if item is not None:
        score_tokens_from(item.title, weights.accepted, table)
    return table


def refine_query_with(
    item: Optional[Item],
    session: Session,
    weights: Optional[RefinementWeights] = None,
) -> str:
    """
    Compute the next internal search query after accepting ``item``.

    Falls back to the session's current active query when no keyword
    survives, so context is never discarded.

    Args:
        item: The just-accepted item (None to refine from history only)
        session: Current session, read only
        weights: Refinement constants (defaults from settings)

    Returns:
        Space-joined keywords, or the active query as fallback
    """
    weights = weights or RefinementWeights.from_settings()
    table = build_score_table(item, session, weights)
    keywords = top_keywords(table, weights.max_keywords)

    if not keywords:
        logger.debug(
            "refinement_fallback",
            session_id=session.session_id,
            active_query=session.active_query,
        )
        return session.active_query

    refined = " ".join(keywords)
    logger.debug(
        "query_refined",
        session_id=session.session_id,
        refined_query=refined,
        table_size=len(table),
    )
    return refined
