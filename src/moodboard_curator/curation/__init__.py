"""
Candidate curation engine.

Public API for tokenizing and scoring user signal into a refined query and
for managing the candidate queue and visible window. The async
orchestrator lives in ``moodboard_curator.curation.orchestrator``.
"""

from .tokenizer import TOKENIZER_VERSION, domain_bias, pos_bias, tokenize
from .scoring import (
    RefinementWeights,
    ScoreTable,
    preseed_color_hints,
    refine_query_with,
    score_tokens_from,
    top_keywords,
)
from .queue import EnqueueMode, enqueue_fresh, fill_slots
from .state_machine import FetchPlan

__all__ = [
    "TOKENIZER_VERSION",
    "tokenize",
    "pos_bias",
    "domain_bias",
    "RefinementWeights",
    "ScoreTable",
    "preseed_color_hints",
    "score_tokens_from",
    "top_keywords",
    "refine_query_with",
    "EnqueueMode",
    "enqueue_fresh",
    "fill_slots",
    "FetchPlan",
]
