# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Context compaction module.

  tokens.py     chars/4 token estimation for text and histories
  compactor.py  threshold decision and model-backed summarization

Usage:

    engine = CompactionEngine(compactor_capability, token_threshold=2000)
    if engine.should_compact(history):
        context = await engine.compact(history)
    else:
        context = history_to_text(history)
"""

from context_engine.services.compaction.compactor import (
    DEFAULT_TOKEN_THRESHOLD,
    CompactionEngine,
    exceeds_threshold,
    history_to_text,
)
from context_engine.services.compaction.tokens import (
    CHARS_PER_TOKEN,
    estimate_history_tokens,
    estimate_tokens,
)

__all__ = [
    "CHARS_PER_TOKEN",
    "DEFAULT_TOKEN_THRESHOLD",
    "CompactionEngine",
    "estimate_history_tokens",
    "estimate_tokens",
    "exceeds_threshold",
    "history_to_text",
]
