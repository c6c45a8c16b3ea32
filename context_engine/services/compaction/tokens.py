# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Token estimation utilities.

Counts are a chars/4 approximation of an English tokenizer, where a char
is a UTF-16 code unit: characters outside the BMP (emoji) count as two.
They feed the compaction threshold and the usage report, so they must stay comparable
between the compacted and raw paths; no real tokenizer is consulted.
"""

from __future__ import annotations

from typing import Iterable

from context_engine.models import ConversationTurn

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate token count using the character heuristic.

    Args:
        text (str): Text to estimate tokens for.

    Returns:
        int: UTF-16 length divided by ``CHARS_PER_TOKEN``, rounded down;
            ``0`` for an empty string.
    """
    return len(text.encode("utf-16-le", "surrogatepass")) // 2 // CHARS_PER_TOKEN


def estimate_history_tokens(history: Iterable[ConversationTurn]) -> int:
    """Estimate total token count for a conversation history.

    Only turn contents are counted, not role labels.

    Args:
        history (Iterable[ConversationTurn]): Turns to estimate tokens for.

    Returns:
        int: Sum of estimated token counts across all turns.
    """
    return sum(estimate_tokens(turn.content) for turn in history)
