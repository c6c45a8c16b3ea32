# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Threshold-gated history compaction.

Short histories are forwarded as-is; once the estimated history size
exceeds the configured threshold, the cheap compactor model rewrites the
whole history into a summary that replaces it as context. The summary is
returned exactly as the model produced it.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from context_engine.models import ConversationTurn
from context_engine.services.compaction.tokens import estimate_history_tokens, estimate_tokens
from context_engine.services.events import CONTEXT_COMPACTED, HISTORY_MEASURED, EventHook, emit
from context_engine.services.prompts.base import build_compaction_prompt
from context_engine.services.providers.llm import ModelCapability

DEFAULT_TOKEN_THRESHOLD = 2000


def history_to_text(history: Iterable[ConversationTurn]) -> str:
    """Serialize history to ``role: content`` lines, oldest first.

    Args:
        history (Iterable[ConversationTurn]): Turns to convert.

    Returns:
        str: Newline-joined lines; empty string for an empty history.
    """
    return "\n".join(f"{turn.role}: {turn.content}" for turn in history)


def _over_threshold(estimated_tokens: int, threshold: int) -> bool:
    # strict: a history exactly at the threshold is not compacted
    return estimated_tokens > threshold


def exceeds_threshold(history: Iterable[ConversationTurn], threshold: int) -> bool:
    """Return True when the estimated history size is strictly above *threshold*."""
    return _over_threshold(estimate_history_tokens(history), threshold)


class CompactionEngine:
    """Decides when to compact and delegates summarization to a model.

    Args:
        compactor (ModelCapability): Model that writes the summary.
        token_threshold (int): Estimated history tokens above which
            compaction is triggered. Must be non-negative.
        on_event (Optional[EventHook]): Receiver for pipeline events.

    Raises:
        ValueError: If ``token_threshold`` is negative.
    """

    def __init__(
        self,
        compactor: ModelCapability,
        token_threshold: int = DEFAULT_TOKEN_THRESHOLD,
        on_event: Optional[EventHook] = None,
    ):
        if token_threshold < 0:
            raise ValueError(f"token_threshold must be >= 0, got {token_threshold}")
        self._compactor = compactor
        self._token_threshold = token_threshold
        self._on_event = on_event

    @property
    def token_threshold(self) -> int:
        return self._token_threshold

    def should_compact(self, history: Sequence[ConversationTurn]) -> bool:
        estimated = estimate_history_tokens(history)
        decision = _over_threshold(estimated, self._token_threshold)
        emit(
            self._on_event,
            HISTORY_MEASURED,
            estimated_tokens=estimated,
            threshold=self._token_threshold,
            should_compact=decision,
        )
        return decision

    async def compact(self, history: Sequence[ConversationTurn]) -> str:
        """Summarize *history* with the compactor model.

        Args:
            history (Sequence[ConversationTurn]): Turns to summarize.

        Returns:
            str: The compactor's output, unmodified. May be empty.

        Raises:
            CapabilityError: Propagated from the compactor model.
        """
        prompt = build_compaction_prompt(history_to_text(history))
        summary = await self._compactor.complete(prompt)

        input_tokens = estimate_history_tokens(history)
        output_tokens = estimate_tokens(summary)
        emit(
            self._on_event,
            CONTEXT_COMPACTED,
            turns=len(history),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            reduction=round(1 - output_tokens / input_tokens, 3) if input_tokens else 0.0,
        )
        return summary
