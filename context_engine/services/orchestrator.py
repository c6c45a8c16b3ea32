# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Two-stage chat orchestration: compaction -> inference.

``compacted_chat`` routes long histories through the compaction engine
before asking the inference model; ``raw_chat`` always forwards the full
history and serves as the cost/quality baseline. Both paths share the same
prompt builder and inference model so their usage numbers are comparable.

Each call works only on its own request data. A compactor failure fails
the compacted request; there is no fallback to the raw path.
"""

from typing import Optional, Tuple

from context_engine.config import settings
from context_engine.models import ChatRequest, ChatResponse, TokenUsage
from context_engine.services.compaction import (
    CompactionEngine,
    estimate_history_tokens,
    estimate_tokens,
    history_to_text,
)
from context_engine.services.events import CHAT_COMPLETED, EventHook, emit, log_event
from context_engine.services.prompts.base import build_prompt
from context_engine.services.providers.llm import (
    ModelCapability,
    create_compactor_capability,
    create_inference_capability,
)


class ChatOrchestrator:
    """Answers chat requests with optional history compaction.

    Args:
        inference (ModelCapability): Model that answers the question.
        compaction_engine (CompactionEngine): Threshold gate and summarizer.
        on_event (Optional[EventHook]): Receiver for pipeline events.
    """

    def __init__(
        self,
        inference: ModelCapability,
        compaction_engine: CompactionEngine,
        on_event: Optional[EventHook] = None,
    ):
        self.inference = inference
        self.compaction_engine = compaction_engine
        self._on_event = on_event

    async def compacted_chat(self, request: ChatRequest) -> ChatResponse:
        """Answer *request*, summarizing the history first when it is large.

        Raises:
            CapabilityError: If either model call fails.
        """
        history = request.history
        compactor_input_tokens = 0
        compactor_output_tokens = 0
        compacted = False

        if self.compaction_engine.should_compact(history):
            compactor_input_tokens = estimate_history_tokens(history)
            context = await self.compaction_engine.compact(history)
            compactor_output_tokens = estimate_tokens(context)
            compacted = True
        else:
            context = history_to_text(history)

        answer, input_tokens, output_tokens = await self._infer(context, request.message)
        usage = TokenUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            compactor_input_tokens=compactor_input_tokens,
            compactor_output_tokens=compactor_output_tokens,
        )
        emit(
            self._on_event,
            CHAT_COMPLETED,
            mode="compacted",
            compacted=compacted,
            total_tokens=usage.total_tokens,
        )
        return ChatResponse(answer=answer, usage=usage, compacted=compacted)

    async def raw_chat(self, request: ChatRequest) -> ChatResponse:
        """Answer *request* with the full, unsummarized history.

        Raises:
            CapabilityError: If the inference call fails.
        """
        context = history_to_text(request.history)
        answer, input_tokens, output_tokens = await self._infer(context, request.message)
        usage = TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens)
        emit(
            self._on_event,
            CHAT_COMPLETED,
            mode="raw",
            compacted=False,
            total_tokens=usage.total_tokens,
        )
        return ChatResponse(answer=answer, usage=usage, compacted=False)

    async def _infer(self, context: str, message: str) -> Tuple[str, int, int]:
        prompt = build_prompt(context, message)
        answer = await self.inference.complete(prompt)
        return answer, estimate_tokens(prompt), estimate_tokens(answer)


def create_orchestrator(
    inference: Optional[ModelCapability] = None,
    compactor: Optional[ModelCapability] = None,
    token_threshold: Optional[int] = None,
    on_event: Optional[EventHook] = log_event,
) -> ChatOrchestrator:
    """Wire an orchestrator from settings, overriding any given piece."""
    engine = CompactionEngine(
        compactor or create_compactor_capability(),
        token_threshold=(
            settings.COMPACTOR_TOKEN_THRESHOLD if token_threshold is None else token_threshold
        ),
        on_event=on_event,
    )
    return ChatOrchestrator(
        inference or create_inference_capability(),
        engine,
        on_event=on_event,
    )
