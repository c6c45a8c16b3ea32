# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Tests for ChatOrchestrator."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from context_engine.config import settings
from context_engine.models import ChatRequest, ConversationTurn
from context_engine.services.compaction import CompactionEngine, estimate_tokens, history_to_text
from context_engine.services.events import CHAT_COMPLETED, CONTEXT_COMPACTED, HISTORY_MEASURED
from context_engine.services.orchestrator import ChatOrchestrator, create_orchestrator
from context_engine.services.prompts.base import build_prompt
from context_engine.services.providers.llm import CapabilityError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sent_prompt(model: AsyncMock) -> str:
    """Return the prompt of the single awaited ``complete`` call."""
    model.complete.assert_awaited_once()
    return model.complete.await_args.args[0]


# ---------------------------------------------------------------------------
# raw_chat
# ---------------------------------------------------------------------------


class TestRawChat:
    """Tests for the uncompacted baseline path."""

    @pytest.mark.asyncio
    async def test_short_history(self, orchestrator, mock_inference, sample_chat_request, sample_turn):
        """Verify the answer and usage for a short history."""
        request = sample_chat_request(history=[sample_turn(content="Hello")])
        response = await orchestrator.raw_chat(request)

        expected_prompt = build_prompt("user: Hello", "How are you?")
        assert _sent_prompt(mock_inference) == expected_prompt
        assert response.answer == "I am fine, thanks."
        assert response.compacted is False
        assert response.usage.input_tokens == estimate_tokens(expected_prompt)
        assert response.usage.output_tokens == estimate_tokens("I am fine, thanks.")
        assert response.usage.compactor_input_tokens == 0
        assert response.usage.compactor_output_tokens == 0

    @pytest.mark.asyncio
    async def test_long_history_never_compacted(
        self, orchestrator, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify raw_chat ignores the threshold and never calls the compactor."""
        response = await orchestrator.raw_chat(sample_chat_request(history=long_history))

        mock_compactor.complete.assert_not_awaited()
        assert response.compacted is False
        assert response.usage.compactor_input_tokens == 0
        assert response.usage.compactor_output_tokens == 0
        assert "x" * 10_000 in _sent_prompt(mock_inference)

    @pytest.mark.asyncio
    async def test_empty_history_sends_bare_message(
        self, orchestrator, mock_inference, sample_chat_request
    ):
        """Verify an empty history yields the bare user message as prompt."""
        response = await orchestrator.raw_chat(sample_chat_request(message="Hi"))

        assert _sent_prompt(mock_inference) == "Hi"
        assert response.usage.input_tokens == 0

    @pytest.mark.asyncio
    async def test_inference_error_propagates(self, orchestrator, mock_inference, sample_chat_request):
        """Verify inference failures are surfaced to the caller."""
        mock_inference.complete.side_effect = CapabilityError("gemini-2.5-pro", "timeout")
        with pytest.raises(CapabilityError):
            await orchestrator.raw_chat(sample_chat_request())


# ---------------------------------------------------------------------------
# compacted_chat
# ---------------------------------------------------------------------------


class TestCompactedChat:
    """Tests for the compaction-aware path."""

    @pytest.mark.asyncio
    async def test_below_threshold_matches_raw(
        self, mock_compactor, engine, sample_chat_request, sample_turn
    ):
        """Verify a short history produces the same prompt as raw_chat."""
        request = sample_chat_request(
            history=[sample_turn("user", "Hello"), sample_turn("assistant", "Hi!")]
        )
        compacted_inference = AsyncMock()
        compacted_inference.complete.return_value = "ok"
        raw_inference = AsyncMock()
        raw_inference.complete.return_value = "ok"

        compacted_response = await ChatOrchestrator(compacted_inference, engine).compacted_chat(request)
        raw_response = await ChatOrchestrator(raw_inference, engine).raw_chat(request)

        mock_compactor.complete.assert_not_awaited()
        assert _sent_prompt(compacted_inference) == _sent_prompt(raw_inference)
        assert compacted_response.compacted is False
        assert raw_response.compacted is False
        assert compacted_response.usage == raw_response.usage

    @pytest.mark.asyncio
    async def test_above_threshold_compacts_once(
        self, orchestrator, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify a long history is summarized once and the summary is used as context."""
        response = await orchestrator.compacted_chat(sample_chat_request(history=long_history))

        mock_compactor.complete.assert_awaited_once()
        prompt = _sent_prompt(mock_inference)
        assert prompt == build_prompt("Summary of conversation.", "How are you?")
        assert "x" * 100 not in prompt

        assert response.compacted is True
        assert response.answer == "I am fine, thanks."
        assert response.usage.compactor_input_tokens == 2_500
        assert response.usage.compactor_output_tokens == estimate_tokens("Summary of conversation.")
        assert response.usage.input_tokens == estimate_tokens(prompt)
        assert response.usage.output_tokens == estimate_tokens("I am fine, thanks.")

    @pytest.mark.asyncio
    async def test_total_tokens(self, orchestrator, sample_chat_request, long_history):
        """Verify total_tokens adds both stages."""
        usage = (await orchestrator.compacted_chat(sample_chat_request(history=long_history))).usage
        assert usage.total_tokens == (
            usage.input_tokens
            + usage.output_tokens
            + usage.compactor_input_tokens
            + usage.compactor_output_tokens
        )
        assert usage.total_tokens > 2_500

    @pytest.mark.asyncio
    async def test_empty_summary_degrades_to_bare_message(
        self, orchestrator, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify a blank summary still counts as compacted and sends the bare message."""
        mock_compactor.complete.return_value = "   "
        response = await orchestrator.compacted_chat(
            sample_chat_request(message="Hi", history=long_history)
        )

        assert _sent_prompt(mock_inference) == "Hi"
        assert response.compacted is True
        assert response.usage.compactor_input_tokens == 2_500
        assert response.usage.compactor_output_tokens == 0

    @pytest.mark.asyncio
    async def test_compactor_failure_fails_request(
        self, orchestrator, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify there is no silent fallback to the raw path."""
        mock_compactor.complete.side_effect = CapabilityError("gemini-2.0-flash", "quota exceeded")

        with pytest.raises(CapabilityError):
            await orchestrator.compacted_chat(sample_chat_request(history=long_history))
        mock_inference.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_history_order_preserved(self, orchestrator, mock_inference, sample_chat_request, sample_turn):
        """Verify turns reach the prompt oldest first."""
        history = [sample_turn("user", f"turn {i}") for i in range(5)]
        await orchestrator.compacted_chat(sample_chat_request(history=history))

        assert history_to_text(history) in _sent_prompt(mock_inference)

    @pytest.mark.asyncio
    async def test_events(self, orchestrator, events, sample_chat_request, long_history):
        """Verify the pipeline reports measurement, compaction and completion."""
        await orchestrator.compacted_chat(sample_chat_request(history=long_history))

        assert [e.type for e in events] == [HISTORY_MEASURED, CONTEXT_COMPACTED, CHAT_COMPLETED]
        assert events[-1].data["mode"] == "compacted"
        assert events[-1].data["compacted"] is True

    @pytest.mark.asyncio
    async def test_failing_hook_does_not_break_request(
        self, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify an exception inside the event hook is contained."""

        def _broken_hook(event):
            raise RuntimeError("sink down")

        engine = CompactionEngine(mock_compactor, on_event=_broken_hook)
        orchestrator = ChatOrchestrator(mock_inference, engine, on_event=_broken_hook)

        response = await orchestrator.compacted_chat(sample_chat_request(history=long_history))
        assert response.compacted is True

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_isolated(self, engine):
        """Verify concurrent calls each get an answer built from their own request."""

        async def _echo(prompt: str) -> str:
            await asyncio.sleep(0)
            return prompt

        inference = AsyncMock()
        inference.complete.side_effect = _echo
        orchestrator = ChatOrchestrator(inference, engine)

        requests = [
            ChatRequest(
                message=f"question {i}",
                history=[ConversationTurn(role="user", content=f"context {i}")],
            )
            for i in range(20)
        ]
        responses = await asyncio.gather(*(orchestrator.compacted_chat(r) for r in requests))

        for i, response in enumerate(responses):
            assert f"context {i}\n" in response.answer
            assert response.answer.endswith(f"question {i}\n")

    @pytest.mark.asyncio
    async def test_cancelled_compaction_skips_inference(
        self, orchestrator, mock_inference, mock_compactor, sample_chat_request, long_history
    ):
        """Verify cancelling during compaction aborts the request before inference."""
        started = asyncio.Event()

        async def _hang(prompt):
            started.set()
            await asyncio.Future()

        mock_compactor.complete.side_effect = _hang

        task = asyncio.create_task(
            orchestrator.compacted_chat(sample_chat_request(history=long_history))
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        mock_compactor.complete.assert_awaited_once()
        mock_inference.complete.assert_not_awaited()


# ---------------------------------------------------------------------------
# create_orchestrator
# ---------------------------------------------------------------------------


class TestCreateOrchestrator:
    """Tests for settings-driven wiring."""

    def test_threshold_from_settings(self, monkeypatch, mock_inference, mock_compactor):
        """Verify the configured threshold is injected when none is given."""
        monkeypatch.setattr(settings, "COMPACTOR_TOKEN_THRESHOLD", 10)
        orchestrator = create_orchestrator(inference=mock_inference, compactor=mock_compactor)
        assert orchestrator.compaction_engine.token_threshold == 10

    def test_explicit_threshold(self, mock_inference, mock_compactor):
        """Verify an explicit threshold (including zero) overrides settings."""
        orchestrator = create_orchestrator(
            inference=mock_inference, compactor=mock_compactor, token_threshold=0
        )
        assert orchestrator.compaction_engine.token_threshold == 0
        assert orchestrator.inference is mock_inference
