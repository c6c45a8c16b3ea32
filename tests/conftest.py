# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Shared test fixtures for context-engine test suite."""

from typing import List, Optional, Sequence, Tuple
from unittest.mock import AsyncMock

import pytest
from context_engine.models import ChatRequest, ConversationTurn
from context_engine.services.compaction import CompactionEngine
from context_engine.services.events import PipelineEvent
from context_engine.services.orchestrator import ChatOrchestrator


# ---------------------------------------------------------------------------
# Turn / Request factories
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_turn():
    """Factory fixture for creating ConversationTurn instances."""

    def _factory(role: str = "user", content: str = "hello") -> ConversationTurn:
        return ConversationTurn(role=role, content=content)

    return _factory


@pytest.fixture
def sample_chat_request():
    """Factory fixture for creating ChatRequest instances."""

    def _factory(
        message: str = "How are you?",
        history: Optional[Sequence[ConversationTurn]] = None,
    ) -> ChatRequest:
        return ChatRequest(message=message, history=history)

    return _factory


@pytest.fixture
def long_history(sample_turn) -> Tuple[ConversationTurn, ...]:
    """Single turn of 10,000 characters (~2500 estimated tokens)."""
    return (sample_turn(content="x" * 10_000),)


# ---------------------------------------------------------------------------
# Model capability mocks
# ---------------------------------------------------------------------------


def _mock_capability(response_text: str) -> AsyncMock:
    model = AsyncMock()
    model.complete.return_value = response_text
    return model


@pytest.fixture
def mock_compactor() -> AsyncMock:
    """Compactor capability returning a fixed summary."""
    return _mock_capability("Summary of conversation.")


@pytest.fixture
def mock_inference() -> AsyncMock:
    """Inference capability returning a fixed answer."""
    return _mock_capability("I am fine, thanks.")


# ---------------------------------------------------------------------------
# Pipeline wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def events() -> List[PipelineEvent]:
    """Captured pipeline events; pass ``events.append`` as the hook."""
    return []


@pytest.fixture
def engine(mock_compactor, events) -> CompactionEngine:
    return CompactionEngine(mock_compactor, token_threshold=2000, on_event=events.append)


@pytest.fixture
def orchestrator(mock_inference, engine, events) -> ChatOrchestrator:
    return ChatOrchestrator(mock_inference, engine, on_event=events.append)
