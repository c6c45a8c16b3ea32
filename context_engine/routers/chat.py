# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Chat router.

  POST /chat      history compacted when over threshold, then answered
  POST /chat-raw  full history answered directly (A/B baseline)
"""

from typing import Optional

from context_engine.models import ChatRequest, ChatResponse
from context_engine.schemas.health import HealthResponse
from context_engine.services.orchestrator import ChatOrchestrator, create_orchestrator
from fastapi import APIRouter, Depends

router = APIRouter()

SERVICE_ID = "context-engine"

_orchestrator: Optional[ChatOrchestrator] = None


def get_orchestrator() -> ChatOrchestrator:
    """Build the orchestrator on first use and reuse it afterwards."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = create_orchestrator()
    return _orchestrator


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe; never touches the model backends."""
    return HealthResponse(status="UP", service=SERVICE_ID)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Chat with context compaction: the compactor summarizes, inference answers."""
    return await orchestrator.compacted_chat(request)


@router.post("/chat-raw", response_model=ChatResponse)
async def chat_raw(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Chat without compaction: full history goes to the inference model."""
    return await orchestrator.raw_chat(request)
