# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Request and response models shared by the router and the services."""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class ConversationTurn(BaseModel):
    """One prior turn of the conversation.

    Attributes:
        role (str): Free-form speaker label such as ``"user"`` or
            ``"assistant"``.
        content (str): Text of the turn.
    """

    model_config = _WIRE_CONFIG

    role: str
    content: str


class ChatRequest(BaseModel):
    """Chat request model.

    Attributes:
        message (str): The current user utterance.
        history (Tuple[ConversationTurn, ...]): Prior turns, oldest first.
            ``null`` or a missing field is normalized to an empty history.
    """

    model_config = _WIRE_CONFIG

    message: str
    history: Tuple[ConversationTurn, ...] = Field(default_factory=tuple)

    @field_validator("history", mode="before")
    @classmethod
    def _none_history_is_empty(cls, value: Any) -> Any:
        return () if value is None else value


class TokenUsage(BaseModel):
    """Estimated token usage across both pipeline stages.

    Compactor fields stay zero when the history was not compacted.

    Attributes:
        input_tokens (int): Tokens in the prompt sent to the inference model.
        output_tokens (int): Tokens in the inference model's answer.
        compactor_input_tokens (int): Tokens of history given to the compactor.
        compactor_output_tokens (int): Tokens in the compactor's summary.
    """

    model_config = _WIRE_CONFIG

    input_tokens: int = Field(ge=0, description="Tokens in the inference prompt")
    output_tokens: int = Field(ge=0, description="Tokens in the answer")
    compactor_input_tokens: int = Field(default=0, ge=0, description="History tokens compacted")
    compactor_output_tokens: int = Field(default=0, ge=0, description="Summary tokens")

    @classmethod
    def zero(cls) -> "TokenUsage":
        """Return a zeroed-out TokenUsage instance."""
        return cls(input_tokens=0, output_tokens=0)

    @property
    def total_tokens(self) -> int:
        """Sum of all four counters."""
        return (
            self.input_tokens
            + self.output_tokens
            + self.compactor_input_tokens
            + self.compactor_output_tokens
        )


class ChatResponse(BaseModel):
    """Chat response model.

    Attributes:
        answer (str): Text returned by the inference model.
        usage (TokenUsage): Estimated token usage for the request.
        compacted (bool): Whether the history was summarized first.
    """

    model_config = _WIRE_CONFIG

    answer: str
    usage: TokenUsage
    compacted: bool = False
