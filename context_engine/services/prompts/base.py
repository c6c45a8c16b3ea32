# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Prompt templates for the two pipeline stages.

Downstream model behaviour is sensitive to framing, so the wording here is
part of the service's contract: the compactor instruction block and the
"Conversation context" / "Current question" sections of the chat prompt
must keep their text and order.
"""

COMPACTION_PROMPT = """\
Summarize the following conversation history into a concise context summary.
Preserve: key facts, decisions, user preferences, and any unresolved questions.
Discard: greetings, filler, repetition, and pleasantries.
Output only the summary, no preamble.

---
{conversation}
---
"""

CHAT_PROMPT = """\
Conversation context:
{context}

Current question: {message}
"""


def build_compaction_prompt(conversation: str) -> str:
    """Wrap serialized history in the compactor instructions.

    Args:
        conversation (str): History as ``role: content`` lines.

    Returns:
        str: Prompt for the compactor model.
    """
    return COMPACTION_PROMPT.format(conversation=conversation)


def build_prompt(context: str, user_message: str) -> str:
    """Assemble the prompt sent to the inference model.

    Args:
        context (str): Compacted summary or raw history text.
        user_message (str): The current question.

    Returns:
        str: ``user_message`` unchanged when ``context`` is blank, otherwise
            the two-section chat prompt.
    """
    if not context.strip():
        return user_message
    return CHAT_PROMPT.format(context=context, message=user_message)
