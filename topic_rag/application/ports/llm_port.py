from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass(frozen=True)
class LLMResponse:
    text: str
    finish_reason: str = "stop"
    usage_tokens: int | None = None


class LLMPort(Protocol):
    """Text-generation backend. Implementations raise GenerationError on failure."""

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.2, max_tokens: int = 1024
    ) -> LLMResponse: ...

    def generate(self, prompt: str, system: str | None = None) -> str:
        """Single-shot completion of one prompt.

        The default implementation wraps the prompt in one user message
        (preceded by an optional system message) and delegates to chat().
        """
        messages = [ChatMessage(role="system", content=system)] if system else []
        messages.append(ChatMessage(role="user", content=prompt))
        return self.chat(messages).text
