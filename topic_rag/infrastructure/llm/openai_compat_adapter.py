from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from topic_rag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from topic_rag.domain.errors import GenerationError


@dataclass
class OpenAICompatAdapter(LLMPort):
    """Chat completions against any OpenAI-compatible endpoint (OpenAI, vLLM, Ollama)."""

    base_url: str  # e.g. "http://localhost:8000/v1"
    api_key: str = "EMPTY"
    model: str = "meta-llama/Meta-Llama-3.1-8B-Instruct"
    timeout_s: float = 60.0
    temperature: float = 0.2
    max_tokens: int = 1024

    def __post_init__(self) -> None:
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        self._client: Any | None = None

    def _get_client(self) -> Any:
        if self._client is None:
            module = import_module("openai")
            self._client = module.OpenAI(
                base_url=self.base_url, api_key=self.api_key, timeout=self.timeout_s
            )
        return self._client

    def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        try:
            client = self._get_client()
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            resp: Any = client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens if max_tokens is None else max_tokens,
            )
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise GenerationError(f"LLM communication failed: {ex}") from ex
