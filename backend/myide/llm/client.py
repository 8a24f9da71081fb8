from __future__ import annotations
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional
from pydantic import BaseModel
from openai import APIError, AsyncOpenAI, OpenAI

from ..errors import ConfigError, ProviderError

logger = logging.getLogger(__name__)


class LLMResponse(BaseModel):
    content: Optional[str] = None
    finish_reason: str
    usage: Optional[Dict[str, int]] = None
    time_taken: float
    error: str | None = None


@dataclass
class LLMConfig:
    api_base: str = "https://api.openai.com/v1"
    model: str = "gpt-4o"
    max_tokens: int = 4096
    temperature: float = 0.2
    timeout: int = 120

    @classmethod
    def from_dict(cls, cfg: Dict) -> "LLMConfig":
        llm = cfg.get("llm", {})
        return cls(
            api_base=llm.get("api_base", cls.api_base),
            model=llm.get("model", cls.model),
            max_tokens=int(llm.get("max_tokens", cls.max_tokens)),
            temperature=float(llm.get("temperature", cls.temperature)),
            timeout=int(llm.get("timeout", cls.timeout)),
        )


def build_messages(system_prompt: str, messages: List[Dict[str, str]]) -> List[Dict[str, str]]:
    out = []
    if system_prompt and system_prompt.strip():
        out.append({"role": "system", "content": system_prompt.strip()})
    out.extend({"role": m["role"], "content": m["content"]} for m in messages if m.get("role") != "system")
    return out


class ChatClient:
    """Client for OpenAI-compatible chat endpoints (OpenAI, Ollama, vLLM, HF router).

    ``client`` and ``async_client`` default to SDK clients pointed at
    ``config.api_base``; pass your own to reuse a connection pool.
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        api_key: str | None = None,
        client: Any = None,
        async_client: Any = None,
    ):
        self.config = config or LLMConfig()
        self.api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigError("LLM_API_KEY or OPENAI_API_KEY environment variable not set")

        self.client = client or OpenAI(
            api_key=self.api_key,
            base_url=self.config.api_base,
            timeout=self.config.timeout,
        )
        self.async_client = async_client or AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.config.api_base,
            timeout=self.config.timeout,
        )

    def _request(self, messages: List[Dict[str, str]], stream: bool) -> Dict:
        return {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "stream": stream,
        }

    def chat(
        self,
        system_prompt: str,
        user_message: str,
        conversation_history: List[Dict[str, str]] | None = None,
    ) -> LLMResponse:
        messages = build_messages(system_prompt, list(conversation_history or []))
        messages.append({"role": "user", "content": user_message.strip()})
        start_time = time.time()
        try:
            response = self.client.chat.completions.create(**self._request(messages, stream=False))
            if not response.choices:
                raise ProviderError(f"Unexpected response format: {response}")

            choice = response.choices[0]
            usage = response.usage
            return LLMResponse(
                content=(choice.message.content or "").strip(),
                finish_reason=choice.finish_reason or "stop",
                usage={
                    "prompt_tokens": usage.prompt_tokens,
                    "completion_tokens": usage.completion_tokens,
                    "total_tokens": usage.total_tokens,
                } if usage else None,
                time_taken=time.time() - start_time,
                error=None,
            )

        except (APIError, ProviderError) as e:
            logger.warning(f"LLM chat failed: {e}")
            return LLMResponse(
                finish_reason="error",
                time_taken=time.time() - start_time,
                error=str(e),
            )

    async def generate(self, system_prompt: str, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Yield text fragments as the server produces them.

        Raises ProviderError when the request fails or the stream breaks off.
        """
        request = self._request(build_messages(system_prompt, messages), stream=True)
        try:
            stream = await self.async_client.chat.completions.create(**request)
            async for chunk in stream:
                for choice in chunk.choices or []:
                    text = choice.delta.content if choice.delta else None
                    if text:
                        yield text
        except APIError as e:
            raise ProviderError(f"LLM request failed: {e}") from e


def create_client(cfg: Dict | None = None) -> ChatClient:
    return ChatClient(LLMConfig.from_dict(cfg or {}))
