"""
Knowledge Responder
Open-domain answers and context-aware replies from OpenAI-compatible chat
providers. Both calls are best-effort: callers catch the raised errors and
fall back to deterministic replies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from openai import APIError, AsyncOpenAI

from .errors import NoProviderConfigured, RemoteServiceUnavailable
from .prompts import answer_system_prompt, reply_system_prompt
from .schemas import HistoryTurn, IntentReading, SentimentReading
from .settings import Settings


logger = logging.getLogger(__name__)

ANSWER_MAX_TOKENS = 300
REPLY_MAX_TOKENS = 150
TEMPERATURE = 0.7
REPLY_HISTORY_TURNS = 6


@dataclass(frozen=True)
class ChatProvider:
    name: str
    api_key: str | None
    base_url: str
    model: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


def providers_from_settings(settings: Settings) -> list[ChatProvider]:
    """Providers in the order they are tried: OpenRouter first, then OpenAI."""
    return [
        ChatProvider(
            name="openrouter",
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.openrouter_model,
            headers={"HTTP-Referer": "https://voice-assistant.local", "X-Title": "Voice Assistant AI"},
        ),
        ChatProvider(
            name="openai",
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
        ),
    ]


ClientFactory = Callable[[ChatProvider], Any]


class KnowledgeResponder:
    def __init__(
        self,
        providers: Sequence[ChatProvider],
        timeout: float = 30.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._providers = list(providers)
        self._timeout = timeout
        self._client_factory = client_factory or self._openai_client
        self._clients: dict[str, Any] = {}

    @classmethod
    def from_settings(cls, settings: Settings, client_factory: ClientFactory | None = None) -> KnowledgeResponder:
        return cls(providers_from_settings(settings), timeout=settings.llm_timeout, client_factory=client_factory)

    @property
    def providers(self) -> list[ChatProvider]:
        return list(self._providers)

    def _openai_client(self, provider: ChatProvider) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=provider.api_key,
            base_url=provider.base_url,
            timeout=self._timeout,
            max_retries=2,
            default_headers=provider.headers or None,
        )

    def _client(self, provider: ChatProvider) -> Any:
        if provider.name not in self._clients:
            self._clients[provider.name] = self._client_factory(provider)
        return self._clients[provider.name]

    async def _complete(self, provider: ChatProvider, messages: list[dict[str, str]], max_tokens: int) -> str:
        completion = await self._client(provider).chat.completions.create(
            model=provider.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=TEMPERATURE,
        )
        if not completion.choices:
            return ""
        return (completion.choices[0].message.content or "").strip()

    async def answer_question(self, question: str, context: str | None = None) -> str:
        """
        Answer an open-domain question with the primary provider.
        Raises NoProviderConfigured without a key, RemoteServiceUnavailable on any API failure.
        """
        provider = self._providers[0] if self._providers else None
        if provider is None or not provider.configured:
            raise NoProviderConfigured("Question answering provider is not configured")

        messages = [
            {"role": "system", "content": answer_system_prompt()},
            {"role": "user", "content": question},
        ]
        if context:
            messages.insert(1, {"role": "system", "content": f"Additional context: {context}"})

        try:
            answer = await self._complete(provider, messages, ANSWER_MAX_TOKENS)
        except APIError as e:
            logger.warning("[Knowledge] %s answer failed (%s): %s", provider.name, type(e).__name__, e)
            raise RemoteServiceUnavailable("Failed to get answer from AI service") from e
        except Exception as e:
            # non-JSON bodies from a wrong base URL or an intercepting proxy surface here
            logger.warning("[Knowledge] %s answer unusable (%s): %s", provider.name, type(e).__name__, e)
            raise RemoteServiceUnavailable("Unexpected response from AI service") from e
        if not answer:
            raise RemoteServiceUnavailable(f"{provider.name} returned an empty answer")
        return answer

    async def generate_reply(
        self,
        user_message: str,
        sentiment: SentimentReading,
        intent: IntentReading,
        history: Sequence[HistoryTurn],
    ) -> str:
        """
        Generate an emotion-aware reply, trying each configured provider in order.
        Raises NoProviderConfigured when every provider is unconfigured or failed.
        """
        messages = [{"role": "system", "content": reply_system_prompt(sentiment, intent)}]
        for turn in history[-REPLY_HISTORY_TURNS:]:
            role = "user" if turn.type == "user" else "assistant"
            messages.append({"role": role, "content": turn.content})
        messages.append({"role": "user", "content": user_message})

        for provider in self._providers:
            if not provider.configured:
                logger.debug("[Knowledge] %s not configured, skipping", provider.name)
                continue
            try:
                reply = await self._complete(provider, messages, REPLY_MAX_TOKENS)
            except APIError as e:
                logger.warning("[Knowledge] %s reply failed (%s): %s", provider.name, type(e).__name__, e)
                continue
            except Exception as e:
                logger.warning("[Knowledge] %s reply unusable (%s): %s", provider.name, type(e).__name__, e)
                continue
            if reply:
                logger.info("[Knowledge] Reply generated by %s", provider.name)
                return reply
            logger.warning("[Knowledge] %s returned an empty reply", provider.name)

        raise NoProviderConfigured("No API keys available")

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
