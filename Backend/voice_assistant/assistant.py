"""
Public operation surface of the voice pipeline.
Identity is checked here, before any analysis runs.
"""
from __future__ import annotations

import logging
import time

from .auth import require_user
from .defaults import initialize_defaults
from .graph import GraphDeps, build_voice_graph
from .knowledge import KnowledgeResponder
from .metrics import summarize_conversations
from .schemas import Conversation, PerformanceMetrics, ResultMetrics, VoiceInputResult, VoiceSettings
from .store import MongoStore


logger = logging.getLogger(__name__)


class VoiceAssistant:
    def __init__(
        self,
        store: MongoStore,
        responder: KnowledgeResponder,
        sentiment_model_name: str = "default",
    ) -> None:
        self.store = store
        self.responder = responder
        self._graph = build_voice_graph(
            GraphDeps(store=store, responder=responder, sentiment_model_name=sentiment_model_name)
        )

    async def initialize_defaults(self) -> bool:
        return await initialize_defaults(self.store)

    async def process_voice_input(self, user_id: str | None, text: str, session_id: str) -> VoiceInputResult:
        start = time.perf_counter()
        user_id = require_user(user_id)

        state = await self._graph.ainvoke({"user_id": user_id, "session_id": session_id, "text": text})

        processing_time = int((time.perf_counter() - start) * 1000)
        sentiment = state["sentiment"]
        intent = state["intent"]
        logger.info(
            "[Pipeline] Processed in %dms | Sentiment: %s (%.1f%%) | Intent: %s (%.1f%%)",
            processing_time,
            sentiment.emotion, sentiment.confidence * 100,
            intent.category, intent.confidence * 100,
        )
        return VoiceInputResult(
            response=state["response"],
            sentiment=sentiment,
            intent=intent,
            processing_time=processing_time,
            metrics=ResultMetrics(
                sentiment_confidence=sentiment.confidence,
                intent_confidence=intent.confidence,
                response_latency=processing_time,
            ),
        )

    async def get_conversation_history(self, user_id: str | None, session_id: str) -> Conversation | None:
        if not user_id:
            return None
        return await self.store.get_conversation(user_id, session_id)

    async def get_performance_metrics(self, user_id: str | None) -> PerformanceMetrics | None:
        if not user_id:
            return None
        conversations = await self.store.list_conversations(user_id)
        return summarize_conversations(conversations)

    async def get_voice_settings(self, user_id: str | None) -> VoiceSettings:
        user_id = require_user(user_id)
        stored = await self.store.get_voice_settings(user_id)
        return stored or VoiceSettings(user_id=user_id)

    async def save_voice_settings(self, user_id: str | None, settings: VoiceSettings) -> VoiceSettings:
        user_id = require_user(user_id)
        settings = settings.model_copy(update={"user_id": user_id})
        await self.store.save_voice_settings(settings)
        return settings
