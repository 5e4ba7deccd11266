"""
Document store for conversations, intent rules, emotion models and voice settings.
Backed by MongoDB collections through motor.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from .db import CONVERSATIONS, INTENTS, SENTIMENT_MODELS, VOICE_SETTINGS
from .schemas import Conversation, ConversationContext, EmotionModel, IntentRule, Message, VoiceSettings


logger = logging.getLogger(__name__)


def _conversation_from_doc(doc: dict[str, Any]) -> Conversation:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return Conversation.model_validate(data)


class MongoStore:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    # Conversations

    async def get_conversation(self, user_id: str, session_id: str) -> Conversation | None:
        doc = await self._db[CONVERSATIONS].find_one({"userId": user_id, "sessionId": session_id})
        return _conversation_from_doc(doc) if doc else None

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None:
        doc = await self._db[CONVERSATIONS].find_one({"_id": ObjectId(conversation_id)})
        return _conversation_from_doc(doc) if doc else None

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        cursor = self._db[CONVERSATIONS].find({"userId": user_id})
        docs = await cursor.to_list(length=None)
        return [_conversation_from_doc(doc) for doc in docs]

    async def insert_conversation(self, conversation: Conversation) -> str:
        doc = conversation.to_document()
        doc.pop("id", None)
        result = await self._db[CONVERSATIONS].insert_one(doc)
        logger.debug("[Store] Created conversation %s for session %s", result.inserted_id, conversation.session_id)
        return str(result.inserted_id)

    async def append_turn(
        self,
        conversation_id: str,
        messages: Sequence[Message],
        context: ConversationContext,
    ) -> None:
        """
        Append messages and replace the context in a single document update.
        $push keeps concurrent turns for the same session; the context $set is last-writer-wins.
        """
        await self._db[CONVERSATIONS].update_one(
            {"_id": ObjectId(conversation_id)},
            {
                "$push": {"messages": {"$each": [m.to_document() for m in messages]}},
                "$set": {"context": context.to_document()},
            },
        )

    # Intent rules

    async def has_intents(self) -> bool:
        return await self._db[INTENTS].find_one({}) is not None

    async def list_intents(self) -> list[IntentRule]:
        """All rules in stored (insertion) order; the classifier breaks ties on this order."""
        cursor = self._db[INTENTS].find({}).sort("_id", 1)
        docs = await cursor.to_list(length=None)
        return [IntentRule.model_validate(doc) for doc in docs]

    async def get_intent(self, category: str) -> IntentRule | None:
        doc = await self._db[INTENTS].find_one({"category": category})
        return IntentRule.model_validate(doc) if doc else None

    async def insert_intents(self, rules: Sequence[IntentRule]) -> None:
        if rules:
            await self._db[INTENTS].insert_many([r.to_document() for r in rules])

    # Emotion models

    async def get_emotion_model(self, name: str) -> EmotionModel | None:
        doc = await self._db[SENTIMENT_MODELS].find_one({"name": name})
        return EmotionModel.model_validate(doc) if doc else None

    async def insert_emotion_model(self, model: EmotionModel) -> None:
        await self._db[SENTIMENT_MODELS].insert_one(model.to_document())

    # Voice settings

    async def get_voice_settings(self, user_id: str) -> VoiceSettings | None:
        doc = await self._db[VOICE_SETTINGS].find_one({"userId": user_id})
        return VoiceSettings.model_validate(doc) if doc else None

    async def save_voice_settings(self, settings: VoiceSettings) -> None:
        doc = settings.to_document()
        await self._db[VOICE_SETTINGS].update_one(
            {"userId": settings.user_id},
            {"$set": doc},
            upsert=True,
        )
