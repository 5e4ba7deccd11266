from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase


CONVERSATIONS = "conversations"
INTENTS = "intents"
SENTIMENT_MODELS = "sentiment_models"
VOICE_SETTINGS = "voice_settings"


def get_db(client: AsyncIOMotorClient, db_name: str) -> AsyncIOMotorDatabase:
    return client[db_name]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create indexes for all collections"""
    conversations = db[CONVERSATIONS]
    await conversations.create_index([("userId", 1), ("sessionId", 1)], unique=True)
    await conversations.create_index([("userId", 1)])
    await db[INTENTS].create_index([("category", 1)])
    await db[SENTIMENT_MODELS].create_index([("name", 1)], unique=True)
    await db[VOICE_SETTINGS].create_index([("userId", 1)], unique=True)
