from __future__ import annotations

import asyncio
import copy
from collections import defaultdict
from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest
from bson import ObjectId

from voice_assistant.assistant import VoiceAssistant
from voice_assistant.defaults import initialize_defaults
from voice_assistant.knowledge import ChatProvider, KnowledgeResponder
from voice_assistant.store import MongoStore


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(k) == v for k, v in query.items())


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> FakeCursor:
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    """In-memory stand-in for the subset of the motor collection API the store uses."""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []

    async def create_index(self, *args: Any, **kwargs: Any) -> str:
        return "index"

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: dict[str, Any]) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def insert_many(self, docs: list[dict[str, Any]]) -> SimpleNamespace:
        ids = [(await self.insert_one(doc)).inserted_id for doc in docs]
        return SimpleNamespace(inserted_ids=ids)

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> SimpleNamespace:
        target = next((d for d in self.docs if _matches(d, query)), None)
        if target is None:
            if not upsert:
                return SimpleNamespace(matched_count=0, modified_count=0)
            target = {"_id": ObjectId(), **query}
            self.docs.append(target)
        for key, value in update.get("$set", {}).items():
            target[key] = copy.deepcopy(value)
        for key, value in update.get("$push", {}).items():
            items = value["$each"] if isinstance(value, dict) and "$each" in value else [value]
            target.setdefault(key, []).extend(copy.deepcopy(items))
        return SimpleNamespace(matched_count=1, modified_count=1)


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = defaultdict(FakeCollection)

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections[name]


class RawCompletion:
    """Returned from `create` as is, e.g. the plain text body of a misrouted base URL."""

    def __init__(self, value: Any) -> None:
        self.value = value


class FakeCompletions:
    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        item = self.replies.pop(0) if self.replies else "ok"
        if isinstance(item, Exception):
            raise item
        if isinstance(item, RawCompletion):
            return item.value
        message = SimpleNamespace(content=item)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeChatClient:
    def __init__(self, replies: list[Any] | None = None) -> None:
        self.completions = FakeCompletions(replies or [])
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", "https://llm.invalid/v1/chat/completions"))


def make_responder(
    primary: FakeChatClient | None = None,
    secondary: FakeChatClient | None = None,
) -> KnowledgeResponder:
    """Providers are configured only when a fake client is supplied for them."""
    clients = {"openrouter": primary, "openai": secondary}
    providers = [
        ChatProvider(
            name="openrouter",
            api_key="sk-or-test" if primary else None,
            base_url="https://openrouter.invalid/api/v1",
            model="openai/gpt-4o-mini",
        ),
        ChatProvider(
            name="openai",
            api_key="sk-test" if secondary else None,
            base_url="https://openai.invalid/v1",
            model="gpt-4o-mini",
        ),
    ]
    return KnowledgeResponder(providers, client_factory=lambda provider: clients[provider.name])


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def store(db: FakeDatabase) -> MongoStore:
    return MongoStore(db)


@pytest.fixture
def seeded_store(store: MongoStore) -> MongoStore:
    asyncio.run(initialize_defaults(store))
    return store


@pytest.fixture
def offline_assistant(seeded_store: MongoStore) -> VoiceAssistant:
    """Seeded assistant with no LLM provider configured."""
    return VoiceAssistant(seeded_store, make_responder())
