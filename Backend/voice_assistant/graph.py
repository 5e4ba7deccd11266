from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypedDict

from langgraph.graph import StateGraph

from .classifier import classify_intent
from .errors import ConfigurationMissing, NoProviderConfigured, RemoteServiceUnavailable
from .knowledge import KnowledgeResponder
from .prompts import answer_context, fallback_response, wants_answer
from .schemas import (
    Conversation,
    ConversationContext,
    EmotionModel,
    HistoryTurn,
    IntentReading,
    IntentRule,
    Message,
    Preferences,
    SentimentReading,
)
from .sentiment import score_sentiment
from .store import MongoStore


logger = logging.getLogger(__name__)

HISTORY_TURNS = 10
ANSWER_CONTEXT_TURNS = 3


class GraphState(TypedDict, total=False):
    user_id: str
    session_id: str
    text: str

    # Loaded configuration
    emotion_model: EmotionModel
    rules: list[IntentRule]

    # Analysis (filled in parallel)
    sentiment: SentimentReading
    intent: IntentReading

    # Loaded from DB
    conversation: Optional[Conversation]
    history: list[HistoryTurn]  # last 10 messages, ascending

    # Output
    response: str
    timestamp: int


@dataclass(frozen=True)
class GraphDeps:
    store: MongoStore
    responder: KnowledgeResponder
    sentiment_model_name: str = "default"


def _now_ms() -> int:
    return int(time.time() * 1000)


def merge_context(
    previous: ConversationContext | None,
    sentiment: SentimentReading,
    intent: IntentReading,
) -> ConversationContext:
    """Fold a new turn into the conversation context. An "unknown" intent keeps the previous topic."""
    if previous is None:
        return ConversationContext(
            user_mood=sentiment.emotion,
            conversation_topic=intent.category if intent.category != "unknown" else None,
            last_intent=intent.category,
            preferences=Preferences(response_style="empathetic", verbosity="detailed"),
        )
    topic = intent.category if intent.category != "unknown" else previous.conversation_topic
    return previous.model_copy(
        update={
            "user_mood": sentiment.emotion,
            "last_intent": intent.category,
            "conversation_topic": topic,
        }
    )


async def _configure(state: GraphState, deps: GraphDeps) -> GraphState:
    """Load the active emotion model and the ordered intent rules"""
    model = await deps.store.get_emotion_model(deps.sentiment_model_name)
    if model is None:
        raise ConfigurationMissing(f"Sentiment model '{deps.sentiment_model_name}' not found")
    rules = await deps.store.list_intents()
    return {"emotion_model": model, "rules": rules}


async def _analyze_sentiment(state: GraphState, deps: GraphDeps) -> GraphState:
    return {"sentiment": score_sentiment(state["text"], state["emotion_model"])}


async def _detect_intent(state: GraphState, deps: GraphDeps) -> GraphState:
    return {"intent": classify_intent(state["text"], state["rules"])}


async def _load_conversation(state: GraphState, deps: GraphDeps) -> GraphState:
    conversation = await deps.store.get_conversation(state["user_id"], state["session_id"])
    history: list[HistoryTurn] = []
    if conversation is not None:
        history = [HistoryTurn(type=m.type, content=m.content) for m in conversation.messages[-HISTORY_TURNS:]]
    return {"conversation": conversation, "history": history}


ResponseStrategy = Callable[[GraphState, GraphDeps], Awaitable[str]]


async def _answer_question(state: GraphState, deps: GraphDeps) -> str:
    context = answer_context(state.get("history", []), turns=ANSWER_CONTEXT_TURNS)
    return await deps.responder.answer_question(state["text"], context)


async def _context_reply(state: GraphState, deps: GraphDeps) -> str:
    return await deps.responder.generate_reply(
        state["text"], state["sentiment"], state["intent"], state.get("history", [])
    )


def response_ladder(state: GraphState) -> list[tuple[str, ResponseStrategy]]:
    """
    Remote strategies tried in order until one returns a reply.
    When all are unavailable the deterministic fallback table answers.
    """
    ladder: list[tuple[str, ResponseStrategy]] = []
    if wants_answer(state["text"], state["intent"]):
        ladder.append(("answer", _answer_question))
    ladder.append(("reply", _context_reply))
    return ladder


async def _generate_response(state: GraphState, deps: GraphDeps) -> GraphState:
    response: str | None = None
    for name, strategy in response_ladder(state):
        try:
            response = await strategy(state, deps)
        except (RemoteServiceUnavailable, NoProviderConfigured) as e:
            logger.info("[Pipeline] %s strategy unavailable: %s", name, e)
            continue
        break
    if response is None:
        name, response = "fallback", fallback_response(state["sentiment"], state["intent"])
    logger.info(
        "[Pipeline] Response via %s (intent: %s, emotion: %s)",
        name, state["intent"].category, state["sentiment"].emotion,
    )
    return {"response": response}


async def _persist(state: GraphState, deps: GraphDeps) -> GraphState:
    """Append the user/assistant pair and fold the turn into the context"""
    ts = _now_ms()
    sentiment = state["sentiment"]
    intent = state["intent"]
    user_message = Message(
        id=f"user_{ts}",
        type="user",
        content=state["text"],
        timestamp=ts,
        sentiment=sentiment,
        intent=intent,
    )
    assistant_message = Message(
        id=f"assistant_{ts + 1}",
        type="assistant",
        content=state["response"],
        timestamp=ts + 1,
    )

    conversation = state.get("conversation")
    if conversation is not None and conversation.id:
        context = merge_context(conversation.context, sentiment, intent)
        await deps.store.append_turn(conversation.id, [user_message, assistant_message], context)
    else:
        await deps.store.insert_conversation(
            Conversation(
                user_id=state["user_id"],
                session_id=state["session_id"],
                messages=[user_message, assistant_message],
                context=merge_context(None, sentiment, intent),
            )
        )
    return {"timestamp": ts}


def build_voice_graph(deps: GraphDeps):
    """
    Build LangGraph pipeline for one utterance.

    Flow:
    1. configure -> Load emotion model and intent rules from MongoDB
    2. score_sentiment / classify_intent -> run in the same step, both must finish
    3. load -> Load conversation state for (user, session)
    4. respond -> Q&A, context-aware reply, or deterministic fallback
    5. persist -> Append user + assistant messages and update context
    """
    g = StateGraph(GraphState)

    async def configure(state: GraphState) -> GraphState:
        return await _configure(state, deps)

    async def sentiment(state: GraphState) -> GraphState:
        return await _analyze_sentiment(state, deps)

    async def intent(state: GraphState) -> GraphState:
        return await _detect_intent(state, deps)

    async def load(state: GraphState) -> GraphState:
        return await _load_conversation(state, deps)

    async def respond(state: GraphState) -> GraphState:
        return await _generate_response(state, deps)

    async def persist(state: GraphState) -> GraphState:
        return await _persist(state, deps)

    g.add_node("configure", configure)
    g.add_node("score_sentiment", sentiment)
    g.add_node("classify_intent", intent)
    g.add_node("load", load)
    g.add_node("respond", respond)
    g.add_node("persist", persist)

    #                ┌─────────────────┐
    #            ┌──▶│ score_sentiment │──┐
    # ┌───────────┐  └─────────────────┘  │  ┌──────┐    ┌─────────┐    ┌─────────┐
    # │ configure │                       ├─▶│ load │───▶│ respond │───▶│ persist │
    # └───────────┘  ┌─────────────────┐  │  └──────┘    └─────────┘    └─────────┘
    #            └──▶│ classify_intent │──┘
    #                └─────────────────┘
    g.set_entry_point("configure")
    g.add_edge("configure", "score_sentiment")
    g.add_edge("configure", "classify_intent")
    g.add_edge(["score_sentiment", "classify_intent"], "load")
    g.add_edge("load", "respond")
    g.add_edge("respond", "persist")
    g.set_finish_point("persist")
    return g.compile()
