from __future__ import annotations

from typing import Iterable

from .schemas import Conversation, PerformanceMetrics


# Placeholder figure reported until response latency is persisted per turn.
# Not a measurement.
PLACEHOLDER_RESPONSE_LATENCY_MS = 1200


def summarize_conversations(conversations: Iterable[Conversation]) -> PerformanceMetrics:
    """Average reading confidences (x100) over user messages that carry both readings"""
    total_conversations = 0
    total_messages = 0
    sentiment_sum = 0.0
    intent_sum = 0.0

    for conversation in conversations:
        total_conversations += 1
        for message in conversation.messages:
            if message.type == "user" and message.sentiment and message.intent:
                total_messages += 1
                sentiment_sum += message.sentiment.confidence
                intent_sum += message.intent.confidence

    return PerformanceMetrics(
        total_conversations=total_conversations,
        total_messages=total_messages,
        avg_sentiment_accuracy=(sentiment_sum / total_messages) * 100 if total_messages else 0,
        avg_intent_accuracy=(intent_sum / total_messages) * 100 if total_messages else 0,
        avg_response_latency=PLACEHOLDER_RESPONSE_LATENCY_MS,
    )
