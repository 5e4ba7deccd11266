from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .schemas import HistoryTurn, IntentReading, SentimentReading


QUESTION_WORDS = ("what", "how", "when", "where", "why", "who")


def wants_answer(text: str, intent: IntentReading) -> bool:
    """Either signal alone routes the turn to open-domain Q&A."""
    lowered = (text or "").lower()
    return intent.category == "question" or any(word in lowered for word in QUESTION_WORDS)


def answer_system_prompt(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"""You are a helpful AI assistant. Provide accurate, concise, and informative answers to user questions.
If you don't know something, say so honestly. Keep responses conversational and natural for voice interaction.
Current date: {now.strftime("%Y-%m-%d")}
Current time: {now.strftime("%H:%M:%S")}"""


def answer_context(history: Sequence[HistoryTurn], turns: int = 3) -> str | None:
    """Most recent turns, newest last, as a single context line. None without history."""
    if not history:
        return None
    recent = "; ".join(f"{turn.type}: {turn.content}" for turn in history[-turns:])
    return f"Previous conversation: {recent}"


def reply_system_prompt(sentiment: SentimentReading, intent: IntentReading) -> str:
    """
    System prompt for context-aware replies.
    Embeds the numeric readings so the model can adapt tone to the user's state.
    """
    prompt = f"""You are an empathetic AI voice assistant. Respond naturally and adapt your tone based on the user's emotional state.

Current user emotion: {sentiment.emotion} (confidence: {sentiment.confidence:.2f})
Detected intent: {intent.category} (confidence: {intent.confidence:.2f})
Emotional valence: {sentiment.valence:.2f} (-1=negative, 1=positive)
Emotional arousal: {sentiment.arousal:.2f} (0=calm, 1=excited)

Guidelines:
- If the user seems sad or distressed, be empathetic and supportive
- If the user is happy or excited, match their energy
- If the user is angry or frustrated, be calm and understanding
- Keep responses conversational and natural
- Acknowledge their emotional state when appropriate
- Provide helpful responses based on their intent"""

    if intent.entities:
        entities = ", ".join(f"{e.type}: {e.value}" for e in intent.entities)
        prompt += f"\n\nDetected entities: {entities}"
    return prompt


def fallback_response(sentiment: SentimentReading, intent: IntentReading) -> str:
    """
    Deterministic offline responder, used when no provider produced a reply.
    Keyed by intent category first, then by valence.
    """
    if intent.category == "greeting":
        if sentiment.emotion == "sad":
            return (
                "Hello there. I can sense you might not be feeling your best today. "
                "I'm here if you need someone to talk to."
            )
        return "Hello! It's great to hear from you. How can I help you today?"
    if intent.category == "emotion_support":
        return (
            "I understand you're going through a difficult time. While I'm just an AI, "
            "I want you to know that your feelings are valid. Is there anything specific I can help you with?"
        )
    if intent.category == "question":
        return (
            "I'd love to help answer your question, but I'm having trouble accessing my knowledge base "
            "right now. Could you try asking again in a moment?"
        )
    if sentiment.valence < -0.3:
        return "I'm here to help, and I can sense this might be challenging for you. Let me know what you need."
    return "I'm here to help! What can I do for you?"
