from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MessageType = Literal["user", "assistant"]

EMOTIONS = ("happy", "sad", "angry", "fear", "surprise", "neutral")


class CamelModel(BaseModel):
    """Documents and API payloads use camelCase keys, attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class EmotionKeywords(CamelModel):
    happy: list[str] = Field(default_factory=list)
    sad: list[str] = Field(default_factory=list)
    angry: list[str] = Field(default_factory=list)
    fear: list[str] = Field(default_factory=list)
    surprise: list[str] = Field(default_factory=list)
    neutral: list[str] = Field(default_factory=list)


class IntensityModifier(CamelModel):
    word: str
    multiplier: float


class EmotionModel(CamelModel):
    name: str
    emotion_keywords: EmotionKeywords
    intensity_modifiers: list[IntensityModifier] = Field(default_factory=list)


class EntityExtractor(CamelModel):
    type: str
    patterns: list[str]


class IntentRule(CamelModel):
    category: str
    patterns: list[str]
    responses: list[str] = Field(default_factory=list)
    entities: list[EntityExtractor] = Field(default_factory=list)
    required_confidence: float = Field(..., ge=0.0, le=1.0)


class SentimentReading(CamelModel):
    emotion: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    valence: float = Field(..., ge=-1.0, le=1.0, description="Negative to positive polarity (-1.0 to 1.0)")
    arousal: float = Field(..., ge=0.0, le=1.0, description="Calm to excited (0.0 to 1.0)")


class Entity(CamelModel):
    type: str
    value: str
    confidence: float


class IntentReading(CamelModel):
    category: str = "unknown"
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    entities: list[Entity] = Field(default_factory=list)


class Message(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: MessageType
    content: str
    timestamp: int  # epoch milliseconds
    sentiment: Optional[SentimentReading] = None  # user messages only
    intent: Optional[IntentReading] = None  # user messages only


class Preferences(CamelModel):
    response_style: str = "empathetic"  # "empathetic", "professional", "casual"
    verbosity: str = "detailed"  # "brief", "detailed"


class ConversationContext(CamelModel):
    user_mood: str
    conversation_topic: Optional[str] = None
    last_intent: Optional[str] = None
    preferences: Preferences = Field(default_factory=Preferences)


class Conversation(CamelModel):
    id: Optional[str] = None
    user_id: str
    session_id: str
    messages: list[Message] = Field(default_factory=list)
    context: ConversationContext


class HistoryTurn(BaseModel):
    type: MessageType
    content: str


class VoiceSettings(CamelModel):
    user_id: Optional[str] = None
    preferred_voice: str = "default"
    speech_rate: float = Field(0.9, gt=0.0, le=4.0)
    pitch: float = Field(1.0, ge=0.0, le=2.0)
    volume: float = Field(1.0, ge=0.0, le=1.0)


class ResultMetrics(CamelModel):
    sentiment_confidence: float
    intent_confidence: float
    response_latency: int


class VoiceInputRequest(CamelModel):
    text: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)


class VoiceInputResult(CamelModel):
    response: str
    sentiment: SentimentReading
    intent: IntentReading
    processing_time: int  # milliseconds
    metrics: ResultMetrics


class PerformanceMetrics(CamelModel):
    total_conversations: int
    total_messages: int
    avg_sentiment_accuracy: float
    avg_intent_accuracy: float
    avg_response_latency: int
